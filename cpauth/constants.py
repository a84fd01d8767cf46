"""Default group parameters and protocol tunables."""

from __future__ import annotations

import hashlib

# RFC 3526, 2048-bit MODP group (group 14). P is a safe prime, P = 2Q + 1.
P = int(
    """
    FFFFFFFF FFFFFFFF C90FDAA2 2168C234 C4C6628B 80DC1CD1
    29024E08 8A67CC74 020BBEA6 3B139B22 514A0879 8E3404DD
    EF9519B3 CD3A431B 302B0A6D F25F1437 4FE1356D 6D51C245
    E485B576 625E7EC6 F44C42E9 A637ED6B 0BFF5CB6 F406B7ED
    EE386BFB 5A899FA5 AE9F2411 7C4B1FE6 49286651 ECE45B3D
    C2007CB8 A163BF05 98DA4836 1C55D39A 69163FA8 FD24CF5F
    83655D23 DCA3AD96 1C62F356 208552BB 9ED52907 7096966D
    670C354E 4ABC9804 F1746C08 CA18217C 32905E46 2E36CE3B
    E39E772C 180E8603 9B2783A2 EC07A28F B5C55DF0 6F4C52C9
    DE2BCBF6 95581718 3995497C EA956AE5 15D22618 98FA0510
    15728E5A 8AACAA68 FFFFFFFF FFFFFFFF
    """.replace(" ", "").replace("\n", ""),
    16,
)
Q = (P - 1) // 2

# P = 7 mod 8, so 2 is a quadratic residue and generates the order-Q subgroup.
ALPHA = 2

BETA_SEED = b"cpauth/chaum-pedersen/beta/v1"
# Squaring lands in the order-Q subgroup; nobody knows log_ALPHA(BETA).
BETA = pow(int.from_bytes(hashlib.sha256(BETA_SEED).digest(), "big"), 2, P)

# Size in bytes of auth ids and session ids (128 bits of entropy).
IDENTIFIER_BYTES = 16
MIN_IDENTIFIER_BYTES = 16

# Seconds an issued challenge stays answerable.
CHALLENGE_TTL = 120.0
# Minimum seconds between two lazy sweeps of expired challenges.
SWEEP_INTERVAL = 30.0
# Issued session ids kept before the oldest are forgotten.
MAX_SESSIONS = 100_000

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 50051
