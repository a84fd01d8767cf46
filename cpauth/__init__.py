"""Chaum-Pedersen zero-knowledge password authentication."""

from .crypto import (
    EphemeralCommitment,
    PublicCommitment,
    Transcript,
    commit,
    derive_public_commitment,
    derive_secret,
    run_single_round,
    solve,
    verify,
)
from .errors import AuthError, ChallengeNotFound, InvalidProof, MalformedInput, UserNotFound
from .group import (
    DomainParameters,
    domain_parameters,
    exponentiate,
    fresh_identifier,
    load_parameters,
    sample_below,
)
from .prover import Prover, ProverState
from .store import ChallengeIndex, PendingChallenge, UserRecord, UserStore
from .transport import HttpTransport, LocalTransport, Transport
from .verifier import Verifier

__all__ = [
    "EphemeralCommitment",
    "PublicCommitment",
    "Transcript",
    "commit",
    "derive_public_commitment",
    "derive_secret",
    "run_single_round",
    "solve",
    "verify",
    "AuthError",
    "ChallengeNotFound",
    "InvalidProof",
    "MalformedInput",
    "UserNotFound",
    "DomainParameters",
    "domain_parameters",
    "exponentiate",
    "fresh_identifier",
    "load_parameters",
    "sample_below",
    "Prover",
    "ProverState",
    "ChallengeIndex",
    "PendingChallenge",
    "UserRecord",
    "UserStore",
    "HttpTransport",
    "LocalTransport",
    "Transport",
    "Verifier",
]
