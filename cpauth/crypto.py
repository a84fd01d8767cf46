"""Core arithmetic of the Chaum-Pedersen equality-of-discrete-logs protocol."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Tuple, Union

from .group import DomainParameters, domain_parameters, exponentiate, sample_below


@dataclass
class PublicCommitment:
    """Registration values ``y1 = alpha^x`` and ``y2 = beta^x``."""

    y1: int
    y2: int


@dataclass
class EphemeralCommitment:
    """First move of the protocol together with the nonce that produced it."""

    r1: int
    r2: int
    nonce: int


@dataclass
class Transcript:
    """Public record of one protocol round."""

    r1: int
    r2: int
    challenge: int
    response: int


def derive_secret(
    username: str,
    credential: Union[str, bytes],
    params: DomainParameters | None = None,
) -> int:
    """Map a credential of any length to a secret exponent in ``[0, q)``.

    The username is mixed in as context so two accounts sharing a password do
    not publish the same commitment. SHAKE-256 is stretched 16 bytes past the
    size of ``q`` to keep the modular reduction bias negligible.
    """

    params = params or domain_parameters()
    if isinstance(credential, str):
        credential = credential.encode("utf-8")
    context = username.encode("utf-8")
    material = len(context).to_bytes(4, "big") + context + credential
    stream = hashlib.shake_256(material).digest(params.q_bytes + 16)
    return int.from_bytes(stream, "big") % params.q


def derive_public_commitment(secret: int, params: DomainParameters | None = None) -> PublicCommitment:
    params = params or domain_parameters()
    if not 0 <= secret < params.q:
        raise ValueError("Secret must lie in [0, q)")
    return PublicCommitment(
        y1=exponentiate(params.alpha, secret, params.p),
        y2=exponentiate(params.beta, secret, params.p),
    )


def commit(params: DomainParameters | None = None) -> EphemeralCommitment:
    """Draw a fresh nonce ``k`` and return ``(alpha^k, beta^k)``.

    A nonce must never answer two different challenges; callers discard the
    returned object after one attempt.
    """

    params = params or domain_parameters()
    nonce = sample_below(params.q)
    return EphemeralCommitment(
        r1=exponentiate(params.alpha, nonce, params.p),
        r2=exponentiate(params.beta, nonce, params.p),
        nonce=nonce,
    )


def solve(k: int, c: int, x: int, q: int) -> int:
    """Response ``s = (k - c*x) mod q`` computed without a negative intermediate."""

    cx = c * x
    if k >= cx:
        return (k - cx) % q
    # The outer reduction maps q itself back to 0 when c*x - k is a multiple of q.
    return (q - (cx - k) % q) % q


def verify(
    r1: int,
    r2: int,
    y1: int,
    y2: int,
    alpha: int,
    beta: int,
    c: int,
    s: int,
    p: int,
) -> bool:
    """Check ``r1 = alpha^s * y1^c`` and ``r2 = beta^s * y2^c`` modulo ``p``."""

    first = (exponentiate(alpha, s, p) * exponentiate(y1, c, p)) % p
    second = (exponentiate(beta, s, p) * exponentiate(y2, c, p)) % p
    return r1 == first and r2 == second


def verify_transcript(
    transcript: Transcript,
    commitment: PublicCommitment,
    params: DomainParameters | None = None,
) -> bool:
    params = params or domain_parameters()
    return verify(
        transcript.r1,
        transcript.r2,
        commitment.y1,
        commitment.y2,
        params.alpha,
        params.beta,
        transcript.challenge,
        transcript.response,
        params.p,
    )


def run_single_round(
    secret: int,
    commitment: PublicCommitment,
    params: DomainParameters | None = None,
) -> Tuple[bool, Transcript]:
    """Run one honest round in-process, returning the outcome and transcript."""

    params = params or domain_parameters()
    ephemeral = commit(params)
    challenge = sample_below(params.q)
    response = solve(ephemeral.nonce, challenge, secret, params.q)
    transcript = Transcript(
        r1=ephemeral.r1,
        r2=ephemeral.r2,
        challenge=challenge,
        response=response,
    )
    return verify_transcript(transcript, commitment, params), transcript


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
    "verify_transcript",
]
