"""Typed, recoverable failures reported by the verifier."""

from __future__ import annotations


class AuthError(Exception):
    """Base class for protocol failures reported back to the prover."""

    code = "AuthError"


class UserNotFound(AuthError):
    """A challenge was requested for a username that never registered."""

    code = "UserNotFound"


class ChallengeNotFound(AuthError):
    """The auth id is unknown, expired, superseded or already consumed."""

    code = "ChallengeNotFound"


class InvalidProof(AuthError):
    """The verification equations did not hold."""

    code = "InvalidProof"


class MalformedInput(AuthError):
    """A numeric field is too long or outside its allowed range."""

    code = "MalformedInput"


ERRORS_BY_CODE = {
    cls.code: cls for cls in (UserNotFound, ChallengeNotFound, InvalidProof, MalformedInput)
}


__all__ = [
    "AuthError",
    "ChallengeNotFound",
    "ERRORS_BY_CODE",
    "InvalidProof",
    "MalformedInput",
    "UserNotFound",
]
