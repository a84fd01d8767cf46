"""Group arithmetic: domain parameters, exponentiation and strong randomness."""

from __future__ import annotations

import json
import secrets
from dataclasses import dataclass
from typing import Dict

from .constants import ALPHA, BETA, IDENTIFIER_BYTES, MIN_IDENTIFIER_BYTES, P, Q


def _byte_length(value: int) -> int:
    return max(1, (value.bit_length() + 7) // 8)


@dataclass(frozen=True)
class DomainParameters:
    """Prime modulus, subgroup order and the two subgroup generators."""

    p: int
    q: int
    alpha: int
    beta: int

    @property
    def p_bytes(self) -> int:
        return _byte_length(self.p)

    @property
    def q_bytes(self) -> int:
        return _byte_length(self.q)

    def validate(self) -> "DomainParameters":
        """Check the subgroup relations, raising ``ValueError`` on mismatch.

        Primality of ``p`` and ``q`` is assumed, not tested.
        """

        if self.p < 3 or self.q < 2:
            raise ValueError("Modulus and order are too small")
        if (self.p - 1) % self.q != 0:
            raise ValueError("Subgroup order must divide p - 1")
        for name, generator in (("alpha", self.alpha), ("beta", self.beta)):
            if not 1 < generator < self.p:
                raise ValueError(f"Generator {name} outside of (1, p)")
            if pow(generator, self.q, self.p) != 1:
                raise ValueError(f"Generator {name} does not have order q")
        return self

    def to_dict(self) -> Dict[str, str]:
        return {
            "p": hex(self.p),
            "q": hex(self.q),
            "alpha": hex(self.alpha),
            "beta": hex(self.beta),
        }

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "DomainParameters":
        try:
            params = DomainParameters(
                p=int(data["p"], 16),
                q=int(data["q"], 16),
                alpha=int(data["alpha"], 16),
                beta=int(data["beta"], 16),
            )
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Incomplete domain parameters: {exc}") from exc
        return params.validate()


_DEFAULT_PARAMETERS = DomainParameters(p=P, q=Q, alpha=ALPHA, beta=BETA).validate()


def domain_parameters() -> DomainParameters:
    """Return the built-in, validated group parameters."""

    return _DEFAULT_PARAMETERS


def load_parameters(path: str) -> DomainParameters:
    """Load and validate domain parameters from a JSON file of hex strings."""

    with open(path, "r", encoding="utf-8") as handle:
        return DomainParameters.from_dict(json.load(handle))


def exponentiate(base: int, exponent: int, modulus: int) -> int:
    """Compute ``base ** exponent % modulus`` by square-and-multiply."""

    if modulus < 2:
        raise ValueError("Modulus must be greater than one")
    if exponent < 0:
        raise ValueError("Exponent must be non-negative")
    return pow(base, exponent, modulus)


def sample_below(bound: int) -> int:
    """Uniform value in ``[0, bound)`` from the operating system CSPRNG."""

    if bound <= 0:
        raise ValueError("Bound must be positive")
    return secrets.randbelow(bound)


def fresh_identifier(length: int = IDENTIFIER_BYTES) -> str:
    """Unpredictable URL-safe token carrying ``length`` random bytes."""

    if length < MIN_IDENTIFIER_BYTES:
        raise ValueError(f"Identifiers need at least {MIN_IDENTIFIER_BYTES} random bytes")
    return secrets.token_urlsafe(length)


__all__ = [
    "DomainParameters",
    "domain_parameters",
    "exponentiate",
    "fresh_identifier",
    "load_parameters",
    "sample_below",
]
