"""Prover side: derives the secret from a password and drives the exchange."""

from __future__ import annotations

import enum
import logging
from typing import Union

from .crypto import PublicCommitment, commit, derive_public_commitment, derive_secret, solve
from .errors import AuthError, MalformedInput
from .group import DomainParameters, domain_parameters
from .transport import Transport

logger = logging.getLogger(__name__)


class ProverState(enum.Enum):
    IDLE = "idle"
    REGISTERED = "registered"
    CHALLENGE_REQUESTED = "challenge-requested"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"


class Prover:
    """Holds nothing between attempts but the transport and the parameters.

    The secret and the nonce ``k`` live only inside one call.
    """

    def __init__(self, transport: Transport, params: DomainParameters | None = None) -> None:
        self.transport = transport
        self.params = params or domain_parameters()
        self.state = ProverState.IDLE

    def register(self, username: str, credential: Union[str, bytes]) -> PublicCommitment:
        secret = derive_secret(username, credential, self.params)
        commitment = derive_public_commitment(secret, self.params)
        self.transport.register(username, commitment.y1, commitment.y2)
        self.state = ProverState.REGISTERED
        logger.info("Registered %s", username)
        return commitment

    def authenticate(self, username: str, credential: Union[str, bytes]) -> str:
        """Run one commit/challenge/response cycle and return the session id."""

        secret = derive_secret(username, credential, self.params)
        ephemeral = commit(self.params)
        try:
            auth_id, challenge = self.transport.create_challenge(username, ephemeral.r1, ephemeral.r2)
            self.state = ProverState.CHALLENGE_REQUESTED
            if not 0 <= challenge < self.params.q:
                raise MalformedInput("Challenge outside of [0, q)")
            response = solve(ephemeral.nonce, challenge, secret, self.params.q)
            session_id = self.transport.verify_answer(auth_id, response)
        except AuthError as exc:
            self.state = ProverState.REJECTED
            logger.warning("Authentication of %s rejected: %s", username, exc.code)
            raise
        self.state = ProverState.AUTHENTICATED
        logger.info("Authenticated %s", username)
        return session_id


__all__ = ["Prover", "ProverState"]
