"""Verifier side of the protocol: registration, challenges and proof checks."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .constants import CHALLENGE_TTL, MAX_SESSIONS, SWEEP_INTERVAL
from .crypto import verify
from .errors import ChallengeNotFound, InvalidProof, MalformedInput, UserNotFound
from .group import DomainParameters, domain_parameters, fresh_identifier, sample_below
from .store import ChallengeIndex, PendingChallenge, UserRecord, UserStore

logger = logging.getLogger(__name__)


@dataclass
class Session:
    username: str
    issued_at: float


class Verifier:
    """Protocol state machine owning every server-side record.

    Per user: ``Unregistered -> Registered -> ChallengeIssued -> Registered``.
    A pending challenge is consumed by exactly one ``verify_answer`` call,
    whatever its outcome. Locks are taken record first, index second.
    """

    def __init__(
        self,
        params: DomainParameters | None = None,
        store: UserStore | None = None,
        *,
        challenge_ttl: float = CHALLENGE_TTL,
        sweep_interval: float = SWEEP_INTERVAL,
        max_sessions: int = MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if challenge_ttl <= 0:
            raise ValueError("Challenge TTL must be positive")
        if max_sessions < 1:
            raise ValueError("At least one session must be retained")
        self.params = params or domain_parameters()
        self.store = store if store is not None else UserStore()
        self.index = ChallengeIndex()
        self.challenge_ttl = challenge_ttl
        self.sweep_interval = sweep_interval
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._sessions_lock = threading.Lock()
        self._sweep_lock = threading.Lock()
        self._last_sweep = clock()

    def _check_username(self, username: str) -> None:
        if not username:
            raise MalformedInput("Username must not be empty")

    def _check_element(self, name: str, value: int) -> None:
        if not 0 < value < self.params.p:
            raise MalformedInput(f"{name} outside of [1, p)")

    def _expired(self, pending: PendingChallenge, now: float) -> bool:
        return now - pending.issued_at > self.challenge_ttl

    def register(self, username: str, y1: int, y2: int) -> None:
        """Create or replace the commitment for ``username``.

        Re-registration drops any pending challenge of the previous commitment.
        """

        self._check_username(username)
        self._check_element("y1", y1)
        self._check_element("y2", y2)
        logger.info("Processing registration for %s", username)

        fresh = UserRecord(username=username, y1=y1, y2=y2)
        record = self.store.setdefault(fresh)
        if record is not fresh:
            with record.lock:
                record.y1 = y1
                record.y2 = y2
                superseded, record.pending = record.pending, None
                if superseded is not None:
                    self.index.discard(superseded.auth_id)
            logger.info("Replaced existing commitment for %s", username)
        try:
            self.store.persist()
        except OSError:
            # The in-memory record stays authoritative until the next successful write.
            logger.exception("Could not persist registration for %s", username)

    def create_challenge(self, username: str, r1: int, r2: int) -> Tuple[str, int]:
        """Bind a fresh challenge to ``(r1, r2)`` and return ``(auth_id, c)``."""

        self._check_username(username)
        self._check_element("r1", r1)
        self._check_element("r2", r2)
        self._maybe_sweep()

        record = self.store.get(username)
        if record is None:
            logger.warning("Challenge requested for unknown user %s", username)
            raise UserNotFound(f"User {username} not found")

        c = sample_below(self.params.q)
        auth_id = fresh_identifier()
        with record.lock:
            superseded = record.pending
            record.pending = PendingChallenge(
                auth_id=auth_id,
                r1=r1,
                r2=r2,
                c=c,
                issued_at=self._clock(),
            )
            if superseded is not None:
                self.index.discard(superseded.auth_id)
            self.index.insert(auth_id, username)
        logger.info("Issued challenge %s for %s", auth_id, username)
        return auth_id, c

    def verify_answer(self, auth_id: str, s: int) -> str:
        """Consume the challenge behind ``auth_id`` and check the response.

        Returns a new session id on success. The challenge is gone afterwards
        on every path except a malformed ``s``, which is rejected first.
        """

        if not 0 <= s < self.params.q:
            raise MalformedInput("s outside of [0, q)")

        username = self.index.pop(auth_id)
        if username is None:
            logger.warning("Answer for unknown challenge %s", auth_id)
            raise ChallengeNotFound(f"AuthId {auth_id} not found")

        record = self.store.get(username)
        if record is None:
            logger.error("Challenge %s refers to missing user %s", auth_id, username)
            raise ChallengeNotFound(f"AuthId {auth_id} not found")

        with record.lock:
            pending = record.pending
            if pending is None or pending.auth_id != auth_id:
                logger.warning("Challenge %s for %s is no longer pending", auth_id, username)
                raise ChallengeNotFound(f"AuthId {auth_id} not found")
            record.pending = None
            y1, y2 = record.y1, record.y2

        if self._expired(pending, self._clock()):
            logger.warning("Challenge %s for %s expired", auth_id, username)
            raise ChallengeNotFound(f"AuthId {auth_id} expired")

        params = self.params
        if not verify(pending.r1, pending.r2, y1, y2, params.alpha, params.beta, pending.c, s, params.p):
            logger.warning("Wrong challenge solution for %s", username)
            raise InvalidProof(f"AuthId {auth_id} bad solution to the challenge")

        session_id = fresh_identifier()
        with self._sessions_lock:
            self._sessions[session_id] = Session(username=username, issued_at=self._clock())
            # Dicts keep insertion order, so the first key is the oldest session.
            while len(self._sessions) > self.max_sessions:
                del self._sessions[next(iter(self._sessions))]
        logger.info("Correct challenge solution for %s", username)
        return session_id

    def session_owner(self, session_id: str) -> Optional[str]:
        with self._sessions_lock:
            session = self._sessions.get(session_id)
        return session.username if session is not None else None

    def sweep_expired(self) -> int:
        """Drop every pending challenge older than the TTL; return how many."""

        now = self._clock()
        purged = 0
        for record in self.store.records():
            with record.lock:
                pending = record.pending
                if pending is not None and self._expired(pending, now):
                    record.pending = None
                    self.index.discard(pending.auth_id)
                    purged += 1
        if purged:
            logger.info("Purged %d expired challenges", purged)
        return purged

    def _maybe_sweep(self) -> None:
        now = self._clock()
        with self._sweep_lock:
            if now - self._last_sweep < self.sweep_interval:
                return
            self._last_sweep = now
        self.sweep_expired()


__all__ = ["Session", "Verifier"]
