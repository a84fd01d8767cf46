"""Concurrent record table for the verifier, optionally persisted as JSON."""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class PendingChallenge:
    """Outstanding challenge bound to one ephemeral commitment."""

    auth_id: str
    r1: int
    r2: int
    c: int
    issued_at: float


@dataclass
class UserRecord:
    """Registered commitment plus at most one pending challenge.

    ``lock`` guards ``y1``, ``y2`` and ``pending``; read-modify-write on any
    of them happens with it held.
    """

    username: str
    y1: int
    y2: int
    pending: Optional[PendingChallenge] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def to_dict(self) -> Dict[str, str]:
        return {
            "username": self.username,
            "y1": hex(self.y1),
            "y2": hex(self.y2),
        }

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "UserRecord":
        return UserRecord(
            username=data["username"],
            y1=int(data["y1"], 16),
            y2=int(data["y2"], 16),
        )


class UserStore:
    """Username to record table.

    The table lock is only held for lookups and inserts; per-user work takes
    the record's own lock so unrelated users never contend.
    """

    def __init__(self, path: str | None = None) -> None:
        self.path = path
        self._records: Dict[str, UserRecord] = {}
        self._lock = threading.Lock()
        self._persist_lock = threading.Lock()
        if path is not None:
            self._ensure_file()
            for raw_user in self._load().get("users", []):
                record = UserRecord.from_dict(raw_user)
                self._records[record.username] = record

    def _ensure_file(self) -> None:
        if not os.path.exists(self.path):
            with open(self.path, "w", encoding="utf-8") as handle:
                json.dump({"users": []}, handle, indent=2)

    def _load(self) -> Dict[str, list]:
        with open(self.path, "r", encoding="utf-8") as handle:
            return json.load(handle)

    def _save(self, payload: Dict[str, list]) -> None:
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2)
        os.replace(tmp_path, self.path)

    def get(self, username: str) -> Optional[UserRecord]:
        with self._lock:
            return self._records.get(username)

    def setdefault(self, record: UserRecord) -> UserRecord:
        """Insert ``record`` unless the username exists; return the stored record."""

        with self._lock:
            return self._records.setdefault(record.username, record)

    def records(self) -> List[UserRecord]:
        with self._lock:
            return list(self._records.values())

    def usernames(self) -> List[str]:
        with self._lock:
            return sorted(self._records)

    def persist(self) -> None:
        """Write every registered commitment to disk. Pending state is never saved."""

        if self.path is None:
            return
        with self._persist_lock:
            users = []
            for record in self.records():
                with record.lock:
                    users.append(record.to_dict())
            users.sort(key=lambda raw_user: raw_user["username"])
            self._save({"users": users})

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __contains__(self, username: object) -> bool:
        with self._lock:
            return username in self._records


class ChallengeIndex:
    """Map from outstanding auth id to the username that owns it."""

    def __init__(self) -> None:
        self._owners: Dict[str, str] = {}
        self._lock = threading.Lock()

    def insert(self, auth_id: str, username: str) -> None:
        with self._lock:
            self._owners[auth_id] = username

    def pop(self, auth_id: str) -> Optional[str]:
        with self._lock:
            return self._owners.pop(auth_id, None)

    def discard(self, auth_id: str) -> None:
        with self._lock:
            self._owners.pop(auth_id, None)

    def __contains__(self, auth_id: object) -> bool:
        with self._lock:
            return auth_id in self._owners

    def __len__(self) -> int:
        with self._lock:
            return len(self._owners)


__all__ = ["ChallengeIndex", "PendingChallenge", "UserRecord", "UserStore"]
