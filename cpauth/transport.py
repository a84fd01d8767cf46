"""Transports carrying the three prover requests to a verifier."""

from __future__ import annotations

from typing import Dict, Tuple

import httpx

from .errors import ERRORS_BY_CODE
from .group import DomainParameters, domain_parameters
from .verifier import Verifier
from .wire import decode_hex, encode_hex


class Transport:
    """Request/response surface the prover talks to."""

    def register(self, username: str, y1: int, y2: int) -> None:
        raise NotImplementedError

    def create_challenge(self, username: str, r1: int, r2: int) -> Tuple[str, int]:
        raise NotImplementedError

    def verify_answer(self, auth_id: str, s: int) -> str:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class LocalTransport(Transport):
    """Calls straight into an in-process verifier."""

    def __init__(self, verifier: Verifier) -> None:
        self.verifier = verifier

    def register(self, username: str, y1: int, y2: int) -> None:
        self.verifier.register(username, y1, y2)

    def create_challenge(self, username: str, r1: int, r2: int) -> Tuple[str, int]:
        return self.verifier.create_challenge(username, r1, r2)

    def verify_answer(self, auth_id: str, s: int) -> str:
        return self.verifier.verify_answer(auth_id, s)


class HttpTransport(Transport):
    """JSON over HTTP against :mod:`cpauth.server`.

    Either a ``base_url`` or a ready ``httpx.Client`` (for example FastAPI's
    ``TestClient``) must be supplied. Only a client created here is closed.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.Client | None = None,
        params: DomainParameters | None = None,
        timeout: float = 10.0,
    ) -> None:
        if client is None:
            if base_url is None:
                raise ValueError("Either base_url or client is required")
            client = httpx.Client(base_url=base_url, timeout=timeout)
            self._owns_client = True
        else:
            self._owns_client = False
        self.client = client
        self.params = params or domain_parameters()

    def _post(self, path: str, payload: Dict[str, str]) -> Dict[str, str]:
        response = self.client.post(path, json=payload)
        if response.is_success:
            return response.json()
        try:
            detail = response.json().get("detail")
        except ValueError:
            detail = None
        if isinstance(detail, dict) and detail.get("error") in ERRORS_BY_CODE:
            raise ERRORS_BY_CODE[detail["error"]](detail.get("message", ""))
        response.raise_for_status()
        raise httpx.HTTPError(f"Unexpected response status {response.status_code}")

    def register(self, username: str, y1: int, y2: int) -> None:
        self._post("/register", {"username": username, "y1": encode_hex(y1), "y2": encode_hex(y2)})

    def create_challenge(self, username: str, r1: int, r2: int) -> Tuple[str, int]:
        data = self._post(
            "/challenge",
            {"username": username, "r1": encode_hex(r1), "r2": encode_hex(r2)},
        )
        return data["auth_id"], decode_hex(data["c"], self.params.q_bytes)

    def verify_answer(self, auth_id: str, s: int) -> str:
        data = self._post("/answer", {"auth_id": auth_id, "s": encode_hex(s)})
        return data["session_id"]

    def close(self) -> None:
        if self._owns_client:
            self.client.close()


__all__ = ["HttpTransport", "LocalTransport", "Transport"]
