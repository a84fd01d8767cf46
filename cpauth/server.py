"""FastAPI-powered Chaum-Pedersen authentication service."""

from __future__ import annotations

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import AuthError, ChallengeNotFound, InvalidProof, MalformedInput, UserNotFound
from .verifier import Verifier
from .wire import decode_hex, encode_hex

_STATUS_CODES = {
    MalformedInput: 400,
    UserNotFound: 404,
    ChallengeNotFound: 404,
    InvalidProof: 403,
}


class RegisterRequest(BaseModel):
    username: str
    y1: str
    y2: str


class RegisterResponse(BaseModel):
    pass


class ChallengeRequest(BaseModel):
    username: str
    r1: str
    r2: str


class ChallengeResponse(BaseModel):
    auth_id: str
    c: str


class AnswerRequest(BaseModel):
    auth_id: str
    s: str


class AnswerResponse(BaseModel):
    session_id: str


class SessionResponse(BaseModel):
    username: str


def _http_error(exc: AuthError) -> HTTPException:
    return HTTPException(
        status_code=_STATUS_CODES.get(type(exc), 400),
        detail={"error": exc.code, "message": str(exc)},
    )


def create_app(verifier: Verifier | None = None) -> FastAPI:
    """Build the service around ``verifier``.

    Handlers are plain functions, so FastAPI runs each request on its worker
    thread pool and the verifier's locks are never held across an await.
    """

    verifier = verifier or Verifier()
    params = verifier.params
    app = FastAPI(title="CPAuth", description="Chaum-Pedersen password authentication")
    app.state.verifier = verifier

    @app.exception_handler(RequestValidationError)
    def malformed_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in exc.errors())
        return JSONResponse(
            status_code=400,
            content={"detail": {"error": MalformedInput.code, "message": f"Invalid request fields: {fields}"}},
        )

    @app.post("/register", response_model=RegisterResponse)
    def register(request: RegisterRequest) -> RegisterResponse:
        try:
            y1 = decode_hex(request.y1, params.p_bytes)
            y2 = decode_hex(request.y2, params.p_bytes)
            verifier.register(request.username, y1, y2)
        except AuthError as exc:
            raise _http_error(exc) from exc
        return RegisterResponse()

    @app.post("/challenge", response_model=ChallengeResponse)
    def create_challenge(request: ChallengeRequest) -> ChallengeResponse:
        try:
            r1 = decode_hex(request.r1, params.p_bytes)
            r2 = decode_hex(request.r2, params.p_bytes)
            auth_id, c = verifier.create_challenge(request.username, r1, r2)
        except AuthError as exc:
            raise _http_error(exc) from exc
        return ChallengeResponse(auth_id=auth_id, c=encode_hex(c))

    @app.post("/answer", response_model=AnswerResponse)
    def verify_answer(request: AnswerRequest) -> AnswerResponse:
        try:
            s = decode_hex(request.s, params.q_bytes)
            session_id = verifier.verify_answer(request.auth_id, s)
        except AuthError as exc:
            raise _http_error(exc) from exc
        return AnswerResponse(session_id=session_id)

    @app.get("/session/{session_id}", response_model=SessionResponse)
    def session(session_id: str) -> SessionResponse:
        username = verifier.session_owner(session_id)
        if username is None:
            raise HTTPException(status_code=404, detail="Unknown session")
        return SessionResponse(username=username)

    return app


__all__ = ["create_app"]
