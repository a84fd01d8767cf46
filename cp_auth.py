"""Command line interface for Chaum-Pedersen password authentication."""

from __future__ import annotations

import argparse
import getpass
import json
import logging
import sys

import httpx
import uvicorn

from cpauth.constants import CHALLENGE_TTL, DEFAULT_HOST, DEFAULT_PORT
from cpauth.errors import AuthError
from cpauth.group import DomainParameters, domain_parameters, load_parameters
from cpauth.prover import Prover
from cpauth.server import create_app
from cpauth.store import UserStore
from cpauth.transport import HttpTransport
from cpauth.verifier import Verifier

DEFAULT_SERVER = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--params",
        help="JSON file with hex-encoded p, q, alpha and beta (default: built-in 2048-bit group)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the verifier service")
    serve_parser.add_argument("--host", default=DEFAULT_HOST)
    serve_parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    serve_parser.add_argument(
        "--store",
        help="Optional JSON file persisting registered commitments",
    )
    serve_parser.add_argument(
        "--challenge-ttl",
        type=float,
        default=CHALLENGE_TTL,
        help=f"Seconds a challenge stays answerable (default: {CHALLENGE_TTL:g})",
    )

    for name, help_text in (
        ("register", "Register a username and password with the verifier"),
        ("login", "Prove knowledge of the password and obtain a session id"),
    ):
        client_parser = subparsers.add_parser(name, help=help_text)
        client_parser.add_argument("username", nargs="?", help="Prompted for when omitted")
        client_parser.add_argument(
            "--password",
            help="Password; prompted for without echo when omitted",
        )
        client_parser.add_argument(
            "--server",
            default=DEFAULT_SERVER,
            help=f"Verifier base URL (default: {DEFAULT_SERVER})",
        )

    subparsers.add_parser("params", help="Print the domain parameters in use")

    return parser.parse_args(argv)


def load_domain(path: str | None) -> DomainParameters:
    return load_parameters(path) if path else domain_parameters()


def _credentials(namespace: argparse.Namespace) -> tuple[str, str]:
    username = namespace.username or input("Please provide the username: ").strip()
    password = namespace.password
    if password is None:
        password = getpass.getpass("Please provide the password: ")
    return username, password


def serve(namespace: argparse.Namespace, params: DomainParameters) -> int:
    verifier = Verifier(
        params=params,
        store=UserStore(namespace.store) if namespace.store else None,
        challenge_ttl=namespace.challenge_ttl,
    )
    logging.getLogger(__name__).info("Running the server on %s:%d", namespace.host, namespace.port)
    uvicorn.run(
        create_app(verifier),
        host=namespace.host,
        port=namespace.port,
        log_level=namespace.log_level.lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    namespace = parse_args(argv if argv is not None else sys.argv[1:])
    logging.basicConfig(level=namespace.log_level, format=LOG_FORMAT)

    try:
        params = load_domain(namespace.params)
    except (OSError, ValueError) as exc:
        print(f"Invalid domain parameters: {exc}", file=sys.stderr)
        return 1

    if namespace.command == "params":
        print(json.dumps(params.to_dict(), indent=2))
        return 0

    if namespace.command == "serve":
        return serve(namespace, params)

    username, password = _credentials(namespace)
    with HttpTransport(namespace.server, params=params) as transport:
        prover = Prover(transport, params)
        try:
            if namespace.command == "register":
                prover.register(username, password)
                payload = {"username": username, "registered": True}
            else:
                session_id = prover.authenticate(username, password)
                payload = {"username": username, "session_id": session_id}
        except AuthError as exc:
            print(json.dumps({"username": username, "error": exc.code, "message": str(exc)}, indent=2))
            return 1
        except httpx.HTTPError as exc:
            print(f"Request to the verifier at {namespace.server} failed: {exc}", file=sys.stderr)
            return 1
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
