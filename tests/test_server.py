import unittest

import httpx
from fastapi.testclient import TestClient

from cpauth.crypto import solve
from cpauth.errors import ChallengeNotFound, InvalidProof, MalformedInput, UserNotFound
from cpauth.group import DomainParameters
from cpauth.prover import Prover
from cpauth.server import create_app
from cpauth.transport import HttpTransport
from cpauth.verifier import Verifier

TOY = DomainParameters(p=23, q=11, alpha=4, beta=9)


class TestHttpEndpoints(unittest.TestCase):
    def setUp(self) -> None:
        self.verifier = Verifier(params=TOY)
        self.client = TestClient(create_app(self.verifier))

    def register_alice(self) -> None:
        response = self.client.post("/register", json={"username": "alice", "y1": "02", "y2": "03"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {})

    def test_worked_example_over_http(self) -> None:
        self.register_alice()
        response = self.client.post("/challenge", json={"username": "alice", "r1": "08", "r2": "04"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        c = int(body["c"], 16)
        s = solve(7, c, 6, TOY.q)

        response = self.client.post("/answer", json={"auth_id": body["auth_id"], "s": f"{s:02x}"})
        self.assertEqual(response.status_code, 200)
        session_id = response.json()["session_id"]

        response = self.client.get(f"/session/{session_id}")
        self.assertEqual(response.json(), {"username": "alice"})

        response = self.client.post("/answer", json={"auth_id": body["auth_id"], "s": f"{s:02x}"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"], "ChallengeNotFound")

    def test_unknown_user(self) -> None:
        response = self.client.post("/challenge", json={"username": "nobody", "r1": "08", "r2": "04"})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"]["error"], "UserNotFound")

    def test_oversized_field(self) -> None:
        response = self.client.post("/register", json={"username": "alice", "y1": "0102", "y2": "03"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"], "MalformedInput")
        self.assertNotIn("alice", self.verifier.store)

    def test_non_hex_field(self) -> None:
        self.register_alice()
        response = self.client.post("/challenge", json={"username": "alice", "r1": "zz", "r2": "04"})
        self.assertEqual(response.status_code, 400)

    def test_wrong_answer(self) -> None:
        self.register_alice()
        body = self.client.post("/challenge", json={"username": "alice", "r1": "08", "r2": "04"}).json()
        s = (solve(7, int(body["c"], 16), 6, TOY.q) + 1) % TOY.q
        response = self.client.post("/answer", json={"auth_id": body["auth_id"], "s": f"{s:02x}"})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["detail"]["error"], "InvalidProof")

    def test_wrong_json_shape_is_malformed(self) -> None:
        response = self.client.post("/register", json={"username": "alice", "y1": 2, "y2": "03"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"], "MalformedInput")
        self.assertNotIn("alice", self.verifier.store)

        response = self.client.post("/answer", json={"auth_id": "abc"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"], "MalformedInput")
        self.assertIn("body.s", response.json()["detail"]["message"])

    def test_oversized_answer_keeps_challenge(self) -> None:
        self.register_alice()
        body = self.client.post("/challenge", json={"username": "alice", "r1": "08", "r2": "04"}).json()
        response = self.client.post("/answer", json={"auth_id": body["auth_id"], "s": "0102"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"]["error"], "MalformedInput")

        s = solve(7, int(body["c"], 16), 6, TOY.q)
        response = self.client.post("/answer", json={"auth_id": body["auth_id"], "s": f"{s:02x}"})
        self.assertEqual(response.status_code, 200)

    def test_unknown_session(self) -> None:
        self.assertEqual(self.client.get("/session/unknown").status_code, 404)


class TestHttpTransport(unittest.TestCase):
    def setUp(self) -> None:
        self.verifier = Verifier()
        self.client = TestClient(create_app(self.verifier))
        self.transport = HttpTransport(client=self.client)
        self.prover = Prover(self.transport)

    def test_end_to_end(self) -> None:
        self.prover.register("alice", "correct horse battery staple")
        session_id = self.prover.authenticate("alice", "correct horse battery staple")
        self.assertTrue(session_id)
        self.assertEqual(self.verifier.session_owner(session_id), "alice")

    def test_errors_are_typed(self) -> None:
        with self.assertRaises(UserNotFound):
            self.prover.authenticate("alice", "pw")
        self.prover.register("alice", "pw")
        with self.assertRaises(InvalidProof):
            self.prover.authenticate("alice", "not the password")
        with self.assertRaises(ChallengeNotFound):
            self.transport.verify_answer("stale", 1)
        with self.assertRaises(MalformedInput):
            self.transport.register("bob", 0, 1)

    def test_superseded_challenge(self) -> None:
        self.prover.register("alice", "pw")
        first_id, _ = self.transport.create_challenge("alice", 2, 4)
        self.transport.create_challenge("alice", 2, 4)
        with self.assertRaises(ChallengeNotFound):
            self.transport.verify_answer(first_id, 0)

    def test_wrong_json_shape_is_typed(self) -> None:
        with self.assertRaises(MalformedInput):
            self.transport._post("/register", {"username": "alice"})
        self.assertNotIn("alice", self.verifier.store)

    def test_oversized_challenge_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"auth_id": "abc", "c": "0102"})

        client = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://verifier")
        with HttpTransport(client=client, params=TOY) as transport:
            with self.assertRaises(MalformedInput):
                transport.create_challenge("alice", 8, 4)
        client.close()

    def test_requires_endpoint(self) -> None:
        with self.assertRaises(ValueError):
            HttpTransport()


if __name__ == "__main__":
    unittest.main()
