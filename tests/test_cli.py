import contextlib
import io
import json
import os
import tempfile
import unittest
from typing import List, Tuple

import cp_auth
from cpauth.group import domain_parameters


class TestCommandLine(unittest.TestCase):
    def run_main(self, argv: List[str]) -> Tuple[int, str, str]:
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            code = cp_auth.main(argv)
        return code, stdout.getvalue(), stderr.getvalue()

    def test_prints_default_parameters(self) -> None:
        code, out, _ = self.run_main(["params"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out), domain_parameters().to_dict())

    def test_loads_parameter_file(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "params.json")
            with open(path, "w", encoding="utf-8") as handle:
                json.dump({"p": "0x17", "q": "0xb", "alpha": "0x4", "beta": "0x9"}, handle)
            code, out, _ = self.run_main(["--params", path, "params"])
        self.assertEqual(code, 0)
        self.assertEqual(json.loads(out)["p"], "0x17")

    def test_rejects_invalid_parameters(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "params.json")
            with open(path, "w", encoding="utf-8") as handle:
                json.dump({"p": "0x17", "q": "0x7", "alpha": "0x4", "beta": "0x9"}, handle)
            code, _, err = self.run_main(["--params", path, "params"])
        self.assertEqual(code, 1)
        self.assertIn("Invalid domain parameters", err)

    def test_client_options(self) -> None:
        namespace = cp_auth.parse_args(["login", "alice", "--password", "pw", "--server", "http://verifier:8000"])
        self.assertEqual(namespace.command, "login")
        self.assertEqual(namespace.username, "alice")
        self.assertEqual(namespace.server, "http://verifier:8000")

    def test_serve_defaults(self) -> None:
        namespace = cp_auth.parse_args(["serve"])
        self.assertEqual((namespace.host, namespace.port), ("127.0.0.1", 50051))
        self.assertIsNone(namespace.store)


if __name__ == "__main__":
    unittest.main()
