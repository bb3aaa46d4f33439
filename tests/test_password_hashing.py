"""Tests for bcrypt password hashing and verification."""

from __future__ import annotations

import sys
import unittest
from pathlib import Path


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from authservice.passwords import PasswordHasher


class PasswordHashingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_and_verify_round_trip(self) -> None:
        hashed = self.hasher.hash("supersecurepassword")
        self.assertTrue(hashed.startswith("$2b$04$"))
        self.assertNotIn("supersecurepassword", hashed)
        self.assertTrue(self.hasher.verify("supersecurepassword", hashed))
        self.assertFalse(self.hasher.verify("incorrect", hashed))

    def test_hash_is_salted_per_call(self) -> None:
        first = self.hasher.hash("samepassword")
        second = self.hasher.hash("samepassword")
        self.assertNotEqual(first, second)
        self.assertTrue(self.hasher.verify("samepassword", first))
        self.assertTrue(self.hasher.verify("samepassword", second))

    def test_malformed_digest_never_matches(self) -> None:
        for digest in ("", "plaintext", "$2b$04$tooshort", "pbkdf2_sha256$1$abc$def"):
            with self.subTest(digest=digest):
                self.assertFalse(self.hasher.verify("anything", digest))

    def test_non_string_inputs_are_rejected(self) -> None:
        hashed = self.hasher.hash("password")
        self.assertFalse(self.hasher.verify(None, hashed))  # type: ignore[arg-type]
        self.assertFalse(self.hasher.verify("password", None))  # type: ignore[arg-type]

    def test_empty_password_cannot_be_hashed(self) -> None:
        with self.assertRaises(ValueError):
            self.hasher.hash("")

    def test_needs_rehash_tracks_work_factor(self) -> None:
        weak = self.hasher.hash("password")
        stronger = PasswordHasher(rounds=5)
        self.assertFalse(self.hasher.needs_rehash(weak))
        self.assertTrue(stronger.needs_rehash(weak))
        self.assertTrue(stronger.verify("password", weak))
        self.assertTrue(self.hasher.needs_rehash("not-a-hash"))


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
