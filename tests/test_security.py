"""Unit tests for app.core.security: password hashing, session tokens, signing-secret resolution."""

import unittest
from datetime import timedelta
from types import SimpleNamespace

import jwt

from app.core.config import Settings
from app.core.errors import ExpiredToken, InvalidToken, MalformedToken
from app.core.security import (
    INSECURE_FALLBACK_SECRET,
    InsecureConfigurationError,
    create_access_token,
    decode_access_token,
    get_signing_secret,
    hash_password,
    resolve_signing_secret,
    verify_password,
)

from tests import support  # noqa: F401  (lowers bcrypt cost)


def _user(**overrides: object) -> SimpleNamespace:
    fields = {"id": 7, "role": "employer", "name": "Erin Employer"}
    fields.update(overrides)
    return SimpleNamespace(**fields)


class TestPasswordHashing(unittest.TestCase):
    def test_hash_verifies_and_is_not_plaintext(self) -> None:
        hashed = hash_password("s3cret-pass")
        self.assertNotEqual(hashed, "s3cret-pass")
        self.assertTrue(verify_password("s3cret-pass", hashed))
        self.assertFalse(verify_password("wrong-pass", hashed))

    def test_malformed_hash_is_a_mismatch_not_an_error(self) -> None:
        self.assertFalse(verify_password("anything", "not-a-bcrypt-hash"))

    def test_missing_hash_is_a_mismatch(self) -> None:
        self.assertFalse(verify_password("anything", None))
        self.assertFalse(verify_password("anything", ""))


class TestSessionTokens(unittest.TestCase):
    def test_token_carries_id_role_and_name(self) -> None:
        token = create_access_token(_user())
        claims = decode_access_token(token)
        self.assertEqual(claims["id"], 7)
        self.assertEqual(claims["role"], "employer")
        self.assertEqual(claims["name"], "Erin Employer")

    def test_default_validity_is_one_hour(self) -> None:
        claims = decode_access_token(create_access_token(_user()))
        self.assertEqual(claims["exp"] - claims["iat"], 3600)

    def test_expired_token_rejected(self) -> None:
        token = create_access_token(_user(), expires_delta=timedelta(seconds=-5))
        with self.assertRaises(ExpiredToken):
            decode_access_token(token)

    def test_foreign_signature_rejected(self) -> None:
        forged = jwt.encode(
            {"id": 7, "role": "admin", "name": "x", "iat": 0, "exp": 4102444800},
            "some-other-secret",
            algorithm="HS256",
        )
        with self.assertRaises(InvalidToken):
            decode_access_token(forged)

    def test_garbage_token_is_malformed(self) -> None:
        with self.assertRaises(MalformedToken):
            decode_access_token("definitely.not.a-jwt")

    def test_missing_claims_is_malformed(self) -> None:
        partial = jwt.encode(
            {"id": 7, "exp": 4102444800, "iat": 0},
            get_signing_secret(),
            algorithm="HS256",
        )
        with self.assertRaises(MalformedToken):
            decode_access_token(partial)

    def test_non_integer_id_is_malformed(self) -> None:
        token = jwt.encode(
            {"id": "7", "role": "standard", "name": "x", "iat": 0, "exp": 4102444800},
            get_signing_secret(),
            algorithm="HS256",
        )
        with self.assertRaises(MalformedToken):
            decode_access_token(token)


class TestSigningSecretResolution(unittest.TestCase):
    def test_configured_secret_is_used(self) -> None:
        config = Settings(_env_file=None, APP_ENV="prod", JWT_SECRET="prod-secret")
        self.assertEqual(resolve_signing_secret(config), "prod-secret")

    def test_missing_secret_is_fatal_in_prod(self) -> None:
        config = Settings(_env_file=None, APP_ENV="prod", JWT_SECRET=None)
        with self.assertRaises(InsecureConfigurationError):
            resolve_signing_secret(config)

    def test_missing_secret_falls_back_with_warning_outside_prod(self) -> None:
        config = Settings(_env_file=None, APP_ENV="dev", JWT_SECRET=None)
        with self.assertLogs("app.core.security", level="WARNING") as logs:
            secret = resolve_signing_secret(config)
        self.assertEqual(secret, INSECURE_FALLBACK_SECRET)
        self.assertIn("unsafe for production", logs.output[0])

    def test_blank_secret_counts_as_missing(self) -> None:
        config = Settings(_env_file=None, APP_ENV="prod", JWT_SECRET="   ")
        with self.assertRaises(InsecureConfigurationError):
            resolve_signing_secret(config)


if __name__ == "__main__":
    unittest.main()
