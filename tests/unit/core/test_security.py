"""
Unit tests for security utilities.

Tests cover:
- Argon2id password hashing and verification
- Token secret generation and keyed digests
- Plaintext token formatting and parsing
"""

import uuid

from warden.core.security import (
    format_plaintext_token,
    generate_token_secret,
    hash_password,
    hash_token_secret,
    parse_plaintext_token,
    verify_password,
    verify_token_secret,
)


class TestPasswordHashing:
    """Test password hashing functions."""

    def test_hash_is_argon2id(self):
        hashed = hash_password("MyPassword123!")
        assert hashed.startswith("$argon2id$")
        assert hashed != "MyPassword123!"

    def test_verify_correct_password(self):
        hashed = hash_password("MyPassword123!")
        assert verify_password("MyPassword123!", hashed) is True

    def test_verify_wrong_password(self):
        hashed = hash_password("MyPassword123!")
        assert verify_password("WrongPassword", hashed) is False

    def test_verify_malformed_hash_returns_false(self):
        assert verify_password("MyPassword123!", "not-a-hash") is False

    def test_same_password_different_hashes(self):
        assert hash_password("MyPassword123!") != hash_password("MyPassword123!")


class TestTokenSecrets:
    """Test token secret generation and digests."""

    def test_generated_secrets_are_unique(self):
        secrets = {generate_token_secret() for _ in range(20)}
        assert len(secrets) == 20

    def test_digest_is_deterministic_hex(self):
        digest = hash_token_secret("abc")
        assert digest == hash_token_secret("abc")
        assert len(digest) == 64
        int(digest, 16)

    def test_digest_differs_per_secret(self):
        assert hash_token_secret("abc") != hash_token_secret("abd")

    def test_verify_token_secret(self):
        digest = hash_token_secret("abc")
        assert verify_token_secret("abc", digest) is True
        assert verify_token_secret("abd", digest) is False


class TestPlaintextTokens:
    """Test plaintext token format."""

    def test_format_and_parse(self):
        token_id = uuid.uuid4()
        plaintext = format_plaintext_token(token_id, "s3cret")

        assert plaintext == f"{token_id}|s3cret"
        assert parse_plaintext_token(plaintext) == (token_id, "s3cret")

    def test_secret_may_contain_separator(self):
        token_id = uuid.uuid4()
        assert parse_plaintext_token(f"{token_id}|a|b") == (token_id, "a|b")

    def test_token_without_prefix(self):
        assert parse_plaintext_token("plain-secret") == (None, "plain-secret")

    def test_token_with_invalid_prefix(self):
        assert parse_plaintext_token("not-a-uuid|secret") == (None, "not-a-uuid|secret")
