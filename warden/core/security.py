"""
Security utilities for authentication.

This module provides:
- Password hashing with Argon2id
- Opaque access token generation
- Keyed token digests (HMAC-SHA256) for at-rest token storage
- Plaintext token formatting and parsing ("<token id>|<secret>")
"""

import hashlib
import hmac
import logging
import secrets
import uuid

from argon2 import PasswordHasher
from argon2.exceptions import (
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from warden.core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Password Hashing with Argon2id
# =============================================================================

pwd_hasher = PasswordHasher(
    time_cost=settings.argon2_time_cost,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    return pwd_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against an Argon2id hash.

    Returns:
        True if password matches hash, False otherwise

    Example:
        >>> hashed = hash_password("my_password")
        >>> verify_password("my_password", hashed)
        True
        >>> verify_password("wrong_password", hashed)
        False
    """
    try:
        pwd_hasher.verify(hashed_password, password)
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# =============================================================================
# Access Tokens
# =============================================================================
# The client receives "<token id>|<secret>" exactly once. Only a keyed digest
# of the secret is stored, so a database leak does not yield usable tokens.
# =============================================================================

TOKEN_SEPARATOR = "|"


def generate_token_secret() -> str:
    """Generate a URL-safe random token secret."""
    return secrets.token_urlsafe(settings.token_secret_bytes)


def hash_token_secret(secret: str) -> str:
    """
    Digest a token secret for storage.

    Args:
        secret: Plaintext token secret (without the id prefix)

    Returns:
        Hex-encoded HMAC-SHA256 digest keyed by settings.secret_key
    """
    return hmac.new(
        settings.secret_key.encode(),
        secret.encode(),
        hashlib.sha256,
    ).hexdigest()


def verify_token_secret(secret: str, token_hash: str) -> bool:
    """Compare a token secret against a stored digest in constant time."""
    return hmac.compare_digest(hash_token_secret(secret), token_hash)


def format_plaintext_token(token_id: uuid.UUID, secret: str) -> str:
    """Build the plaintext token handed to the client."""
    return f"{token_id}{TOKEN_SEPARATOR}{secret}"


def parse_plaintext_token(plaintext: str) -> tuple[uuid.UUID | None, str]:
    """
    Split a plaintext token into its id and secret.

    Tokens without a valid id prefix are returned as (None, plaintext) so
    they can still be looked up by digest.

    Example:
        >>> parse_plaintext_token("not-prefixed")
        (None, 'not-prefixed')
    """
    if TOKEN_SEPARATOR not in plaintext:
        return None, plaintext

    raw_id, secret = plaintext.split(TOKEN_SEPARATOR, 1)
    try:
        return uuid.UUID(raw_id), secret
    except ValueError:
        return None, plaintext
