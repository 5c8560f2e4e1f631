"""
Access token service.

This module provides the token store:
- issue(): create a token and return its plaintext once
- resolve(): validate a presented plaintext token
- list_active(): unexpired tokens of a user, newest first
- revoke() / revoke_all(): delete one or every token of a user
- purge_expired(): maintenance cleanup of expired rows

The service flushes but never commits. Callers own the transaction
(see core.database.atomic).
"""

import logging
import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.config import settings
from warden.core.security import (
    format_plaintext_token,
    generate_token_secret,
    hash_token_secret,
    parse_plaintext_token,
    verify_token_secret,
)
from warden.exceptions import InvalidTokenError, NotFoundError
from warden.models.access_token import WILDCARD_ABILITY, AccessToken
from warden.models.user import User
from warden.repositories.access_token_repository import AccessTokenRepository

logger = logging.getLogger(__name__)


class AccessTokenService:
    """
    Service class for opaque bearer token operations.

    A token is valid iff its row exists, the secret digest matches, it has
    not expired, and its owner is enabled and not soft-deleted.
    """

    def __init__(self, session: AsyncSession, catalog: AccessCatalog | None = None):
        self.session = session
        self.catalog = catalog or load_catalog()
        self.token_repo = AccessTokenRepository(session)

    async def issue(
        self,
        user: User,
        name: str | None = None,
        abilities: list[str] | None = None,
        expires_at: datetime | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[AccessToken, str]:
        """
        Create a new access token for a user.

        Args:
            user: Token owner
            name: Token label (default: settings.token_default_name)
            abilities: Allowed abilities (default: ["*"])
            expires_at: Explicit expiry; derived from
                settings.token_expire_minutes when omitted
            ip_address: Client IP address (truncated to 45 chars)
            user_agent: Client User-Agent

        Returns:
            Tuple of (AccessToken, plaintext token). The plaintext is not
            stored and cannot be recovered later.
        """
        if expires_at is None and settings.token_expire_minutes is not None:
            expires_at = datetime.now(UTC) + timedelta(minutes=settings.token_expire_minutes)

        secret = generate_token_secret()
        token = AccessToken(
            id=uuid.uuid4(),
            user_id=user.id,
            name=name or settings.token_default_name,
            token_hash=hash_token_secret(secret),
            abilities=list(abilities) if abilities is not None else [WILDCARD_ABILITY],
            expires_at=expires_at,
            ip_address=ip_address[:45] if ip_address else None,
            user_agent=user_agent,
        )
        token = await self.token_repo.add(token)

        logger.info(f"Access token issued: token={token.id} user={user.id}")

        return token, format_plaintext_token(token.id, secret)

    async def resolve(self, plaintext: str) -> tuple[User, AccessToken]:
        """
        Resolve a plaintext bearer token to its owner.

        On success the token's last_used_at is updated inside a savepoint. A
        failure to record it rolls back only the savepoint and is logged;
        authentication still succeeds.

        Args:
            plaintext: Token as presented by the client

        Returns:
            Tuple of (User, AccessToken)

        Raises:
            InvalidTokenError: If the token is unknown, mismatched, expired,
                or its owner is disabled or soft-deleted
        """
        message = self.catalog.message("unauthenticated")
        token_id, secret = parse_plaintext_token(plaintext)

        if token_id is not None:
            token = await self.token_repo.get_with_user(token_id)
            if token is None or not verify_token_secret(secret, token.token_hash):
                logger.warning(f"Token rejected: unknown id or digest mismatch ({token_id})")
                raise InvalidTokenError(message)
        else:
            token = await self.token_repo.get_by_token_hash(hash_token_secret(secret))
            if token is None:
                logger.warning("Token rejected: unknown token")
                raise InvalidTokenError(message)

        now = datetime.now(UTC)
        if token.is_expired(now):
            logger.warning(f"Token rejected: expired ({token.id})")
            raise InvalidTokenError(message)

        user = token.user
        if not user.is_active:
            logger.warning(f"Token rejected: owner {user.id} is inactive or deleted")
            raise InvalidTokenError(message)

        try:
            async with self.session.begin_nested():
                await self.token_repo.touch_last_used(token.id, now)
        except SQLAlchemyError as e:
            logger.warning(f"Could not record token usage for {token.id}: {e}")

        return user, token

    async def list_active(self, user: User) -> list[AccessToken]:
        """Get the user's unexpired tokens, newest first."""
        return await self.token_repo.get_user_active_tokens(user.id)

    async def revoke(
        self,
        user: User,
        token_id: uuid.UUID | None = None,
        current_token: AccessToken | None = None,
    ) -> bool:
        """
        Revoke a single token of a user.

        Args:
            user: Subject whose token is revoked
            token_id: Token to revoke; when omitted, current_token is revoked
            current_token: Token that authenticated the current request

        Returns:
            True once the token is deleted

        Raises:
            NotFoundError: If the token does not exist or belongs to another user
        """
        if token_id is None:
            if current_token is None or current_token.user_id != user.id:
                raise NotFoundError(message=self.catalog.message("token_not_found"))
            token_id = current_token.id

        token = await self.token_repo.get_user_token(user.id, token_id)
        if token is None:
            logger.warning(
                f"Revoke rejected: token {token_id} not found for user {user.id}"
            )
            raise NotFoundError(message=self.catalog.message("token_not_found"))

        await self.token_repo.delete(token)
        logger.info(f"Access token revoked: token={token_id} user={user.id}")
        return True

    async def revoke_all(self, user_id: uuid.UUID) -> int:
        """
        Revoke every token of a user. Idempotent.

        Returns:
            Number of tokens revoked
        """
        count = await self.token_repo.delete_user_tokens(user_id)
        logger.info(f"Revoked {count} access tokens for user {user_id}")
        return count

    async def purge_expired(self, before: datetime | None = None) -> int:
        """
        Delete expired tokens.

        Returns:
            Number of tokens deleted
        """
        count = await self.token_repo.delete_expired_tokens(before)
        logger.info(f"Purged {count} expired access tokens")
        return count
