"""
AccessToken repository for token storage operations.

This module provides database operations for the AccessToken model,
including digest lookups, per-user listings and revocation.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from warden.models.access_token import AccessToken
from warden.repositories.base import BaseRepository


class AccessTokenRepository(BaseRepository[AccessToken]):
    """
    Repository for AccessToken model operations.

    Revocation deletes rows: a revoked token leaves nothing behind that could
    be resolved again.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(AccessToken, session)

    async def get_with_user(self, token_id: uuid.UUID) -> AccessToken | None:
        """Get a token by id with its owner loaded."""
        query = (
            select(AccessToken)
            .where(AccessToken.id == token_id)
            .options(joinedload(AccessToken.user))
        )
        result = await self.session.execute(query)
        return result.unique().scalar_one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> AccessToken | None:
        """
        Get a token by the digest of its secret, with its owner loaded.

        Args:
            token_hash: HMAC-SHA256 digest of the token secret
        """
        query = (
            select(AccessToken)
            .where(AccessToken.token_hash == token_hash)
            .options(joinedload(AccessToken.user))
        )
        result = await self.session.execute(query)
        return result.unique().scalar_one_or_none()

    async def get_user_active_tokens(
        self, user_id: uuid.UUID, now: datetime | None = None
    ) -> list[AccessToken]:
        """
        Get all unexpired tokens for a user, newest first.

        Args:
            user_id: Owner of the tokens
            now: Reference time for expiry (default: current time)
        """
        now = now or datetime.now(UTC)
        query = (
            select(AccessToken)
            .where(
                AccessToken.user_id == user_id,
                or_(AccessToken.expires_at.is_(None), AccessToken.expires_at > now),
            )
            .order_by(AccessToken.created_at.desc())
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_user_token(
        self, user_id: uuid.UUID, token_id: uuid.UUID
    ) -> AccessToken | None:
        """Get a token only if it belongs to the given user."""
        query = select(AccessToken).where(
            AccessToken.id == token_id,
            AccessToken.user_id == user_id,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def touch_last_used(self, token_id: uuid.UUID, used_at: datetime) -> None:
        """Record a successful authentication with the token."""
        await self.session.execute(
            update(AccessToken)
            .where(AccessToken.id == token_id)
            .values(last_used_at=used_at)
            .execution_options(synchronize_session=False)
        )

    async def delete_user_tokens(self, user_id: uuid.UUID) -> int:
        """
        Delete every token of a user.

        Returns:
            Number of tokens deleted
        """
        result = await self.session.execute(
            delete(AccessToken)
            .where(AccessToken.user_id == user_id)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount

    async def delete_expired_tokens(self, before_date: datetime | None = None) -> int:
        """
        Delete tokens that expired before the given date.

        Args:
            before_date: Cutoff (default: current time)

        Returns:
            Number of tokens deleted
        """
        if before_date is None:
            before_date = datetime.now(UTC)

        result = await self.session.execute(
            delete(AccessToken)
            .where(AccessToken.expires_at.is_not(None), AccessToken.expires_at < before_date)
            .execution_options(synchronize_session="fetch")
        )
        await self.session.flush()
        return result.rowcount
