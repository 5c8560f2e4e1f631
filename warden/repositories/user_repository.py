"""
User repository for user-specific database operations.

This module provides database operations for the User model,
including login lookups, identifier uniqueness checks and user filtering.
"""

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.models.enums import TrashedFilter
from warden.models.user import User
from warden.repositories.base import BaseRepository

# Columns that must be unique across all users, soft-deleted ones included
UNIQUE_IDENTIFIERS = ("username", "employee_id", "email")


class UserRepository(BaseRepository[User]):
    """
    Repository for User model operations.

    Extends BaseRepository with user-specific queries:
    - Login lookups by username, employee id or email
    - Identifier uniqueness checks (soft-deleted users keep their identifiers)
    - User filtering (status, trashed state) for the admin list view
    - Activity tracking (last login updates)
    """

    def __init__(self, session: AsyncSession):
        super().__init__(User, session)

    async def get_by_login(self, login: str) -> User | None:
        """
        Get a non-deleted user by username, employee id or email.

        Args:
            login: Value entered in the login field

        Returns:
            User instance or None if no active-row match exists
        """
        query = select(User).where(
            or_(
                User.username == login,
                User.employee_id == login,
                User.email == login.lower(),
            )
        )
        query = self._apply_soft_delete_filter(query, include_deleted=False)

        result = await self.session.execute(query)
        return result.scalars().first()

    async def find_taken_identifiers(
        self,
        values: dict[str, str | None],
        exclude_user_id: uuid.UUID | None = None,
    ) -> list[str]:
        """
        Return the identifier fields whose value is already in use.

        Soft-deleted users are included: their identifiers stay reserved.

        Args:
            values: Mapping of identifier field -> candidate value
                (None values are skipped)
            exclude_user_id: User to ignore (the user being updated)

        Returns:
            Field names from UNIQUE_IDENTIFIERS that collide, in that order

        Example:
            taken = await user_repo.find_taken_identifiers(
                {"username": "jdoe", "email": "jdoe@example.com"}
            )
            if taken:
                raise AlreadyExistsError("User", details={"fields": taken})
        """
        candidates = {
            field: value
            for field, value in values.items()
            if field in UNIQUE_IDENTIFIERS and value is not None
        }
        if not candidates:
            return []

        query = select(User).where(
            or_(*(getattr(User, field) == value for field, value in candidates.items()))
        )
        if exclude_user_id is not None:
            query = query.where(User.id != exclude_user_id)

        result = await self.session.execute(query)
        taken: set[str] = set()
        for user in result.scalars().all():
            for field, value in candidates.items():
                if getattr(user, field) == value:
                    taken.add(field)

        return [field for field in UNIQUE_IDENTIFIERS if field in taken]

    async def update_last_login(self, user: User) -> None:
        """Set the user's last login timestamp to now."""
        user.last_login_at = datetime.now(UTC)
        await self.session.flush()

    def _filtered_query(
        self,
        query: Select[Any],
        status: bool | None,
        trashed: TrashedFilter,
    ) -> Select[Any]:
        if trashed == TrashedFilter.ONLY:
            query = query.where(User.deleted_at.is_not(None))
        else:
            query = self._apply_soft_delete_filter(
                query, include_deleted=trashed == TrashedFilter.WITH
            )

        if status is not None:
            query = query.where(User.status == status)

        return query

    async def filter_users(
        self,
        status: bool | None = None,
        trashed: TrashedFilter = TrashedFilter.WITHOUT,
        skip: int = 0,
        limit: int = 100,
    ) -> list[User]:
        """
        Filter users with pagination, newest first.

        Args:
            status: Filter by enabled flag
            trashed: Visibility of soft-deleted users
            skip: Number of records to skip (pagination)
            limit: Maximum number of records to return
        """
        query = self._filtered_query(select(User), status, trashed)
        query = query.order_by(User.created_at.desc()).offset(skip).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_filtered(
        self,
        status: bool | None = None,
        trashed: TrashedFilter = TrashedFilter.WITHOUT,
    ) -> int:
        """Count users matching filter criteria."""
        query = self._filtered_query(
            select(func.count()).select_from(User), status, trashed
        )
        result = await self.session.execute(query)
        return result.scalar_one()
