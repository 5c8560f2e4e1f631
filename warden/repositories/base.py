"""
Base repository with generic CRUD operations.

This module provides a generic repository pattern for database operations.
All specific repositories should inherit from BaseRepository.

Type Parameters:
    ModelType: The SQLAlchemy model class (e.g., User, Role, etc.)
"""

import uuid
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.models.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Generic base repository for database operations.

    Models with a deleted_at column are soft-delete aware: every lookup takes
    an explicit include_deleted argument instead of relying on a global
    filter, so each call site states whether deleted rows are visible.

    Usage:
        class UserRepository(BaseRepository[User]):
            def __init__(self, session: AsyncSession):
                super().__init__(User, session)
    """

    def __init__(self, model: type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    def _apply_soft_delete_filter(
        self, query: Select[Any], include_deleted: bool
    ) -> Select[Any]:
        """Exclude soft-deleted rows unless include_deleted is set."""
        if not include_deleted and hasattr(self.model, "deleted_at"):
            query = query.where(self.model.deleted_at.is_(None))
        return query

    async def add(self, instance: ModelType) -> ModelType:
        """
        Persist a model instance.

        Returns:
            Persisted model instance (with ID and timestamps populated)
        """
        self.session.add(instance)
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def get_by_id(
        self, id: uuid.UUID, *, include_deleted: bool = False
    ) -> ModelType | None:
        """
        Get a record by ID.

        Args:
            id: UUID of the record
            include_deleted: Also return soft-deleted records

        Returns:
            Model instance or None if not found
        """
        query = select(self.model).where(self.model.id == id)
        query = self._apply_soft_delete_filter(query, include_deleted)

        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_ids(self, ids: list[uuid.UUID]) -> list[ModelType]:
        """Get all records whose id is in ids (missing ids are skipped)."""
        if not ids:
            return []
        result = await self.session.execute(
            select(self.model).where(self.model.id.in_(ids))
        )
        return list(result.scalars().all())

    async def update(self, instance: ModelType) -> ModelType:
        """
        Persist changes to an already-modified model instance.

        The caller modifies the instance attributes before calling this
        method. This method only handles persistence (flush + refresh).
        """
        await self.session.flush()
        await self.session.refresh(instance)
        return instance

    async def soft_delete(self, instance: ModelType) -> ModelType:
        """
        Soft delete a record (set deleted_at timestamp).

        Raises:
            AttributeError: If model doesn't support soft delete
        """
        if not hasattr(instance, "deleted_at"):
            raise AttributeError(f"{self.model.__name__} does not support soft delete")

        instance.deleted_at = datetime.now(UTC)
        return await self.update(instance)

    async def restore(self, instance: ModelType) -> ModelType:
        """Clear deleted_at on a soft-deleted record."""
        if not hasattr(instance, "deleted_at"):
            raise AttributeError(f"{self.model.__name__} does not support soft delete")

        instance.deleted_at = None
        return await self.update(instance)

    async def delete(self, instance: ModelType) -> None:
        """Hard delete a record (permanent removal from database)."""
        await self.session.delete(instance)
        await self.session.flush()
