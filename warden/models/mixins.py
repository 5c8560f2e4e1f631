"""
Reusable mixins for database models.

This module provides mixins for common model patterns:
- TimestampMixin: created_at and updated_at timestamps
- SoftDeleteMixin: soft delete with deleted_at timestamp
"""

from datetime import UTC, datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """
    Return value as an aware UTC datetime.

    SQLite drops tzinfo on DateTime(timezone=True) columns; values read back
    from it are naive and are treated as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TimestampMixin:
    """
    Mixin to add timestamp columns to models.

    Adds:
    - created_at: Timestamp when record was created (auto-set)
    - updated_at: Timestamp when record was last updated (auto-updated)

    Both timestamps use UTC timezone.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        index=True,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


class SoftDeleteMixin:
    """
    Mixin to add soft delete functionality to models.

    Adds:
    - deleted_at: Timestamp when record was soft-deleted (NULL if not deleted)

    Soft deleted records remain in the database. Repositories take an explicit
    include_deleted argument to decide whether they are visible.
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        index=True,
    )

    @property
    def is_deleted(self) -> bool:
        """True if deleted_at is set."""
        return self.deleted_at is not None
