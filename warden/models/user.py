"""
User model and its access control junction tables.

This module defines:
- User: Account with login identifiers, status flag and soft delete
- user_roles: Many-to-many junction table between User and Role
- user_permissions: Direct permission grants to users

Effective permissions of a user are the union of direct grants and the
permissions of every assigned role.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Table, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warden.models.base import Base
from warden.models.mixins import SoftDeleteMixin, TimestampMixin, utcnow
from warden.models.role import Permission, Role

# =============================================================================
# Junction Tables
# =============================================================================

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column(
        "user_id",
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "role_id",
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "assigned_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    ),
)

user_permissions = Table(
    "user_permissions",
    Base.metadata,
    Column(
        "user_id",
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "permission_id",
        Uuid(as_uuid=True),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "assigned_at",
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    ),
)


# =============================================================================
# User Model
# =============================================================================


class User(Base, TimestampMixin, SoftDeleteMixin):
    """
    User model for authentication and profile management.

    Attributes:
        id: UUID primary key
        name: Display name
        username: Unique login name
        employee_id: Unique employee identifier, also accepted as login
        email: Unique email address, also accepted as login
        password_hash: Argon2id hashed password
        status: True if the account may authenticate
        last_login_at: Timestamp of last successful login
        deleted_at: When the account was soft-deleted (NULL if not deleted)

    Soft Delete:
        Deleted users cannot authenticate and lose all access tokens.
        Username, employee id and email remain reserved after deletion so a
        restore can never collide with a newer account.
    """

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    username: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        unique=True,
        index=True,
    )

    employee_id: Mapped[str] = mapped_column(
        String(30),
        nullable=False,
        unique=True,
        index=True,
    )

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    status: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
    )

    last_login_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    roles: Mapped[list[Role]] = relationship(
        secondary=user_roles,
        lazy="selectin",
        order_by="Role.name",
    )

    permissions: Mapped[list[Permission]] = relationship(
        secondary=user_permissions,
        lazy="selectin",
        order_by="Permission.name",
    )

    @property
    def is_active(self) -> bool:
        """True if the account may authenticate (enabled and not deleted)."""
        return self.status and not self.is_deleted

    @property
    def role_names(self) -> list[str]:
        return [role.name for role in self.roles]

    def __repr__(self) -> str:
        return f"User(id={self.id}, username={self.username}, email={self.email})"
