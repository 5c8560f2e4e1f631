"""
Role, Permission, and PermissionGroup models.

This module defines:
- PermissionGroup: Named bucket of permissions (e.g. "Own Profile")
- Permission: Named capability, unique per guard
- Role: Named set of permissions, unique per guard
- role_permissions: Many-to-many junction table between Role and Permission
"""

import uuid
from typing import Optional

from sqlalchemy import Column, ForeignKey, String, Table, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from warden.models.base import Base
from warden.models.mixins import TimestampMixin


# =============================================================================
# RolePermission Junction Table (Many-to-Many)
# =============================================================================

role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column(
        "role_id",
        Uuid(as_uuid=True),
        ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "permission_id",
        Uuid(as_uuid=True),
        ForeignKey("permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class PermissionGroup(Base, TimestampMixin):
    """
    Display grouping for permissions.

    Attributes:
        id: UUID primary key
        name: Unique group name (e.g. "User", "Own Profile")
    """

    __tablename__ = "permission_groups"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"PermissionGroup(id={self.id}, name={self.name})"


class Permission(Base, TimestampMixin):
    """
    Named capability that can be granted to roles or directly to users.

    Attributes:
        id: UUID primary key
        name: Permission name (e.g. "User Read")
        guard_name: Authentication guard the permission belongs to
        permission_group_id: Optional group used for display
    """

    __tablename__ = "permissions"
    __table_args__ = (UniqueConstraint("name", "guard_name"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    guard_name: Mapped[str] = mapped_column(String(50), nullable=False)
    permission_group_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("permission_groups.id", ondelete="SET NULL"),
        nullable=True,
    )

    group: Mapped[Optional[PermissionGroup]] = relationship(lazy="joined")

    @property
    def group_name(self) -> str | None:
        return self.group.name if self.group else None

    def __repr__(self) -> str:
        return f"Permission(id={self.id}, name={self.name}, guard={self.guard_name})"


class Role(Base, TimestampMixin):
    """
    Named set of permissions assignable to users.

    Attributes:
        id: UUID primary key
        name: Role name (e.g. "Admin")
        guard_name: Authentication guard the role belongs to
        permissions: Permissions granted by this role
    """

    __tablename__ = "roles"
    __table_args__ = (UniqueConstraint("name", "guard_name"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    guard_name: Mapped[str] = mapped_column(String(50), nullable=False)

    permissions: Mapped[list[Permission]] = relationship(
        secondary=role_permissions,
        lazy="selectin",
        order_by="Permission.name",
    )

    def __repr__(self) -> str:
        return f"Role(id={self.id}, name={self.name}, guard={self.guard_name})"
