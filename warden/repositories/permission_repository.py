"""
Permission repository.

This module provides database operations for Permission and PermissionGroup,
including the effective permission query used by authorization checks.
"""

import uuid

from sqlalchemy import select, union
from sqlalchemy.ext.asyncio import AsyncSession

from warden.models.role import Permission, PermissionGroup, role_permissions
from warden.models.user import user_permissions, user_roles
from warden.repositories.base import BaseRepository


class PermissionRepository(BaseRepository[Permission]):
    """
    Repository for Permission model operations.

    Extends BaseRepository with:
    - Name lookups (unique per guard)
    - Effective permission resolution (direct grants and role grants)
    - Permission group lookups
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Permission, session)

    async def get_by_name(self, name: str, guard_name: str) -> Permission | None:
        query = select(Permission).where(
            Permission.name == name,
            Permission.guard_name == guard_name,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_all(self, guard_name: str) -> list[Permission]:
        """List permissions of a guard ordered by group then name."""
        query = (
            select(Permission)
            .outerjoin(PermissionGroup, Permission.permission_group_id == PermissionGroup.id)
            .where(Permission.guard_name == guard_name)
            .order_by(PermissionGroup.name, Permission.name)
        )
        result = await self.session.execute(query)
        return list(result.scalars().unique().all())

    async def get_user_permission_names(
        self, user_id: uuid.UUID, guard_name: str
    ) -> set[str]:
        """
        Get the effective permission names of a user.

        Effective permissions = direct grants ∪ grants of every assigned role.
        Always queries the database; callers flush pending changes first.

        Args:
            user_id: UUID of the user
            guard_name: Guard the permissions belong to

        Returns:
            Set of permission names
        """
        direct = (
            select(Permission.name)
            .join(user_permissions, user_permissions.c.permission_id == Permission.id)
            .where(
                user_permissions.c.user_id == user_id,
                Permission.guard_name == guard_name,
            )
        )
        via_roles = (
            select(Permission.name)
            .join(role_permissions, role_permissions.c.permission_id == Permission.id)
            .join(user_roles, user_roles.c.role_id == role_permissions.c.role_id)
            .where(
                user_roles.c.user_id == user_id,
                Permission.guard_name == guard_name,
            )
        )
        result = await self.session.execute(union(direct, via_roles))
        return set(result.scalars().all())

    async def get_group_by_name(self, name: str) -> PermissionGroup | None:
        result = await self.session.execute(
            select(PermissionGroup).where(PermissionGroup.name == name)
        )
        return result.scalar_one_or_none()

    async def add_group(self, group: PermissionGroup) -> PermissionGroup:
        self.session.add(group)
        await self.session.flush()
        return group
