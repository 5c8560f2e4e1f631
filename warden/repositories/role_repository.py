"""
Role repository for role-based access control operations.

This module provides database operations for the Role model,
including role lookups, usage counts and cleanup of user assignments.
"""

import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from warden.models.role import Role, role_permissions
from warden.models.user import user_roles
from warden.repositories.base import BaseRepository


class RoleRepository(BaseRepository[Role]):
    """
    Repository for Role model operations.

    Extends BaseRepository with role-specific queries:
    - Role name lookups (unique per guard)
    - Permission and user counts for listings
    """

    def __init__(self, session: AsyncSession):
        super().__init__(Role, session)

    async def get_by_name(self, name: str, guard_name: str) -> Role | None:
        """
        Get role by name within a guard.

        Example:
            admin_role = await role_repo.get_by_name("Admin", "api")
            if admin_role is None:
                raise NotFoundError("Role")
        """
        query = select(Role).where(Role.name == name, Role.guard_name == guard_name)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def name_exists(
        self,
        name: str,
        guard_name: str,
        exclude_role_id: uuid.UUID | None = None,
    ) -> bool:
        """Check if a role name is already used within a guard."""
        query = select(Role.id).where(Role.name == name, Role.guard_name == guard_name)
        if exclude_role_id is not None:
            query = query.where(Role.id != exclude_role_id)

        result = await self.session.execute(query)
        return result.first() is not None

    async def list_with_counts(self, guard_name: str) -> list[tuple[Role, int, int]]:
        """
        List roles of a guard with their permission and user counts.

        Returns:
            List of (role, permissions_count, users_count), ordered by name
        """
        permissions_count = (
            select(func.count())
            .select_from(role_permissions)
            .where(role_permissions.c.role_id == Role.id)
            .scalar_subquery()
        )
        users_count = (
            select(func.count())
            .select_from(user_roles)
            .where(user_roles.c.role_id == Role.id)
            .scalar_subquery()
        )
        query = (
            select(Role, permissions_count, users_count)
            .where(Role.guard_name == guard_name)
            .order_by(Role.name)
        )
        result = await self.session.execute(query)
        return [(role, p_count, u_count) for role, p_count, u_count in result.all()]

    async def delete(self, instance: Role) -> None:
        """Delete a role together with its user assignments."""
        await self.session.execute(
            delete(user_roles).where(user_roles.c.role_id == instance.id)
        )
        await super().delete(instance)
