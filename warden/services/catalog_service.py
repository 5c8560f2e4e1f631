"""
Catalog sync service.

Creates the permission groups, permissions and roles of the access catalog
and grants each catalog role its permissions. Safe to run on every startup:
existing rows are reused and only missing grants are added.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.config import settings
from warden.core.database import atomic
from warden.models.role import Permission, PermissionGroup, Role
from warden.repositories.permission_repository import PermissionRepository
from warden.repositories.role_repository import RoleRepository

logger = logging.getLogger(__name__)


class CatalogService:
    """Service class that mirrors the access catalog into the database."""

    def __init__(
        self,
        session: AsyncSession,
        catalog: AccessCatalog | None = None,
        guard_name: str | None = None,
    ):
        self.session = session
        self.catalog = catalog or load_catalog()
        self.guard_name = guard_name or settings.default_guard
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)

    async def _ensure_group(self, group_key: str) -> PermissionGroup:
        display_name = self.catalog.groups[group_key].display_name
        group = await self.permission_repo.get_group_by_name(display_name)
        if group is None:
            group = await self.permission_repo.add_group(PermissionGroup(name=display_name))
        return group

    async def _ensure_permission(self, name: str, group: PermissionGroup) -> Permission:
        permission = await self.permission_repo.get_by_name(name, self.guard_name)
        if permission is None:
            permission = await self.permission_repo.add(
                Permission(
                    name=name,
                    guard_name=self.guard_name,
                    permission_group_id=group.id,
                )
            )
        return permission

    async def sync(self) -> dict[str, Role]:
        """
        Create missing catalog rows and grants.

        Returns:
            Mapping of role key -> Role
        """
        async with atomic(self.session):
            permissions: dict[str, Permission] = {}
            for group_key in self.catalog.groups:
                group = await self._ensure_group(group_key)
                for name in self.catalog.group_permissions(group_key):
                    permissions[name] = await self._ensure_permission(name, group)

            roles: dict[str, Role] = {}
            for role_key, role_name in self.catalog.roles.items():
                role = await self.role_repo.get_by_name(role_name, self.guard_name)
                if role is None:
                    role = Role(name=role_name, guard_name=self.guard_name)
                    role.permissions = []
                    role = await self.role_repo.add(role)

                granted = {p.id for p in role.permissions}
                missing = [
                    permissions[name]
                    for name in self.catalog.permissions_for_role(role_key)
                    if permissions[name].id not in granted
                ]
                if missing:
                    role.permissions = [*role.permissions, *missing]
                    await self.session.flush()
                roles[role_key] = role

        logger.info(
            f"Access catalog synced: {len(permissions)} permissions, {len(roles)} roles"
        )
        return roles
