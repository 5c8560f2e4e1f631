"""
Role service.

This module provides:
- Role listing with usage counts
- Role create/update with atomic permission sync
- Role deletion
- Role assignment to users
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.database import atomic
from warden.exceptions import AlreadyExistsError, NotFoundError
from warden.models.role import Role
from warden.models.user import User
from warden.repositories.role_repository import RoleRepository
from warden.repositories.user_repository import UserRepository
from warden.schemas.role import RoleCreate, RoleListItem, RoleUpdate
from warden.services.authorization_service import AuthContext, AuthorizationService

logger = logging.getLogger(__name__)


class RoleService:
    """Service class for role management."""

    def __init__(self, session: AsyncSession, catalog: AccessCatalog | None = None):
        self.session = session
        self.catalog = catalog or load_catalog()
        self.authz = AuthorizationService(session, self.catalog)
        self.role_repo = RoleRepository(session)
        self.user_repo = UserRepository(session)

    async def _get_role(self, role_id: uuid.UUID) -> Role:
        role = await self.role_repo.get_by_id(role_id)
        if role is None or role.guard_name != self.authz.guard_name:
            raise NotFoundError("Role")
        return role

    async def _ensure_name_available(
        self, name: str, exclude_role_id: uuid.UUID | None = None
    ) -> None:
        if await self.role_repo.name_exists(name, self.authz.guard_name, exclude_role_id):
            logger.warning(f"Role name already in use: {name}")
            raise AlreadyExistsError(
                "Role", message="The name has already been taken.", details={"fields": ["name"]}
            )

    async def list_roles(self, context: AuthContext) -> list[RoleListItem]:
        """List roles with permission and user counts (requires Role Read)."""
        await self.authz.authorize(context, self.catalog.permission("role", "read"))

        rows = await self.role_repo.list_with_counts(self.authz.guard_name)
        return [
            RoleListItem(
                id=role.id,
                name=role.name,
                guard_name=role.guard_name,
                permissions_count=permissions_count,
                users_count=users_count,
                created_at=role.created_at,
            )
            for role, permissions_count, users_count in rows
        ]

    async def get_role(self, context: AuthContext, role_id: uuid.UUID) -> Role:
        await self.authz.authorize(context, self.catalog.permission("role", "read"))
        return await self._get_role(role_id)

    async def create_role(self, context: AuthContext, role_data: RoleCreate) -> Role:
        """
        Create a role and set its permissions in one transaction.

        Requires Role Create and Permission Assign to Role.

        Raises:
            AlreadyExistsError: If the name is taken in the guard
            NotFoundError: If any permission id is unknown (nothing is created)
        """
        await self.authz.authorize(context, self.catalog.permission("role", "create"))
        await self.authz.authorize(
            context, self.catalog.permission("permission", "assign_to_role")
        )
        await self._ensure_name_available(role_data.name)

        async with atomic(self.session):
            role = Role(name=role_data.name, guard_name=self.authz.guard_name)
            role.permissions = []
            role = await self.role_repo.add(role)
            await self.authz.sync_role_permissions(role, role_data.permission_ids)

        logger.info(f"Role '{role.name}' created by {context.user_id}")
        return role

    async def update_role(
        self,
        context: AuthContext,
        role_id: uuid.UUID,
        role_data: RoleUpdate,
    ) -> Role:
        """
        Rename a role and/or replace its permissions in one transaction.

        permission_ids=None leaves the permission set unchanged; an empty
        list clears it.
        """
        await self.authz.authorize(context, self.catalog.permission("role", "update"))
        if role_data.permission_ids is not None:
            await self.authz.authorize(
                context, self.catalog.permission("permission", "assign_to_role")
            )

        role = await self._get_role(role_id)
        if role_data.name is not None and role_data.name != role.name:
            await self._ensure_name_available(role_data.name, exclude_role_id=role.id)

        async with atomic(self.session):
            if role_data.name is not None:
                role.name = role_data.name
            if role_data.permission_ids is not None:
                await self.authz.sync_role_permissions(role, role_data.permission_ids)
            role = await self.role_repo.update(role)

        logger.info(f"Role '{role.name}' updated by {context.user_id}")
        return role

    async def delete_role(self, context: AuthContext, role_id: uuid.UUID) -> None:
        await self.authz.authorize(context, self.catalog.permission("role", "delete"))
        role = await self._get_role(role_id)

        async with atomic(self.session):
            await self.role_repo.delete(role)

        logger.info(f"Role '{role.name}' deleted by {context.user_id}")

    async def assign_to_user(
        self,
        context: AuthContext,
        user_id: uuid.UUID,
        role_ids: list[uuid.UUID],
    ) -> User:
        """
        Replace a user's roles. Assigning roles to oneself is rejected.

        Raises:
            SelfActionForbiddenError: If user_id is the acting user
            NotFoundError: If the user or any role does not exist
        """
        self.authz.forbid_self(context, user_id)
        await self.authz.authorize(
            context, self.catalog.permission("role", "assign_to_user")
        )

        user = await self.user_repo.get_by_id(user_id, include_deleted=False)
        if user is None:
            raise NotFoundError("User")

        async with atomic(self.session):
            await self.authz.sync_roles(user, role_ids)

        logger.info(f"Roles of user {user.id} replaced by {context.user_id}")
        return user
