"""
Permission service.

This module provides:
- Permission listing
- Direct permission assignment to users
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.database import atomic
from warden.exceptions import NotFoundError
from warden.models.role import Permission
from warden.models.user import User
from warden.repositories.permission_repository import PermissionRepository
from warden.repositories.user_repository import UserRepository
from warden.services.authorization_service import AuthContext, AuthorizationService

logger = logging.getLogger(__name__)


class PermissionService:
    """Service class for permission listing and direct grants."""

    def __init__(self, session: AsyncSession, catalog: AccessCatalog | None = None):
        self.session = session
        self.catalog = catalog or load_catalog()
        self.authz = AuthorizationService(session, self.catalog)
        self.permission_repo = PermissionRepository(session)
        self.user_repo = UserRepository(session)

    async def list_permissions(self, context: AuthContext) -> list[Permission]:
        """List every permission of the guard (requires Permission Read)."""
        await self.authz.authorize(context, self.catalog.permission("permission", "read"))
        return await self.permission_repo.list_all(self.authz.guard_name)

    async def assign_to_user(
        self,
        context: AuthContext,
        user_id: uuid.UUID,
        permission_ids: list[uuid.UUID],
    ) -> User:
        """
        Replace a user's direct permissions. Granting to oneself is rejected.

        Raises:
            SelfActionForbiddenError: If user_id is the acting user
            NotFoundError: If the user or any permission does not exist
        """
        self.authz.forbid_self(context, user_id)
        await self.authz.authorize(
            context, self.catalog.permission("permission", "assign_to_user")
        )

        user = await self.user_repo.get_by_id(user_id, include_deleted=False)
        if user is None:
            raise NotFoundError("User")

        async with atomic(self.session):
            await self.authz.sync_permissions(user, permission_ids)

        logger.info(f"Direct permissions of user {user.id} replaced by {context.user_id}")
        return user
