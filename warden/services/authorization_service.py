"""
Authorization service.

This module provides the permission graph operations:
- has_permission(): effective permission check (direct or via roles)
- authorize() / authorize_scoped(): permission checks for a request context
- forbid_self(): hard guard against administrative actions on oneself
- sync_roles() / sync_permissions() / sync_role_permissions(): replace
  assignment sets
- scope_of(): resolve own_profile vs user scope for an action on a user
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.config import settings
from warden.exceptions import (
    InsufficientPermissionsError,
    NotFoundError,
    SelfActionForbiddenError,
)
from warden.models.access_token import AccessToken
from warden.models.enums import PermissionScope
from warden.models.role import Permission, Role
from warden.models.user import User
from warden.repositories.permission_repository import PermissionRepository
from warden.repositories.role_repository import RoleRepository

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """
    Identity attached to an authenticated request.

    Attributes:
        user: Authenticated user
        token: Access token that authenticated the request
        ip_address: Client IP address
        user_agent: Client User-Agent header
    """

    user: User
    token: AccessToken
    ip_address: str | None = None
    user_agent: str | None = None

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id


def scope_of(acting_id: uuid.UUID, target_id: uuid.UUID) -> PermissionScope:
    """
    Resolve which permission group governs an action on a user.

    Example:
        >>> me = uuid.uuid4()
        >>> scope_of(me, me)
        <PermissionScope.OWN_PROFILE: 'own_profile'>
    """
    if acting_id == target_id:
        return PermissionScope.OWN_PROFILE
    return PermissionScope.USER


class AuthorizationService:
    """
    Service class for permission checks and assignment syncs.

    Permission checks always query the database after flushing pending
    changes, so a sync earlier in the same transaction is visible to the
    next check.
    """

    def __init__(
        self,
        session: AsyncSession,
        catalog: AccessCatalog | None = None,
        guard_name: str | None = None,
    ):
        self.session = session
        self.catalog = catalog or load_catalog()
        self.guard_name = guard_name or settings.default_guard
        self.role_repo = RoleRepository(session)
        self.permission_repo = PermissionRepository(session)

    # -------------------------------------------------------------------------
    # Checks
    # -------------------------------------------------------------------------

    async def has_permission(self, user_id: uuid.UUID, permission_name: str) -> bool:
        """
        Check whether a user holds a permission directly or through a role.

        Args:
            user_id: UUID of the user
            permission_name: Permission name (e.g. "User Read")
        """
        await self.session.flush()
        names = await self.permission_repo.get_user_permission_names(
            user_id, self.guard_name
        )
        return permission_name in names

    async def authorize(self, context: AuthContext, permission_name: str) -> None:
        """
        Require a permission for the current request.

        Both the user and the token must carry the permission
        (a token with the "*" ability carries every permission).

        Raises:
            InsufficientPermissionsError: If either check fails
        """
        if not context.token.can(permission_name) or not await self.has_permission(
            context.user_id, permission_name
        ):
            logger.warning(
                f"Permission denied: user={context.user_id} permission='{permission_name}'"
            )
            raise InsufficientPermissionsError(self.catalog.message("no_permission"))

    async def authorize_scoped(
        self,
        context: AuthContext,
        target_id: uuid.UUID,
        action: str,
    ) -> PermissionScope:
        """
        Require the own_profile or user variant of an action.

        Args:
            context: Current request context
            target_id: User the action applies to
            action: Action key present in both groups (e.g. "read", "session_delete")

        Returns:
            The scope that was checked
        """
        scope = scope_of(context.user_id, target_id)
        await self.authorize(context, self.catalog.permission(scope.value, action))
        return scope

    def forbid_self(self, context: AuthContext, target_id: uuid.UUID) -> None:
        """
        Reject administrative actions aimed at the acting user.

        Checked before any permission lookup: holding the permission does
        not lift the guard.

        Raises:
            SelfActionForbiddenError: If target_id is the acting user
        """
        if context.user_id == target_id:
            logger.warning(f"Self action rejected for user {context.user_id}")
            raise SelfActionForbiddenError(self.catalog.message("self_action"))

    # -------------------------------------------------------------------------
    # Syncs
    # -------------------------------------------------------------------------

    async def _load_roles(self, role_ids: list[uuid.UUID]) -> list[Role]:
        wanted = list(dict.fromkeys(role_ids))
        roles = await self.role_repo.get_by_ids(wanted)
        found = {role.id for role in roles if role.guard_name == self.guard_name}
        missing = [str(role_id) for role_id in wanted if role_id not in found]
        if missing:
            raise NotFoundError("Role", details={"role_ids": missing})
        return [role for role in roles if role.guard_name == self.guard_name]

    async def _load_permissions(self, permission_ids: list[uuid.UUID]) -> list[Permission]:
        wanted = list(dict.fromkeys(permission_ids))
        permissions = await self.permission_repo.get_by_ids(wanted)
        found = {p.id for p in permissions if p.guard_name == self.guard_name}
        missing = [str(permission_id) for permission_id in wanted if permission_id not in found]
        if missing:
            raise NotFoundError("Permission", details={"permission_ids": missing})
        return [p for p in permissions if p.guard_name == self.guard_name]

    async def sync_roles(self, user: User, role_ids: list[uuid.UUID]) -> list[Role]:
        """
        Replace the user's roles with exactly role_ids.

        An empty list removes every role. If any id is unknown nothing changes.

        Raises:
            NotFoundError: If any role id does not exist in the guard
        """
        roles = await self._load_roles(role_ids)
        user.roles = roles
        await self.session.flush()
        logger.info(f"Roles synced for user {user.id}: {[role.name for role in roles]}")
        return roles

    async def sync_permissions(
        self, user: User, permission_ids: list[uuid.UUID]
    ) -> list[Permission]:
        """
        Replace the user's direct permissions with exactly permission_ids.

        Raises:
            NotFoundError: If any permission id does not exist in the guard
        """
        permissions = await self._load_permissions(permission_ids)
        user.permissions = permissions
        await self.session.flush()
        logger.info(f"Direct permissions synced for user {user.id}: {len(permissions)}")
        return permissions

    async def sync_role_permissions(
        self, role: Role, permission_ids: list[uuid.UUID]
    ) -> list[Permission]:
        """
        Replace the role's permissions with exactly permission_ids.

        Raises:
            NotFoundError: If any permission id does not exist in the guard
        """
        permissions = await self._load_permissions(permission_ids)
        role.permissions = permissions
        await self.session.flush()
        logger.info(f"Permissions synced for role {role.name}: {len(permissions)}")
        return permissions
