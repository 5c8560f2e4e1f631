"""
User service for account management and lifecycle transitions.

This module provides:
- User listing, creation, lookup and profile updates
- Status changes (disabling revokes all tokens)
- Soft delete, restore and permanent delete
- Administrative password resets

Every method takes the AuthContext of the acting user and performs its own
permission check before touching data.
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.config import settings
from warden.core.database import atomic
from warden.core.security import hash_password
from warden.exceptions import AlreadyExistsError, ConflictError, NotFoundError
from warden.models.user import User
from warden.repositories.role_repository import RoleRepository
from warden.repositories.user_repository import UserRepository
from warden.schemas.common import PaginationParams, SearchResult
from warden.schemas.user import (
    UserCreate,
    UserFilterParams,
    UserPasswordReset,
    UserUpdate,
)
from warden.services.authorization_service import AuthContext, AuthorizationService
from warden.services.token_service import AccessTokenService

logger = logging.getLogger(__name__)


class UserService:
    """
    Service class for user management operations.

    Lifecycle:
        Active <-> Inactive   change_status (disabling revokes all tokens)
        Active/Inactive -> SoftDeleted   soft_delete (revokes all tokens)
        SoftDeleted -> Active/Inactive   restore (tokens stay revoked)
        SoftDeleted -> gone              force_delete
    """

    def __init__(self, session: AsyncSession, catalog: AccessCatalog | None = None):
        self.session = session
        self.catalog = catalog or load_catalog()
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.authz = AuthorizationService(session, self.catalog)
        self.token_service = AccessTokenService(session, self.catalog)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _permission(self, group: str, action: str) -> str:
        return self.catalog.permission(group, action)

    async def _get_user(self, user_id: uuid.UUID, *, include_deleted: bool) -> User:
        user = await self.user_repo.get_by_id(user_id, include_deleted=include_deleted)
        if user is None:
            raise NotFoundError("User")
        return user

    async def _ensure_identifiers_available(
        self,
        values: dict[str, str | None],
        exclude_user_id: uuid.UUID | None = None,
    ) -> None:
        taken = await self.user_repo.find_taken_identifiers(values, exclude_user_id)
        if taken:
            logger.warning(f"User identifiers already in use: {taken}")
            raise AlreadyExistsError(
                "User",
                message=f"The {', '.join(taken)} has already been taken.",
                details={"fields": taken},
            )

    async def create_account(self, user_data: UserCreate) -> User:
        """
        Create a user row with the default role, without committing.

        Used by registration and admin creation, which own the transaction.

        Raises:
            AlreadyExistsError: If username, employee id or email is taken
        """
        await self._ensure_identifiers_available(
            {
                "username": user_data.username,
                "employee_id": user_data.employee_id,
                "email": user_data.email,
            }
        )

        user = User(
            name=user_data.name,
            username=user_data.username,
            employee_id=user_data.employee_id,
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            status=True,
        )

        roles = []
        if settings.default_role:
            default_role = await self.role_repo.get_by_name(
                settings.default_role, self.authz.guard_name
            )
            if default_role is not None:
                roles.append(default_role)
        user.roles = roles

        return await self.user_repo.add(user)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    async def list_users(
        self,
        context: AuthContext,
        filters: UserFilterParams,
        pagination: PaginationParams,
    ) -> SearchResult[User]:
        """List users with status/trashed filters (requires User Read)."""
        await self.authz.authorize(context, self._permission("user", "read"))

        users = await self.user_repo.filter_users(
            status=filters.status,
            trashed=filters.trashed,
            skip=pagination.offset,
            limit=pagination.page_size,
        )
        total = await self.user_repo.count_filtered(
            status=filters.status,
            trashed=filters.trashed,
        )
        return SearchResult(items=users, total=total)

    async def get_user(self, context: AuthContext, user_id: uuid.UUID) -> User:
        """
        Get a user, soft-deleted ones included.

        Requires Own Profile Read for oneself, User Read for others.
        """
        await self.authz.authorize_scoped(context, user_id, "read")
        return await self._get_user(user_id, include_deleted=True)

    async def me(self, context: AuthContext) -> User:
        """Return the authenticated user (requires Own Profile Read)."""
        await self.authz.authorize(context, self._permission("own_profile", "read"))
        return context.user

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def create_user(self, context: AuthContext, user_data: UserCreate) -> User:
        """Create a user on behalf of an administrator (requires User Create)."""
        await self.authz.authorize(context, self._permission("user", "create"))

        async with atomic(self.session):
            user = await self.create_account(user_data)

        logger.info(f"User {user.id} created by {context.user_id}")
        return user

    async def update_user(
        self,
        context: AuthContext,
        user_id: uuid.UUID,
        update_data: UserUpdate,
    ) -> User:
        """
        Update profile fields of a non-deleted user.

        Requires Own Profile Update for oneself, User Update for others.

        Raises:
            AlreadyExistsError: If a new identifier is taken
            NotFoundError: If the user does not exist or is soft-deleted
        """
        await self.authz.authorize_scoped(context, user_id, "update")
        user = await self._get_user(user_id, include_deleted=False)

        changes = update_data.model_dump(exclude_unset=True, exclude_none=True)
        await self._ensure_identifiers_available(changes, exclude_user_id=user.id)

        async with atomic(self.session):
            for field, value in changes.items():
                setattr(user, field, value)
            user = await self.user_repo.update(user)

        logger.info(f"User {user.id} updated by {context.user_id}: {sorted(changes)}")
        return user

    async def change_status(
        self,
        context: AuthContext,
        user_id: uuid.UUID,
        status: bool,
    ) -> User:
        """
        Enable or disable an account.

        Disabling revokes every token of the user in the same transaction.
        Acting on oneself is always rejected.

        Raises:
            SelfActionForbiddenError: If user_id is the acting user
            InsufficientPermissionsError: Without User Status Change
            NotFoundError: If the user does not exist or is soft-deleted
        """
        self.authz.forbid_self(context, user_id)
        await self.authz.authorize(context, self._permission("user", "status_change"))
        user = await self._get_user(user_id, include_deleted=False)

        async with atomic(self.session):
            user.status = status
            user = await self.user_repo.update(user)
            if not status:
                await self.token_service.revoke_all(user.id)

        logger.info(
            f"User {user.id} {'enabled' if status else 'disabled'} by {context.user_id}"
        )
        return user

    async def soft_delete(self, context: AuthContext, user_id: uuid.UUID) -> None:
        """
        Soft delete a user and revoke all of their tokens.

        Requires Own Profile Delete for oneself, User Delete for others.
        """
        await self.authz.authorize_scoped(context, user_id, "delete")
        user = await self._get_user(user_id, include_deleted=False)

        async with atomic(self.session):
            await self.user_repo.soft_delete(user)
            await self.token_service.revoke_all(user.id)

        logger.info(f"User {user.id} soft-deleted by {context.user_id}")

    async def restore(self, context: AuthContext, user_id: uuid.UUID) -> User:
        """
        Restore a soft-deleted user. Tokens are not reissued.

        Raises:
            ConflictError: If the user is not soft-deleted
        """
        await self.authz.authorize(context, self._permission("user", "restore"))
        user = await self._get_user(user_id, include_deleted=True)

        if not user.is_deleted:
            raise ConflictError(self.catalog.message("not_deleted"))

        async with atomic(self.session):
            user = await self.user_repo.restore(user)

        logger.info(f"User {user.id} restored by {context.user_id}")
        return user

    async def force_delete(self, context: AuthContext, user_id: uuid.UUID) -> None:
        """
        Permanently delete a soft-deleted user.

        Raises:
            ConflictError: If the user is not soft-deleted
        """
        await self.authz.authorize(
            context, self._permission("user", "delete_permanently")
        )
        user = await self._get_user(user_id, include_deleted=True)

        if not user.is_deleted:
            raise ConflictError(self.catalog.message("not_deleted"))

        async with atomic(self.session):
            await self.token_service.revoke_all(user.id)
            await self.user_repo.delete(user)

        logger.info(f"User {user_id} permanently deleted by {context.user_id}")

    async def reset_password(
        self,
        context: AuthContext,
        user_id: uuid.UUID,
        reset_data: UserPasswordReset,
    ) -> None:
        """
        Set another user's password without their current password.

        Acting on oneself is always rejected; use the password change flow.
        """
        self.authz.forbid_self(context, user_id)
        await self.authz.authorize(context, self._permission("user", "password_reset"))
        user = await self._get_user(user_id, include_deleted=False)

        async with atomic(self.session):
            user.password_hash = hash_password(reset_data.password)
            await self.user_repo.update(user)

        logger.info(f"Password of user {user.id} reset by {context.user_id}")
