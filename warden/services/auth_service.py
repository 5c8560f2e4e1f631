"""
Authentication service for registration, login and session management.

This module provides:
- User registration (user + first token in one transaction)
- Login by username, employee id or email
- Logout (revoke the current token)
- Login session listing and revocation
- Password change for the authenticated user
"""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.database import atomic
from warden.core.security import hash_password, verify_password
from warden.exceptions import InvalidCredentialsError, NotFoundError
from warden.models.access_token import AccessToken
from warden.models.user import User
from warden.repositories.user_repository import UserRepository
from warden.schemas.user import UserCreate, UserPasswordChange
from warden.services.authorization_service import AuthContext, AuthorizationService
from warden.services.token_service import AccessTokenService
from warden.services.user_service import UserService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service class for authentication operations.

    All methods require an active database session. Methods that write
    commit through core.database.atomic.
    """

    def __init__(self, session: AsyncSession, catalog: AccessCatalog | None = None):
        self.session = session
        self.catalog = catalog or load_catalog()
        self.user_repo = UserRepository(session)
        self.user_service = UserService(session, self.catalog)
        self.token_service = AccessTokenService(session, self.catalog)
        self.authz = AuthorizationService(session, self.catalog)

    async def register(
        self,
        user_data: UserCreate,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[User, AccessToken, str]:
        """
        Register a new user and issue their first access token.

        The user and the token are committed together: if issuing the token
        fails, the user is not created either.

        Returns:
            Tuple of (User, AccessToken, plaintext token)

        Raises:
            AlreadyExistsError: If username, employee id or email is taken
            PersistenceError: If the transaction cannot be committed
        """
        async with atomic(self.session):
            user = await self.user_service.create_account(user_data)
            token, plaintext = await self.token_service.issue(
                user,
                ip_address=ip_address,
                user_agent=user_agent,
            )

        logger.info(f"User registered successfully: {user.id} ({user.username})")
        return user, token, plaintext

    async def login(
        self,
        login: str,
        password: str,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> tuple[User, AccessToken, str]:
        """
        Authenticate a user and issue a new access token.

        Unknown users, wrong passwords and disabled accounts all fail the
        same way so the response does not reveal which one occurred.

        Args:
            login: Username, employee id or email
            password: Plain text password

        Raises:
            InvalidCredentialsError: If authentication fails
        """
        message = self.catalog.message("invalid_credentials")

        user = await self.user_repo.get_by_login(login)
        if user is None:
            logger.warning(f"Login failed: no user matches '{login}'")
            raise InvalidCredentialsError(message)

        if not verify_password(password, user.password_hash):
            logger.warning(f"Login failed: invalid password for user {user.id}")
            raise InvalidCredentialsError(message)

        if not user.status:
            logger.warning(f"Login failed: user {user.id} is disabled")
            raise InvalidCredentialsError(message)

        async with atomic(self.session):
            await self.user_repo.update_last_login(user)
            token, plaintext = await self.token_service.issue(
                user,
                ip_address=ip_address,
                user_agent=user_agent,
            )

        logger.info(f"User logged in successfully: {user.id} ({user.username})")
        return user, token, plaintext

    async def logout(self, context: AuthContext) -> None:
        """Revoke the token that authenticated the current request."""
        async with atomic(self.session):
            await self.token_service.revoke(context.user, current_token=context.token)

        logger.info(f"User logged out: {context.user_id}")

    async def _session_owner(self, context: AuthContext, user_id: uuid.UUID) -> User:
        if user_id == context.user_id:
            return context.user
        user = await self.user_repo.get_by_id(user_id, include_deleted=False)
        if user is None:
            raise NotFoundError("User")
        return user

    async def login_sessions(
        self,
        context: AuthContext,
        user_id: uuid.UUID | None = None,
    ) -> list[AccessToken]:
        """
        List active tokens of the acting user or of another user.

        Requires Own Session Read for oneself, User Session Read for others.
        """
        target_id = user_id or context.user_id
        await self.authz.authorize_scoped(context, target_id, "session_read")
        owner = await self._session_owner(context, target_id)
        return await self.token_service.list_active(owner)

    async def delete_session(
        self,
        context: AuthContext,
        token_id: uuid.UUID,
        user_id: uuid.UUID | None = None,
    ) -> None:
        """
        Revoke one token of the acting user or of another user.

        Requires Own Session Delete for oneself, User Session Delete for others.

        Raises:
            NotFoundError: If the token does not belong to the target user
        """
        target_id = user_id or context.user_id
        await self.authz.authorize_scoped(context, target_id, "session_delete")
        owner = await self._session_owner(context, target_id)

        async with atomic(self.session):
            await self.token_service.revoke(owner, token_id=token_id)

    async def change_password(
        self,
        context: AuthContext,
        password_data: UserPasswordChange,
    ) -> None:
        """
        Change the acting user's password after re-verifying the current one.

        Existing tokens stay valid.

        Raises:
            InsufficientPermissionsError: Without Own Password Change
            InvalidCredentialsError: If the current password is wrong
        """
        await self.authz.authorize(
            context, self.catalog.permission("own_profile", "password_change")
        )

        user = context.user
        if not verify_password(password_data.current_password, user.password_hash):
            logger.warning(f"Password change failed: wrong current password for {user.id}")
            raise InvalidCredentialsError(self.catalog.message("invalid_credentials"))

        async with atomic(self.session):
            user.password_hash = hash_password(password_data.new_password)
            await self.user_repo.update(user)

        logger.info(f"Password changed for user {user.id}")
