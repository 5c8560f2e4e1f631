"""
Request authenticator.

Runs once per request before any handler logic:
1. Public paths pass through without a token
2. A missing bearer token is rejected
3. The token is resolved through the token store
4. The resolved identity is returned as an AuthContext

No permission checks happen here.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.config import settings
from warden.exceptions import InvalidTokenError, MissingTokenError
from warden.services.authorization_service import AuthContext
from warden.services.token_service import AccessTokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestCredentials:
    """Authentication inputs extracted from an HTTP request."""

    path: str
    bearer_token: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


class Authenticator:
    """
    Token gate for protected requests.

    Usage:
        authenticator = Authenticator(session)
        context = await authenticator.authenticate(
            RequestCredentials(path="/api/users/me", bearer_token=token)
        )
    """

    def __init__(
        self,
        session: AsyncSession,
        catalog: AccessCatalog | None = None,
        public_paths: list[str] | None = None,
    ):
        self.catalog = catalog or load_catalog()
        self.token_service = AccessTokenService(session, self.catalog)
        self.public_paths = frozenset(
            public_paths if public_paths is not None else settings.public_paths_list
        )

    def is_public(self, path: str) -> bool:
        """Check if a path skips token authentication."""
        return path.rstrip("/") in self.public_paths

    async def authenticate(self, credentials: RequestCredentials) -> AuthContext | None:
        """
        Authenticate a request.

        Returns:
            AuthContext for protected paths, None for public paths

        Raises:
            MissingTokenError: If a protected path carries no bearer token
            InvalidTokenError: If the token cannot be resolved
        """
        if self.is_public(credentials.path):
            return None

        if not credentials.bearer_token:
            logger.warning(f"Authentication failed: missing bearer token ({credentials.path})")
            raise MissingTokenError(self.catalog.message("token_required"))

        try:
            user, token = await self.token_service.resolve(credentials.bearer_token)
        except InvalidTokenError:
            logger.warning(
                f"Authentication failed: invalid token "
                f"(path={credentials.path} client={credentials.ip_address})"
            )
            raise

        return AuthContext(
            user=user,
            token=token,
            ip_address=credentials.ip_address,
            user_agent=credentials.user_agent,
        )
