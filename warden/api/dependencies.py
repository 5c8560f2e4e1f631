"""
FastAPI dependencies for authentication and service wiring.

This module provides:
- Access catalog injection
- Request authentication (bearer token -> AuthContext)
- Service factories bound to the request's database session
"""

import logging
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.database import get_db
from warden.exceptions import MissingTokenError
from warden.services import (
    AuthContext,
    Authenticator,
    AuthService,
    PermissionService,
    RequestCredentials,
    RoleService,
    UserService,
)

logger = logging.getLogger(__name__)

# Security scheme for Swagger UI - this adds the padlock icon
security = HTTPBearer(
    scheme_name="Bearer",
    description="Enter the access token returned by /api/login or /api/register",
    auto_error=False,
)

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_catalog(request: Request) -> AccessCatalog:
    """Return the process-wide access catalog stored on the application."""
    return getattr(request.app.state, "catalog", None) or load_catalog()


Catalog = Annotated[AccessCatalog, Depends(get_catalog)]


async def get_auth_context(
    request: Request,
    db: DbSession,
    catalog: Catalog,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> AuthContext:
    """
    Dependency that authenticates the request's bearer token.

    The resolved context is stored in request.state.auth. The user id is
    copied to request.state.user_id for the access log, which runs after
    the session has been closed.

    Raises:
        MissingTokenError (401): If no bearer token was sent
        InvalidTokenError (401): If the token cannot be resolved
    """
    authenticator = Authenticator(db, catalog)
    context = await authenticator.authenticate(
        RequestCredentials(
            path=request.url.path,
            bearer_token=credentials.credentials if credentials else None,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("User-Agent"),
        )
    )
    if context is None:
        # Public paths never declare this dependency
        raise MissingTokenError(catalog.message("token_required"))

    request.state.auth = context
    request.state.user_id = context.user_id
    return context


CurrentContext = Annotated[AuthContext, Depends(get_auth_context)]


# ============================================================================
# Service Dependencies
# ============================================================================


def get_auth_service(db: DbSession, catalog: Catalog) -> AuthService:
    return AuthService(db, catalog)


def get_user_service(db: DbSession, catalog: Catalog) -> UserService:
    return UserService(db, catalog)


def get_role_service(db: DbSession, catalog: Catalog) -> RoleService:
    return RoleService(db, catalog)


def get_permission_service(db: DbSession, catalog: Catalog) -> PermissionService:
    return PermissionService(db, catalog)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
RoleServiceDep = Annotated[RoleService, Depends(get_role_service)]
PermissionServiceDep = Annotated[PermissionService, Depends(get_permission_service)]
