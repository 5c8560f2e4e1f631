"""Business logic layer."""

from warden.services.auth_service import AuthService
from warden.services.authenticator import Authenticator, RequestCredentials
from warden.services.authorization_service import (
    AuthContext,
    AuthorizationService,
    scope_of,
)
from warden.services.catalog_service import CatalogService
from warden.services.permission_service import PermissionService
from warden.services.role_service import RoleService
from warden.services.token_service import AccessTokenService
from warden.services.user_service import UserService

__all__ = [
    "AccessTokenService",
    "AuthContext",
    "AuthService",
    "Authenticator",
    "AuthorizationService",
    "CatalogService",
    "PermissionService",
    "RequestCredentials",
    "RoleService",
    "UserService",
    "scope_of",
]
