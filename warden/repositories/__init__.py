"""Data access layer."""

from warden.repositories.access_token_repository import AccessTokenRepository
from warden.repositories.base import BaseRepository
from warden.repositories.permission_repository import PermissionRepository
from warden.repositories.role_repository import RoleRepository
from warden.repositories.user_repository import UserRepository

__all__ = [
    "AccessTokenRepository",
    "BaseRepository",
    "PermissionRepository",
    "RoleRepository",
    "UserRepository",
]
