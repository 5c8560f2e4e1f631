"""
Database models.

Importing this package registers every table on Base.metadata.
"""

from warden.models.access_token import WILDCARD_ABILITY, AccessToken
from warden.models.base import Base
from warden.models.enums import PermissionScope
from warden.models.role import Permission, PermissionGroup, Role, role_permissions
from warden.models.user import User, user_permissions, user_roles

__all__ = [
    "AccessToken",
    "Base",
    "Permission",
    "PermissionGroup",
    "PermissionScope",
    "Role",
    "User",
    "WILDCARD_ABILITY",
    "role_permissions",
    "user_permissions",
    "user_roles",
]
