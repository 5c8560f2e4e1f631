"""
Access control catalog.

This module provides:
- The role, permission group and permission names used across the service
- User facing messages shared by services and exception handlers
- load_catalog(): builds the immutable catalog once per process

The catalog is read-only. It is built at import of the application and passed
to services through dependency injection (see api/dependencies.py).
"""

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

# Role grants reference permission group keys; this marker grants every group
ALL_GROUPS = "*"


def _freeze(data: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(data))


@dataclass(frozen=True)
class PermissionGroup:
    """
    Named group of permissions, keyed by action.

    Attributes:
        key: Internal key (e.g. "own_profile")
        permissions: Mapping of action -> permission name
    """

    key: str
    permissions: Mapping[str, str]

    @property
    def display_name(self) -> str:
        """Human readable group name ("own_profile" -> "Own Profile")."""
        return self.key.replace("_", " ").title()


@dataclass(frozen=True)
class AccessCatalog:
    """
    Immutable catalog of roles, permissions and messages.

    Attributes:
        roles: Mapping of role key -> role name
        groups: Mapping of group key -> PermissionGroup
        role_grants: Mapping of role key -> tuple of granted group keys
        messages: Mapping of message key -> message text
    """

    roles: Mapping[str, str]
    groups: Mapping[str, PermissionGroup]
    role_grants: Mapping[str, tuple[str, ...]]
    messages: Mapping[str, str] = field(default_factory=dict)

    def role(self, key: str) -> str:
        """Return the role name for a role key."""
        return self.roles[key]

    def permission(self, group: str, action: str) -> str:
        """
        Return the permission name for a group/action pair.

        Raises:
            KeyError: If the group or action is not part of the catalog
        """
        return self.groups[group].permissions[action]

    def group_permissions(self, group: str) -> tuple[str, ...]:
        """Return all permission names of a group, in catalog order."""
        return tuple(self.groups[group].permissions.values())

    def all_permissions(self) -> tuple[str, ...]:
        """Return every permission name in the catalog."""
        return tuple(
            name for group in self.groups.values() for name in group.permissions.values()
        )

    def permissions_for_role(self, role_key: str) -> tuple[str, ...]:
        """Return the permission names granted to a catalog role."""
        granted = self.role_grants.get(role_key, ())
        if ALL_GROUPS in granted:
            return self.all_permissions()
        return tuple(name for group in granted for name in self.group_permissions(group))

    def message(self, key: str) -> str:
        """Return a user facing message by key."""
        return self.messages[key]


# =============================================================================
# Catalog Definition
# =============================================================================

ROLES = {
    "super_admin": "Super Admin",
    "admin": "Admin",
    "user": "User",
}

PERMISSIONS = {
    "user": {
        "create": "User Create",
        "read": "User Read",
        "update": "User Update",
        "delete": "User Delete",
        "delete_permanently": "User Delete Permanently",
        "restore": "User Restore",
        "status_change": "User Status Change",
        "session_read": "User Session Read",
        "session_delete": "User Session Delete",
        "password_reset": "User Password Reset",
    },
    "own_profile": {
        "read": "Own Profile Read",
        "update": "Own Profile Update",
        "delete": "Own Profile Delete",
        "password_change": "Own Password Change",
        "session_read": "Own Session Read",
        "session_delete": "Own Session Delete",
    },
    "role": {
        "create": "Role Create",
        "read": "Role Read",
        "update": "Role Update",
        "delete": "Role Delete",
        "assign_to_user": "Role Assign to User",
    },
    "permission": {
        "read": "Permission Read",
        "assign_to_role": "Permission Assign to Role",
        "assign_to_user": "Permission Assign to User",
    },
}

ROLE_GRANTS = {
    "super_admin": (ALL_GROUPS,),
    "admin": ("user",),
    "user": ("own_profile",),
}

MESSAGES = {
    "invalid_credentials": "Invalid credentials.",
    "token_required": "Token is required.",
    "unauthenticated": "Authentication failed. Please log in to continue.",
    "token_not_found": "Token not found or does not belong to the authenticated user.",
    "no_permission": "You do not have any permission to perform this action.",
    "self_action": "You cannot perform this action on your own account.",
    "system_error": "Something went wrong. Please try again later.",
    "not_deleted": "User is not deleted.",
}


@lru_cache
def load_catalog() -> AccessCatalog:
    """
    Build the access catalog.

    Cached so every caller in the process shares the same instance.

    Returns:
        Immutable AccessCatalog
    """
    groups = {
        key: PermissionGroup(key=key, permissions=_freeze(actions))
        for key, actions in PERMISSIONS.items()
    }
    return AccessCatalog(
        roles=_freeze(ROLES),
        groups=MappingProxyType(groups),
        role_grants=MappingProxyType(dict(ROLE_GRANTS)),
        messages=_freeze(MESSAGES),
    )
