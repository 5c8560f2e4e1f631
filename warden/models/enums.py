"""
Enums shared by models, services and schemas.

This module defines:
- PermissionScope: Which permission group governs an action on a user
- TrashedFilter: Visibility of soft-deleted users in listings
"""

import enum


class PermissionScope(str, enum.Enum):
    """
    Scope of an action performed on a user account.

    Attributes:
        OWN_PROFILE: The acting user targets their own account
            (checked against the "own_profile" permission group)
        USER: The acting user targets another account
            (checked against the "user" permission group)
    """

    OWN_PROFILE = "own_profile"
    USER = "user"


class TrashedFilter(str, enum.Enum):
    """
    Soft-delete visibility for user listings.

    Attributes:
        WITHOUT: Only users that are not deleted (default)
        WITH: Deleted and non-deleted users
        ONLY: Only soft-deleted users
    """

    WITHOUT = "without"
    WITH = "with"
    ONLY = "only"
