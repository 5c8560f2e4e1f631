"""
Role and permission Pydantic schemas.

This module provides:
- Role create/update schemas with permission sets
- Role and permission assignment schemas
- Role and permission responses

Assignment lists are replaced wholesale. An explicit empty list clears the
set; on RoleUpdate an omitted permission_ids leaves the set unchanged.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RoleCreate(BaseModel):
    """Schema for creating a role with its permission set."""

    name: str = Field(min_length=2, max_length=255)
    permission_ids: list[uuid.UUID]


class RoleUpdate(BaseModel):
    """
    Schema for updating a role.

    Attributes:
        name: New role name (optional)
        permission_ids: Replacement permission set; None keeps the current set
    """

    name: str | None = Field(default=None, min_length=2, max_length=255)
    permission_ids: list[uuid.UUID] | None = None


class RoleAssignment(BaseModel):
    """Replacement role set for a user."""

    role_ids: list[uuid.UUID]


class PermissionAssignment(BaseModel):
    """Replacement direct permission set for a user."""

    permission_ids: list[uuid.UUID]


class PermissionResponse(BaseModel):
    id: uuid.UUID
    name: str
    guard_name: str
    group_name: str | None = None

    model_config = ConfigDict(from_attributes=True)


class RoleResponse(BaseModel):
    """Role with its permissions."""

    id: uuid.UUID
    name: str
    guard_name: str
    permissions: list[PermissionResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleListItem(BaseModel):
    """Role listing entry with usage counts."""

    id: uuid.UUID
    name: str
    guard_name: str
    permissions_count: int
    users_count: int
    created_at: datetime


class UserAccessResponse(BaseModel):
    """Roles and direct permissions of a user after an assignment."""

    user_id: uuid.UUID
    roles: list[str]
    permissions: list[str]
