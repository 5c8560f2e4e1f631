"""
Role management API routes.

This module provides:
- GET /api/roles - List roles with counts
- POST /api/roles - Create role with permissions
- GET/PUT/DELETE /api/roles/{role_id} - Show, update, delete role
- POST /api/roles/assign-to-user/{user_id} - Replace a user's roles
"""

import uuid

from fastapi import APIRouter, status

from warden.api.dependencies import CurrentContext, RoleServiceDep
from warden.models.user import User
from warden.schemas.common import MessageResponse
from warden.schemas.role import (
    RoleAssignment,
    RoleCreate,
    RoleListItem,
    RoleResponse,
    RoleUpdate,
    UserAccessResponse,
)

router = APIRouter(prefix="/roles", tags=["Roles"])


def user_access_response(user: User) -> UserAccessResponse:
    return UserAccessResponse(
        user_id=user.id,
        roles=user.role_names,
        permissions=[permission.name for permission in user.permissions],
    )


@router.get("", response_model=list[RoleListItem], summary="List roles")
async def list_roles(
    context: CurrentContext,
    role_service: RoleServiceDep,
) -> list[RoleListItem]:
    return await role_service.list_roles(context)


@router.post(
    "",
    response_model=RoleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create role",
    description="Creates the role and assigns the given permissions atomically.",
)
async def create_role(
    role_data: RoleCreate,
    context: CurrentContext,
    role_service: RoleServiceDep,
) -> RoleResponse:
    role = await role_service.create_role(context, role_data)
    return RoleResponse.model_validate(role)


@router.post(
    "/assign-to-user/{user_id}",
    response_model=UserAccessResponse,
    summary="Replace a user's roles",
)
async def assign_roles_to_user(
    user_id: uuid.UUID,
    assignment: RoleAssignment,
    context: CurrentContext,
    role_service: RoleServiceDep,
) -> UserAccessResponse:
    user = await role_service.assign_to_user(context, user_id, assignment.role_ids)
    return user_access_response(user)


@router.get("/{role_id}", response_model=RoleResponse, summary="Get role")
async def get_role(
    role_id: uuid.UUID,
    context: CurrentContext,
    role_service: RoleServiceDep,
) -> RoleResponse:
    role = await role_service.get_role(context, role_id)
    return RoleResponse.model_validate(role)


@router.put(
    "/{role_id}",
    response_model=RoleResponse,
    summary="Update role",
    description="Omit permission_ids to keep the current permissions; send [] to clear them.",
)
async def update_role(
    role_id: uuid.UUID,
    role_data: RoleUpdate,
    context: CurrentContext,
    role_service: RoleServiceDep,
) -> RoleResponse:
    role = await role_service.update_role(context, role_id, role_data)
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", response_model=MessageResponse, summary="Delete role")
async def delete_role(
    role_id: uuid.UUID,
    context: CurrentContext,
    role_service: RoleServiceDep,
) -> MessageResponse:
    await role_service.delete_role(context, role_id)
    return MessageResponse(message="Role deleted successfully.")
