"""
Permission API routes.

This module provides:
- GET /api/permissions - List permissions
- POST /api/permissions/assign-to-user/{user_id} - Replace a user's direct permissions
"""

import uuid

from fastapi import APIRouter

from warden.api.dependencies import CurrentContext, PermissionServiceDep
from warden.api.routes.roles import user_access_response
from warden.schemas.role import PermissionAssignment, PermissionResponse, UserAccessResponse

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("", response_model=list[PermissionResponse], summary="List permissions")
async def list_permissions(
    context: CurrentContext,
    permission_service: PermissionServiceDep,
) -> list[PermissionResponse]:
    permissions = await permission_service.list_permissions(context)
    return [PermissionResponse.model_validate(permission) for permission in permissions]


@router.post(
    "/assign-to-user/{user_id}",
    response_model=UserAccessResponse,
    summary="Replace a user's direct permissions",
)
async def assign_permissions_to_user(
    user_id: uuid.UUID,
    assignment: PermissionAssignment,
    context: CurrentContext,
    permission_service: PermissionServiceDep,
) -> UserAccessResponse:
    user = await permission_service.assign_to_user(
        context, user_id, assignment.permission_ids
    )
    return user_access_response(user)
