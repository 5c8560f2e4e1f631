"""
User management API routes.

This module provides:
- GET /api/users/me - Own profile
- PATCH /api/users/change-password - Change own password
- GET /api/users - List users (paginated, status/trashed filters)
- POST /api/users - Create user
- GET/PATCH/DELETE /api/users/{user_id} - Show, update, soft delete
- POST /api/users/{user_id}/restore - Restore a soft-deleted user
- DELETE /api/users/{user_id}/delete-permanently - Hard delete
- PATCH /api/users/{user_id}/change-status - Enable/disable
- POST /api/users/{user_id}/reset-password - Administrative reset
"""

import logging
import uuid

from fastapi import APIRouter, Depends, status

from warden.api.dependencies import AuthServiceDep, CurrentContext, UserServiceDep
from warden.schemas.common import (
    MessageResponse,
    PaginatedResponse,
    PaginationMeta,
    PaginationParams,
)
from warden.schemas.user import (
    UserCreate,
    UserFilterParams,
    UserListItem,
    UserPasswordChange,
    UserPasswordReset,
    UserResponse,
    UserStatusChange,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user profile",
)
async def get_current_user_profile(
    context: CurrentContext,
    user_service: UserServiceDep,
) -> UserResponse:
    user = await user_service.me(context)
    return UserResponse.model_validate(user)


@router.patch(
    "/change-password",
    response_model=MessageResponse,
    summary="Change own password",
)
async def change_password(
    password_data: UserPasswordChange,
    context: CurrentContext,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    """
    Change the authenticated user's password.

    Raises:
        401: Current password is wrong
    """
    await auth_service.change_password(context, password_data)
    return MessageResponse(message="Password updated successfully.")


@router.get(
    "",
    response_model=PaginatedResponse[UserListItem],
    summary="List users",
)
async def list_users(
    context: CurrentContext,
    user_service: UserServiceDep,
    pagination: PaginationParams = Depends(),
    filters: UserFilterParams = Depends(),
) -> PaginatedResponse[UserListItem]:
    """
    List users with pagination and filtering.

    Query parameters:
        - page, page_size: Pagination
        - status: Filter by enabled flag
        - trashed: without (default), with, only
    """
    result = await user_service.list_users(context, filters, pagination)
    return PaginatedResponse(
        data=[UserListItem.model_validate(user) for user in result.items],
        meta=PaginationMeta(
            total=result.total,
            page=pagination.page,
            page_size=pagination.page_size,
            total_pages=PaginationParams.calculate_total_pages(
                result.total, pagination.page_size
            ),
        ),
    )


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    user_data: UserCreate,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> UserResponse:
    user = await user_service.create_user(context, user_data)
    return UserResponse.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    description="Soft-deleted users are included.",
)
async def get_user(
    user_id: uuid.UUID,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> UserResponse:
    user = await user_service.get_user(context, user_id)
    return UserResponse.model_validate(user)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update user",
)
async def update_user(
    user_id: uuid.UUID,
    update_data: UserUpdate,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> UserResponse:
    user = await user_service.update_user(context, user_id, update_data)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Soft delete user",
    description="Marks the user as deleted and revokes all of their tokens.",
)
async def delete_user(
    user_id: uuid.UUID,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> MessageResponse:
    await user_service.soft_delete(context, user_id)
    return MessageResponse(message="User deleted successfully.")


@router.post(
    "/{user_id}/restore",
    response_model=UserResponse,
    summary="Restore soft-deleted user",
)
async def restore_user(
    user_id: uuid.UUID,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> UserResponse:
    user = await user_service.restore(context, user_id)
    return UserResponse.model_validate(user)


@router.delete(
    "/{user_id}/delete-permanently",
    response_model=MessageResponse,
    summary="Permanently delete a soft-deleted user",
)
async def force_delete_user(
    user_id: uuid.UUID,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> MessageResponse:
    await user_service.force_delete(context, user_id)
    return MessageResponse(message="User deleted permanently.")


@router.patch(
    "/{user_id}/change-status",
    response_model=UserResponse,
    summary="Enable or disable user",
    description="Disabling a user revokes all of their tokens.",
)
async def change_user_status(
    user_id: uuid.UUID,
    status_data: UserStatusChange,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> UserResponse:
    user = await user_service.change_status(context, user_id, status_data.status)
    return UserResponse.model_validate(user)


@router.post(
    "/{user_id}/reset-password",
    response_model=MessageResponse,
    summary="Reset a user's password",
)
async def reset_user_password(
    user_id: uuid.UUID,
    reset_data: UserPasswordReset,
    context: CurrentContext,
    user_service: UserServiceDep,
) -> MessageResponse:
    await user_service.reset_password(context, user_id, reset_data)
    return MessageResponse(message="Password reset successfully.")
