"""
Authentication API routes.

This module provides REST endpoints for:
- User registration
- User login (rate limited)
- Logout
- Login session listing and revocation
"""

import logging
import uuid

from fastapi import APIRouter, Request, status

from warden.api.dependencies import AuthServiceDep, CurrentContext
from warden.core.config import settings
from warden.core.rate_limit import limiter
from warden.models.access_token import AccessToken
from warden.models.user import User
from warden.schemas.auth import AccessTokenResponse, LoginRequest, TokenResponse
from warden.schemas.common import MessageResponse
from warden.schemas.user import UserCreate, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Authentication"])


def _token_response(user: User, token: AccessToken, plaintext: str) -> TokenResponse:
    return TokenResponse(
        user=UserResponse.model_validate(user),
        access_token=plaintext,
        expires_at=token.expires_at,
    )


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create an account and return its first access token.",
)
async def register(
    user_data: UserCreate,
    request: Request,
    auth_service: AuthServiceDep,
) -> TokenResponse:
    """
    Register a new user.

    Raises:
        409: Username, employee id or email already exists
        422: Invalid input or password confirmation mismatch
    """
    user, token, plaintext = await auth_service.register(
        user_data=user_data,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
    )
    return _token_response(user, token, plaintext)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with username, employee id or email",
    description="**Rate Limit:** Configurable via RATE_LIMIT_LOGIN (default: 10/minute)",
)
@limiter.limit(settings.rate_limit_login)
async def login(
    credentials: LoginRequest,
    request: Request,
    auth_service: AuthServiceDep,
) -> TokenResponse:
    """
    Login and receive an access token.

    Raises:
        401: Invalid credentials or disabled account
        429: Too many attempts
    """
    user, token, plaintext = await auth_service.login(
        login=credentials.login,
        password=credentials.password,
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("User-Agent"),
    )
    return _token_response(user, token, plaintext)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout",
    description="Revoke the access token used for this request.",
)
async def logout(
    context: CurrentContext,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    await auth_service.logout(context)
    return MessageResponse(message="Logged out successfully.")


@router.get(
    "/login-sessions",
    response_model=list[AccessTokenResponse],
    summary="List own login sessions",
)
async def list_own_sessions(
    context: CurrentContext,
    auth_service: AuthServiceDep,
) -> list[AccessTokenResponse]:
    tokens = await auth_service.login_sessions(context)
    return [AccessTokenResponse.model_validate(token) for token in tokens]


@router.get(
    "/login-sessions/{user_id}",
    response_model=list[AccessTokenResponse],
    summary="List login sessions of a user",
    description="Own sessions need Own Session Read; other users need User Session Read.",
)
async def list_user_sessions(
    user_id: uuid.UUID,
    context: CurrentContext,
    auth_service: AuthServiceDep,
) -> list[AccessTokenResponse]:
    tokens = await auth_service.login_sessions(context, user_id=user_id)
    return [AccessTokenResponse.model_validate(token) for token in tokens]


@router.delete(
    "/delete-session/{token_id}",
    response_model=MessageResponse,
    summary="Revoke one of your login sessions",
)
async def delete_own_session(
    token_id: uuid.UUID,
    context: CurrentContext,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    """
    Revoke a token of the authenticated user.

    Raises:
        404: Token not found or does not belong to the authenticated user
    """
    await auth_service.delete_session(context, token_id)
    return MessageResponse(message="Session deleted successfully.")


@router.delete(
    "/login-sessions/{user_id}/{token_id}",
    response_model=MessageResponse,
    summary="Revoke a login session of a user",
)
async def delete_user_session(
    user_id: uuid.UUID,
    token_id: uuid.UUID,
    context: CurrentContext,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    await auth_service.delete_session(context, token_id, user_id=user_id)
    return MessageResponse(message="Session deleted successfully.")
