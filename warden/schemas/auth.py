"""
Authentication Pydantic schemas.

This module provides:
- Login request schema
- Token response returned by register and login
- Access token (login session) listing schema
"""

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from warden.schemas.user import UserResponse


class LoginRequest(BaseModel):
    """
    Login credentials.

    Attributes:
        login: Username, employee id or email
        password: Plain text password
    """

    login: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """
    Newly issued access token.

    The token value is only ever returned here.
    """

    user: UserResponse
    access_token: str
    token_type: Literal["Bearer"] = "Bearer"
    expires_at: datetime | None = None


class AccessTokenResponse(BaseModel):
    """Login session (access token) without its secret."""

    id: uuid.UUID
    name: str
    abilities: list[str]
    ip_address: str | None = None
    user_agent: str | None = None
    last_used_at: datetime | None = None
    expires_at: datetime | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
