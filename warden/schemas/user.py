"""
User Pydantic schemas for API request/response handling.

This module provides:
- User creation and update schemas
- User response schemas
- Password change, password reset and status change schemas
- User filtering schemas
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from warden.models.enums import TrashedFilter

PASSWORD_MIN_LENGTH = 8


def _normalize_email(value: str | None) -> str | None:
    return value.lower() if value is not None else None


class UserBase(BaseModel):
    """
    Base user schema with common fields.

    Attributes:
        name: Display name
        username: Unique login name
        employee_id: Unique employee identifier
        email: Unique email address
    """

    name: str = Field(min_length=2, max_length=255, description="User's display name")
    username: str = Field(min_length=2, max_length=30, description="Unique username")
    employee_id: str = Field(min_length=2, max_length=30, description="Unique employee id")
    email: EmailStr = Field(max_length=255, description="User's email address")

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()


class UserCreate(UserBase):
    """
    Schema for registration and admin user creation.

    The password must be repeated in password_confirmation.
    """

    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=255)
    password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class UserUpdate(BaseModel):
    """
    Schema for updating user information.

    All fields are optional to support partial updates (PATCH).
    """

    name: str | None = Field(default=None, min_length=2, max_length=255)
    username: str | None = Field(default=None, min_length=2, max_length=30)
    employee_id: str | None = Field(default=None, min_length=2, max_length=30)
    email: EmailStr | None = Field(default=None, max_length=255)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str | None) -> str | None:
        return _normalize_email(value)


class UserPasswordChange(BaseModel):
    """Schema for changing the authenticated user's own password."""

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=255)
    new_password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self) -> "UserPasswordChange":
        if self.new_password != self.new_password_confirmation:
            raise ValueError("The new password confirmation does not match.")
        return self


class UserPasswordReset(BaseModel):
    """Schema for an administrative password reset (no old password)."""

    password: str = Field(min_length=PASSWORD_MIN_LENGTH, max_length=255)
    password_confirmation: str

    @model_validator(mode="after")
    def passwords_match(self) -> "UserPasswordReset":
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self


class UserStatusChange(BaseModel):
    """Schema for enabling or disabling an account."""

    status: bool


class UserFilterParams(BaseModel):
    """
    Query parameters for the user list.

    Attributes:
        status: Filter by enabled flag
        trashed: Include soft-deleted users ("with") or list only them ("only")
    """

    status: bool | None = Field(default=None, description="Filter by status")
    trashed: TrashedFilter = Field(
        default=TrashedFilter.WITHOUT,
        description="Soft-deleted visibility: without, with, only",
    )


class RoleSummary(BaseModel):
    """Role reference embedded in user responses."""

    id: uuid.UUID
    name: str

    model_config = ConfigDict(from_attributes=True)


class UserResponse(BaseModel):
    """Full user representation."""

    id: uuid.UUID
    name: str
    username: str
    employee_id: str
    email: str
    status: bool
    roles: list[RoleSummary] = Field(default_factory=list)
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class UserListItem(BaseModel):
    """Compact user representation for listings."""

    id: uuid.UUID
    name: str
    username: str
    employee_id: str
    email: str
    status: bool
    created_at: datetime
    deleted_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
