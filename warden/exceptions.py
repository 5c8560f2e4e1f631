"""
Custom exception classes for Warden.

This module defines a hierarchy of custom exceptions that map to HTTP status codes
and provide consistent error responses across the API.

Exception hierarchy:
    AppException (base)
    ├── AuthenticationError (401)
    │   ├── MissingTokenError
    │   ├── InvalidTokenError
    │   └── InvalidCredentialsError
    ├── AuthorizationError (403)
    │   ├── InsufficientPermissionsError
    │   └── SelfActionForbiddenError
    ├── ResourceError
    │   ├── NotFoundError (404)
    │   ├── AlreadyExistsError (409)
    │   └── ConflictError (409)
    └── PersistenceError (500)

Request validation (422) and rate limiting (429) are reported by the
handlers in core/handlers.py from FastAPI and slowapi exceptions.
"""

from typing import Any


class AppException(Exception):
    """
    Base exception class for all application exceptions.

    Attributes:
        status_code: HTTP status code for the error
        error_code: Machine-readable error code
        message: Human-readable error message
        details: Optional additional error details
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}


# =============================================================================
# Authentication Errors (401 Unauthorized)
# =============================================================================


class AuthenticationError(AppException):
    """Base class for authentication errors."""

    def __init__(
        self,
        message: str = "Authentication failed. Please log in to continue.",
        error_code: str = "AUTHENTICATION_FAILED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=401,
            error_code=error_code,
            details=details,
        )


class MissingTokenError(AuthenticationError):
    """Raised when a protected request carries no bearer token."""

    def __init__(
        self,
        message: str = "Token is required.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="TOKEN_REQUIRED",
            details=details,
        )


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token is unknown, expired, or its owner is disabled."""

    def __init__(
        self,
        message: str = "Authentication failed. Please log in to continue.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INVALID_TOKEN",
            details=details,
        )


class InvalidCredentialsError(AuthenticationError):
    """Raised when login credentials or a current password are wrong."""

    def __init__(
        self,
        message: str = "Invalid credentials.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INVALID_CREDENTIALS",
            details=details,
        )


# =============================================================================
# Authorization Errors (403 Forbidden)
# =============================================================================


class AuthorizationError(AppException):
    """Base class for authorization errors."""

    def __init__(
        self,
        message: str = "Access forbidden",
        error_code: str = "AUTHORIZATION_FAILED",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=403,
            error_code=error_code,
            details=details,
        )


class InsufficientPermissionsError(AuthorizationError):
    """Raised when user lacks required permissions for an action."""

    def __init__(
        self,
        message: str = "You do not have any permission to perform this action.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INSUFFICIENT_PERMISSIONS",
            details=details,
        )


class SelfActionForbiddenError(AuthorizationError):
    """Raised when a user attempts an administrative action on their own account."""

    def __init__(
        self,
        message: str = "You cannot perform this action on your own account.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="SELF_ACTION_FORBIDDEN",
            details=details,
        )


# =============================================================================
# Resource Errors
# =============================================================================


class ResourceError(AppException):
    """Base class for resource-related errors."""

    def __init__(
        self,
        message: str,
        status_code: int,
        error_code: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=status_code,
            error_code=error_code,
            details=details,
        )


class NotFoundError(ResourceError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None:
            message = f"{resource} not found."
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND",
            details=details,
        )


class AlreadyExistsError(ResourceError):
    """Raised when attempting to create a resource that already exists."""

    def __init__(
        self,
        resource: str = "Resource",
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if message is None:
            message = f"{resource} already exists."
        super().__init__(
            message=message,
            status_code=409,
            error_code="ALREADY_EXISTS",
            details=details,
        )


class ConflictError(ResourceError):
    """Raised when there's a conflict with the current state of the resource."""

    def __init__(
        self,
        message: str = "Resource conflict",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=409,
            error_code="CONFLICT",
            details=details,
        )


# =============================================================================
# Persistence Error (500 Internal Server Error)
# =============================================================================


class PersistenceError(AppException):
    """Raised when the database rejects or fails a write."""

    def __init__(
        self,
        message: str = "Something went wrong. Please try again later.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="PERSISTENCE_ERROR",
            details=details,
        )
