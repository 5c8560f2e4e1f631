"""
Unit tests for exception handlers.

Tests cover:
- AppException handler response envelope
- WWW-Authenticate header on authentication failures
- Validation error handler formatting
- General exception handler
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import Request
from fastapi.exceptions import RequestValidationError

from warden.core.handlers import (
    app_exception_handler,
    general_exception_handler,
    validation_exception_handler,
)
from warden.exceptions import (
    InsufficientPermissionsError,
    InvalidTokenError,
    NotFoundError,
)


@pytest.fixture
def mock_request() -> MagicMock:
    """Create a mock request with request_id in state."""
    request = MagicMock(spec=Request)
    request.state.request_id = "test-request-123"
    request.client.host = "127.0.0.1"
    return request


class TestAppExceptionHandler:
    @pytest.mark.asyncio
    async def test_envelope(self, mock_request):
        response = await app_exception_handler(mock_request, NotFoundError("User"))
        body = json.loads(response.body)

        assert response.status_code == 404
        assert body == {
            "error": {"code": "NOT_FOUND", "message": "User not found.", "details": {}},
            "meta": {"request_id": "test-request-123"},
        }

    @pytest.mark.asyncio
    async def test_authentication_error_sets_challenge(self, mock_request):
        response = await app_exception_handler(
            mock_request, InvalidTokenError("Authentication failed.")
        )
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_authorization_error_has_no_challenge(self, mock_request):
        response = await app_exception_handler(
            mock_request, InsufficientPermissionsError("Nope.")
        )
        assert response.status_code == 403
        assert "WWW-Authenticate" not in response.headers


class TestValidationExceptionHandler:
    @pytest.mark.asyncio
    async def test_lists_fields(self, mock_request):
        exc = RequestValidationError(
            [{"loc": ("body", "email"), "msg": "field required", "type": "missing"}]
        )
        response = await validation_exception_handler(mock_request, exc)
        body = json.loads(response.body)

        assert response.status_code == 422
        assert body["error"]["code"] == "VALIDATION_ERROR"
        assert body["error"]["details"] == [
            {"field": "body.email", "message": "field required", "type": "missing"}
        ]


class TestGeneralExceptionHandler:
    @pytest.mark.asyncio
    async def test_hides_details(self, mock_request):
        response = await general_exception_handler(mock_request, RuntimeError("boom"))
        body = json.loads(response.body)

        assert response.status_code == 500
        assert body["error"]["code"] == "INTERNAL_ERROR"
        assert "boom" not in body["error"]["message"]
