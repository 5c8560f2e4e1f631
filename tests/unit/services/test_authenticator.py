"""
Unit tests for the request authenticator.
"""

import uuid
from unittest.mock import AsyncMock, patch

import pytest

from warden.exceptions import InvalidTokenError, MissingTokenError
from warden.models.access_token import AccessToken
from warden.models.user import User
from warden.services.authenticator import Authenticator, RequestCredentials


@pytest.fixture
def mock_token_service():
    return AsyncMock()


@pytest.fixture
def authenticator(mock_token_service):
    with patch(
        "warden.services.authenticator.AccessTokenService",
        return_value=mock_token_service,
    ):
        instance = Authenticator(AsyncMock(), public_paths=["/api/register", "/api/login"])
    return instance


class TestPublicPaths:
    def test_exact_and_trailing_slash(self, authenticator):
        assert authenticator.is_public("/api/login")
        assert authenticator.is_public("/api/login/")
        assert not authenticator.is_public("/api/logout")

    @pytest.mark.asyncio
    async def test_public_path_skips_token(self, authenticator, mock_token_service):
        result = await authenticator.authenticate(RequestCredentials(path="/api/register"))

        assert result is None
        mock_token_service.resolve.assert_not_awaited()


class TestProtectedPaths:
    @pytest.mark.asyncio
    async def test_missing_token(self, authenticator):
        with pytest.raises(MissingTokenError) as exc_info:
            await authenticator.authenticate(RequestCredentials(path="/api/users/me"))
        assert exc_info.value.message == "Token is required."

    @pytest.mark.asyncio
    async def test_invalid_token_propagates(self, authenticator, mock_token_service):
        mock_token_service.resolve.side_effect = InvalidTokenError("bad")

        with pytest.raises(InvalidTokenError):
            await authenticator.authenticate(
                RequestCredentials(path="/api/users/me", bearer_token="x")
            )

    @pytest.mark.asyncio
    async def test_builds_context(self, authenticator, mock_token_service):
        user = User(id=uuid.uuid4(), username="jdoe", status=True)
        token = AccessToken(id=uuid.uuid4(), user_id=user.id, abilities=["*"])
        mock_token_service.resolve.return_value = (user, token)

        context = await authenticator.authenticate(
            RequestCredentials(
                path="/api/users/me",
                bearer_token="t",
                ip_address="127.0.0.1",
                user_agent="pytest",
            )
        )

        assert context.user is user
        assert context.token is token
        assert context.user_id == user.id
        assert context.ip_address == "127.0.0.1"
        mock_token_service.resolve.assert_awaited_once_with("t")
