"""
Integration tests for user management routes.

Tests cover:
- Profile read and update with own_profile / user scopes
- User listing with status and trashed filters
- Status changes and token revocation
- Soft delete, restore and permanent delete
- Administrative password reset
- Self-action guards
"""

from unittest.mock import patch

import pytest
from httpx import AsyncClient

DEFAULT_PASSWORD = "Password123!"


# ============================================================================
# Read Tests
# ============================================================================
class TestReadUsers:
    @pytest.mark.asyncio
    async def test_me(self, async_client: AsyncClient, member):
        response = await async_client.get("/api/users/me", headers=member.headers)

        assert response.status_code == 200
        data = response.json()
        assert data["username"] == "jdoe"
        assert "password_hash" not in data

    @pytest.mark.asyncio
    async def test_member_reads_self_by_id(self, async_client: AsyncClient, member):
        response = await async_client.get(
            f"/api/users/{member.user.id}", headers=member.headers
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_member_cannot_read_others(
        self, async_client: AsyncClient, member, super_admin
    ):
        response = await async_client.get(
            f"/api/users/{super_admin.user.id}", headers=member.headers
        )

        assert response.status_code == 403
        assert response.json()["error"]["message"] == (
            "You do not have any permission to perform this action."
        )

    @pytest.mark.asyncio
    async def test_list_requires_user_read(self, async_client: AsyncClient, member):
        response = await async_client.get("/api/users", headers=member.headers)
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_forbidden_request_logs_acting_user(
        self, async_client: AsyncClient, member
    ):
        with patch("warden.middleware.logger") as mock_logger:
            response = await async_client.get("/api/users", headers=member.headers)

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"
        mock_logger.warning.assert_called_once()
        message = mock_logger.warning.call_args.args[0]
        assert "/api/users 403" in message
        assert f"user={member.user.id}" in message

    @pytest.mark.asyncio
    async def test_list_users(self, async_client: AsyncClient, admin, member):
        response = await async_client.get("/api/users", headers=admin.headers)

        assert response.status_code == 200
        data = response.json()
        assert data["meta"]["total"] == 2
        assert {user["username"] for user in data["data"]} == {"manager", "jdoe"}

    @pytest.mark.asyncio
    async def test_list_filters_by_status(
        self, async_client: AsyncClient, admin, member, make_actor
    ):
        await make_actor("sleeper", role="User", status=False)

        response = await async_client.get(
            "/api/users", params={"status": "false"}, headers=admin.headers
        )

        assert response.status_code == 200
        assert [user["username"] for user in response.json()["data"]] == ["sleeper"]

    @pytest.mark.asyncio
    async def test_list_trashed(self, async_client: AsyncClient, admin, member):
        await async_client.delete(f"/api/users/{member.user.id}", headers=admin.headers)

        without = await async_client.get("/api/users", headers=admin.headers)
        only = await async_client.get(
            "/api/users", params={"trashed": "only"}, headers=admin.headers
        )
        with_trashed = await async_client.get(
            "/api/users", params={"trashed": "with"}, headers=admin.headers
        )

        assert [u["username"] for u in without.json()["data"]] == ["manager"]
        assert [u["username"] for u in only.json()["data"]] == ["jdoe"]
        assert with_trashed.json()["meta"]["total"] == 2


# ============================================================================
# Create / Update Tests
# ============================================================================
class TestWriteUsers:
    @pytest.mark.asyncio
    async def test_admin_creates_user(self, async_client: AsyncClient, admin):
        response = await async_client.post(
            "/api/users",
            headers=admin.headers,
            json={
                "name": "Created User",
                "username": "created",
                "employee_id": "EMP-C",
                "email": "created@example.com",
                "password": "Created123!",
                "password_confirmation": "Created123!",
            },
        )

        assert response.status_code == 201
        assert response.json()["username"] == "created"

        login = await async_client.post(
            "/api/login", json={"login": "created", "password": "Created123!"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_update_own_profile(self, async_client: AsyncClient, member):
        response = await async_client.patch(
            f"/api/users/{member.user.id}",
            headers=member.headers,
            json={"name": "Jane Renamed"},
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Jane Renamed"

    @pytest.mark.asyncio
    async def test_update_to_taken_username(
        self, async_client: AsyncClient, member, admin
    ):
        response = await async_client.patch(
            f"/api/users/{member.user.id}",
            headers=member.headers,
            json={"username": "manager"},
        )

        assert response.status_code == 409
        assert response.json()["error"]["details"]["fields"] == ["username"]


# ============================================================================
# Lifecycle Tests
# ============================================================================
class TestStatusChange:
    @pytest.mark.asyncio
    async def test_self_status_change_forbidden(
        self, async_client: AsyncClient, super_admin
    ):
        response = await async_client.patch(
            f"/api/users/{super_admin.user.id}/change-status",
            headers=super_admin.headers,
            json={"status": False},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SELF_ACTION_FORBIDDEN"

        me = await async_client.get("/api/users/me", headers=super_admin.headers)
        assert me.json()["status"] is True

    @pytest.mark.asyncio
    async def test_disable_revokes_tokens(self, async_client: AsyncClient, admin, member):
        response = await async_client.patch(
            f"/api/users/{member.user.id}/change-status",
            headers=admin.headers,
            json={"status": False},
        )

        assert response.status_code == 200
        assert response.json()["status"] is False

        response = await async_client.get("/api/users/me", headers=member.headers)
        assert response.status_code == 401

        login = await async_client.post(
            "/api/login", json={"login": "jdoe", "password": DEFAULT_PASSWORD}
        )
        assert login.status_code == 401

    @pytest.mark.asyncio
    async def test_enable_again(self, async_client: AsyncClient, admin, make_actor):
        sleeper = await make_actor("sleeper", role="User", status=False)

        response = await async_client.patch(
            f"/api/users/{sleeper.user.id}/change-status",
            headers=admin.headers,
            json={"status": True},
        )
        assert response.status_code == 200

        login = await async_client.post(
            "/api/login", json={"login": "sleeper", "password": DEFAULT_PASSWORD}
        )
        assert login.status_code == 200


class TestDeletion:
    @pytest.mark.asyncio
    async def test_soft_delete_and_restore(self, async_client: AsyncClient, admin, member):
        response = await async_client.delete(
            f"/api/users/{member.user.id}", headers=admin.headers
        )
        assert response.status_code == 200

        response = await async_client.get("/api/users/me", headers=member.headers)
        assert response.status_code == 401

        shown = await async_client.get(f"/api/users/{member.user.id}", headers=admin.headers)
        assert shown.status_code == 200
        assert shown.json()["deleted_at"] is not None

        response = await async_client.post(
            f"/api/users/{member.user.id}/restore", headers=admin.headers
        )
        assert response.status_code == 200
        assert response.json()["deleted_at"] is None

        # Restoring does not bring tokens back
        response = await async_client.get("/api/users/me", headers=member.headers)
        assert response.status_code == 401

        login = await async_client.post(
            "/api/login", json={"login": "jdoe", "password": DEFAULT_PASSWORD}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_deleted_identifiers_stay_reserved(
        self, async_client: AsyncClient, admin, member
    ):
        await async_client.delete(f"/api/users/{member.user.id}", headers=admin.headers)

        response = await async_client.post(
            "/api/register",
            json={
                "name": "Copy Cat",
                "username": "jdoe",
                "employee_id": "EMP-COPY",
                "email": "copy@example.com",
                "password": "CopyCat123!",
                "password_confirmation": "CopyCat123!",
            },
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_restore_not_deleted_conflicts(
        self, async_client: AsyncClient, admin, member
    ):
        response = await async_client.post(
            f"/api/users/{member.user.id}/restore", headers=admin.headers
        )

        assert response.status_code == 409
        assert response.json()["error"]["message"] == "User is not deleted."

        response = await async_client.get("/api/users/me", headers=member.headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_force_delete_not_deleted_conflicts(
        self, async_client: AsyncClient, admin, member
    ):
        response = await async_client.delete(
            f"/api/users/{member.user.id}/delete-permanently", headers=admin.headers
        )

        assert response.status_code == 409
        response = await async_client.get("/api/users/me", headers=member.headers)
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_force_delete(self, async_client: AsyncClient, admin, member):
        await async_client.delete(f"/api/users/{member.user.id}", headers=admin.headers)

        response = await async_client.delete(
            f"/api/users/{member.user.id}/delete-permanently", headers=admin.headers
        )
        assert response.status_code == 200

        response = await async_client.get(
            f"/api/users/{member.user.id}", headers=admin.headers
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_member_deletes_own_account(self, async_client: AsyncClient, member):
        response = await async_client.delete(
            f"/api/users/{member.user.id}", headers=member.headers
        )
        assert response.status_code == 200

        response = await async_client.get("/api/users/me", headers=member.headers)
        assert response.status_code == 401


class TestPasswordReset:
    @pytest.mark.asyncio
    async def test_self_reset_forbidden(self, async_client: AsyncClient, super_admin):
        response = await async_client.post(
            f"/api/users/{super_admin.user.id}/reset-password",
            headers=super_admin.headers,
            json={"password": "Changed123!", "password_confirmation": "Changed123!"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "SELF_ACTION_FORBIDDEN"

    @pytest.mark.asyncio
    async def test_reset_other_user(self, async_client: AsyncClient, admin, member):
        response = await async_client.post(
            f"/api/users/{member.user.id}/reset-password",
            headers=admin.headers,
            json={"password": "Changed123!", "password_confirmation": "Changed123!"},
        )
        assert response.status_code == 200

        login = await async_client.post(
            "/api/login", json={"login": "jdoe", "password": "Changed123!"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_member_cannot_reset(self, async_client: AsyncClient, member, admin):
        response = await async_client.post(
            f"/api/users/{admin.user.id}/reset-password",
            headers=member.headers,
            json={"password": "Changed123!", "password_confirmation": "Changed123!"},
        )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "INSUFFICIENT_PERMISSIONS"


class TestAccountScenario:
    """Registration, failed password change and deactivation end to end."""

    @pytest.mark.asyncio
    async def test_register_then_deactivate(self, async_client: AsyncClient, admin):
        registered = await async_client.post(
            "/api/register",
            json={
                "name": "Subject A",
                "username": "subject-a",
                "employee_id": "EMP-A",
                "email": "a@example.com",
                "password": "SubjectA123!",
                "password_confirmation": "SubjectA123!",
            },
        )
        assert registered.status_code == 201
        user_id = registered.json()["user"]["id"]
        headers = {"Authorization": f"Bearer {registered.json()['access_token']}"}

        response = await async_client.patch(
            "/api/users/change-password",
            headers=headers,
            json={
                "current_password": "NotIt123!",
                "new_password": "Whatever123!",
                "new_password_confirmation": "Whatever123!",
            },
        )
        assert response.status_code == 401

        response = await async_client.get("/api/users/me", headers=headers)
        assert response.status_code == 200

        response = await async_client.patch(
            f"/api/users/{user_id}/change-status",
            headers=admin.headers,
            json={"status": False},
        )
        assert response.status_code == 200

        response = await async_client.get("/api/users/me", headers=headers)
        assert response.status_code == 401
        assert response.json()["error"]["code"] == "INVALID_TOKEN"
