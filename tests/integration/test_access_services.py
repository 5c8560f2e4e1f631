"""
Integration tests for services against the database.

Tests cover:
- Catalog sync idempotency
- Registration atomicity
- Permission checks observing syncs in the same transaction
- Token expiry, purge and usage recording
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy import func, select, text

from warden.exceptions import InvalidTokenError, PersistenceError
from warden.models.access_token import AccessToken
from warden.models.role import Permission, Role
from warden.models.user import User
from warden.repositories.access_token_repository import AccessTokenRepository
from warden.repositories.permission_repository import PermissionRepository
from warden.schemas.user import UserCreate
from warden.services.auth_service import AuthService
from warden.services.authorization_service import AuthorizationService
from warden.services.catalog_service import CatalogService
from warden.services.token_service import AccessTokenService


async def count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


class TestCatalogSync:
    @pytest.mark.asyncio
    async def test_sync_is_idempotent(self, db_session, seeded, catalog):
        roles = await CatalogService(db_session).sync()

        assert set(roles) == {"super_admin", "admin", "user"}
        assert await count(db_session, Role) == 3
        assert await count(db_session, Permission) == len(catalog.all_permissions())
        assert len(roles["super_admin"].permissions) == len(catalog.all_permissions())


class TestRegistration:
    @pytest.mark.asyncio
    async def test_failed_token_issue_rolls_back_user(self, db_session, seeded):
        user_data = UserCreate(
            name="Atomic User",
            username="atomic",
            employee_id="EMP-A",
            email="atomic@example.com",
            password="Atomic123!",
            password_confirmation="Atomic123!",
        )

        with patch.object(
            AccessTokenService, "issue", side_effect=PersistenceError()
        ):
            with pytest.raises(PersistenceError):
                await AuthService(db_session).register(user_data)

        assert await count(db_session, User) == 0
        assert await count(db_session, AccessToken) == 0


class TestPermissionChecks:
    @pytest.mark.asyncio
    async def test_sync_visible_before_commit(self, db_session, member):
        authz = AuthorizationService(db_session)
        user = await db_session.get(User, member.user.id)
        read = await PermissionRepository(db_session).get_by_name("User Read", "api")

        assert await authz.has_permission(user.id, "User Read") is False

        await authz.sync_permissions(user, [read.id])
        assert await authz.has_permission(user.id, "User Read") is True

        await authz.sync_roles(user, [])
        assert await authz.has_permission(user.id, "Own Profile Read") is False
        assert await authz.has_permission(user.id, "User Read") is True

        await db_session.rollback()


class TestTokenExpiry:
    @pytest.mark.asyncio
    async def test_expired_token_is_rejected_and_purged(self, db_session, member):
        service = AccessTokenService(db_session)
        user = await db_session.get(User, member.user.id)

        _, plaintext = await service.issue(
            user, expires_at=datetime.now(UTC) - timedelta(minutes=5)
        )
        await db_session.commit()

        with pytest.raises(InvalidTokenError):
            await service.resolve(plaintext)

        assert len(await service.list_active(user)) == 1
        assert await service.purge_expired() == 1
        await db_session.commit()
        assert await count(db_session, AccessToken) == 1

    @pytest.mark.asyncio
    async def test_resolve_records_last_use(self, db_session, member):
        service = AccessTokenService(db_session)

        user, token = await service.resolve(member.token)
        await db_session.commit()
        await db_session.refresh(token)

        assert user.id == member.user.id
        assert token.last_used_at is not None

    @pytest.mark.asyncio
    async def test_failed_usage_write_keeps_session_usable(self, db_session, member):
        async def broken_touch(repo, token_id, used_at):
            await repo.session.execute(text("UPDATE missing_table SET last_used_at = NULL"))

        service = AccessTokenService(db_session)

        with patch.object(AccessTokenRepository, "touch_last_used", broken_touch):
            user, _ = await service.resolve(member.token)

        assert user.id == member.user.id
        assert await count(db_session, AccessToken) == 1
        assert await AuthorizationService(db_session).has_permission(user.id, "Own Profile Read")


class TestEditorRole:
    @pytest.mark.asyncio
    async def test_sync_replaces_role_permissions(self, db_session, member):
        authz = AuthorizationService(db_session)
        permissions = PermissionRepository(db_session)
        p1 = await permissions.get_by_name("Role Read", "api")
        p2 = await permissions.get_by_name("Role Update", "api")
        p3 = await permissions.get_by_name("Permission Read", "api")

        editor = Role(name="Editor", guard_name="api")
        editor.permissions = []
        db_session.add(editor)
        await authz.sync_role_permissions(editor, [p1.id, p2.id])

        user = await db_session.get(User, member.user.id)
        await authz.sync_roles(user, [editor.id])
        assert await authz.has_permission(user.id, "Role Read") is True
        assert await authz.has_permission(user.id, "Permission Read") is False

        await authz.sync_role_permissions(editor, [p3.id])

        assert await authz.has_permission(user.id, "Role Read") is False
        assert await authz.has_permission(user.id, "Role Update") is False
        assert await authz.has_permission(user.id, "Permission Read") is True
        await db_session.commit()
