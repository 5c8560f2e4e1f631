"""
Unit tests for UserRepository.

Tests:
- Login lookup by username, employee id or email
- Soft-deleted users excluded from login
- Identifier reservation (soft-deleted users included)
- Status and trashed filtering
"""

import pytest

from warden.models.enums import TrashedFilter
from warden.models.user import User
from warden.repositories.user_repository import UserRepository


def create_user_instance(username, status=True, **kwargs):
    """Helper to create User instances for tests."""
    return User(
        name=f"{username.title()} Tester",
        username=username,
        employee_id=kwargs.pop("employee_id", f"EMP-{username}"),
        email=kwargs.pop("email", f"{username}@example.com"),
        password_hash="hash",
        status=status,
        **kwargs,
    )


@pytest.mark.asyncio
class TestUserRepository:
    """Test suite for UserRepository."""

    async def test_get_by_login_matches_each_identifier(self, db_session):
        repo = UserRepository(db_session)
        user = await repo.add(create_user_instance("jdoe"))

        assert (await repo.get_by_login("jdoe")).id == user.id
        assert (await repo.get_by_login("EMP-jdoe")).id == user.id
        assert (await repo.get_by_login("JDoe@Example.com")).id == user.id
        assert await repo.get_by_login("nobody") is None

    async def test_get_by_login_skips_soft_deleted(self, db_session):
        repo = UserRepository(db_session)
        user = await repo.add(create_user_instance("gone"))
        await repo.soft_delete(user)

        assert await repo.get_by_login("gone") is None

    async def test_find_taken_identifiers_includes_soft_deleted(self, db_session):
        repo = UserRepository(db_session)
        user = await repo.add(create_user_instance("jdoe"))
        await repo.soft_delete(user)

        taken = await repo.find_taken_identifiers(
            {"email": "jdoe@example.com", "username": "jdoe", "employee_id": "EMP-new"}
        )

        assert taken == ["username", "email"]

    async def test_find_taken_identifiers_excludes_own_row(self, db_session):
        repo = UserRepository(db_session)
        user = await repo.add(create_user_instance("jdoe"))

        taken = await repo.find_taken_identifiers(
            {"username": "jdoe", "email": None}, exclude_user_id=user.id
        )

        assert taken == []

    async def test_filter_users_by_status_and_trashed(self, db_session):
        repo = UserRepository(db_session)
        await repo.add(create_user_instance("active"))
        await repo.add(create_user_instance("disabled", status=False))
        deleted = await repo.add(create_user_instance("deleted"))
        await repo.soft_delete(deleted)

        visible = await repo.filter_users()
        assert {u.username for u in visible} == {"active", "disabled"}

        disabled = await repo.filter_users(status=False)
        assert [u.username for u in disabled] == ["disabled"]

        only_trashed = await repo.filter_users(trashed=TrashedFilter.ONLY)
        assert [u.username for u in only_trashed] == ["deleted"]

        assert await repo.count_filtered(trashed=TrashedFilter.WITH) == 3
        assert await repo.count_filtered(status=True) == 1
