"""
Pytest configuration and fixtures for Warden tests.

This module provides:
- In-memory SQLite database per test
- Access catalog seeding
- Test client fixtures
- User fixtures with issued access tokens
"""

# Set environment variables BEFORE importing anything from warden
import os

os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hmac"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["RATE_LIMIT_LOGIN"] = "10000/minute"
os.environ["LOG_FILE_ENABLED"] = "false"
os.environ["SEED_ACCESS_CATALOG"] = "false"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "8192"
os.environ["ARGON2_PARALLELISM"] = "1"

from dataclasses import dataclass
from typing import AsyncGenerator, Awaitable, Callable

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from warden.core.catalog import AccessCatalog, load_catalog
from warden.core.database import create_database_engine, create_sessionmaker, create_tables
from warden.core.security import hash_password
from warden.main import app
from warden.models.user import User
from warden.repositories.role_repository import RoleRepository
from warden.services.catalog_service import CatalogService
from warden.services.token_service import AccessTokenService

DEFAULT_PASSWORD = "Password123!"


@dataclass
class Actor:
    """A persisted user together with a valid plaintext access token."""

    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


# ============================================================================
# Database Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a fresh in-memory database for a test.

    StaticPool keeps one connection open, so every session of the test sees
    the same database.
    """
    engine = create_database_engine("sqlite+aiosqlite://")
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(test_engine)


@pytest_asyncio.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Session for service level tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def catalog() -> AccessCatalog:
    return load_catalog()


@pytest_asyncio.fixture
async def seeded(session_factory: async_sessionmaker[AsyncSession]) -> None:
    """Create the catalog roles and permissions."""
    async with session_factory() as session:
        await CatalogService(session).sync()


# ============================================================================
# User Fixtures
# ============================================================================
@pytest.fixture
def make_actor(
    session_factory: async_sessionmaker[AsyncSession], seeded: None
) -> Callable[..., Awaitable[Actor]]:
    """
    Factory creating a user with an optional catalog role and one token.

    Usage:
        actor = await make_actor("jdoe", role="User")
    """

    async def _make_actor(
        username: str,
        role: str | None = None,
        password: str = DEFAULT_PASSWORD,
        status: bool = True,
    ) -> Actor:
        async with session_factory() as session:
            roles = []
            if role is not None:
                found = await RoleRepository(session).get_by_name(role, "api")
                assert found is not None
                roles.append(found)

            user = User(
                name=f"{username.title()} Tester",
                username=username,
                employee_id=f"EMP-{username}",
                email=f"{username}@example.com",
                password_hash=hash_password(password),
                status=status,
            )
            user.roles = roles
            user.permissions = []
            session.add(user)
            await session.flush()

            _, plaintext = await AccessTokenService(session).issue(user)
            await session.commit()
            await session.refresh(user)

        return Actor(user=user, token=plaintext)

    return _make_actor


@pytest_asyncio.fixture
async def super_admin(make_actor) -> Actor:
    return await make_actor("root", role="Super Admin")


@pytest_asyncio.fixture
async def admin(make_actor) -> Actor:
    return await make_actor("manager", role="Admin")


@pytest_asyncio.fixture
async def member(make_actor) -> Actor:
    return await make_actor("jdoe", role="User")


# ============================================================================
# FastAPI Client Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession], seeded: None
) -> AsyncGenerator[AsyncClient, None]:
    """
    Async client bound to the test database.

    The lifespan does not run under ASGITransport, so the session factory is
    placed on app.state directly.
    """
    app.state.sessionmaker = session_factory

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.state.sessionmaker = None
