"""
Database connection and session management.

This module provides async database session management using SQLAlchemy 2.0.
PostgreSQL (asyncpg) is the production target; SQLite (aiosqlite) is accepted
for local runs and tests.

This module provides:
- create_database_engine(): engine with connection pooling
- create_sessionmaker(): session factory used by the application
- get_db(): request-scoped session dependency
- atomic(): transaction scope mapping database failures to app exceptions
- create_tables() / check_database_connection() / close_database_connection()
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import AsyncAdaptedQueuePool, StaticPool

from warden.core.config import settings
from warden.exceptions import AppException, ConflictError, PersistenceError

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Database Engine Configuration
# -----------------------------------------------------------------------------


def create_database_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create async database engine with connection pooling.

    Args:
        database_url: Database URL. If None, uses settings.database_url

    Returns:
        Configured AsyncEngine instance

    Connection Pool Configuration (PostgreSQL):
        - pool_size: Number of permanent connections (default: 5)
        - max_overflow: Additional connections under load (default: 10)
        - pool_pre_ping: Test connection before use (default: True)
        - pool_recycle: Recycle connections after N seconds (default: 3600)
    """
    url = database_url or settings.database_url

    logger.info("Initializing database engine...")

    if url.startswith("sqlite"):
        # Single shared connection so in-memory databases survive across sessions
        engine = create_async_engine(
            url,
            echo=settings.debug,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        logger.info("Database engine created: sqlite (StaticPool)")
        return engine

    engine = create_async_engine(
        url,
        echo=settings.debug,
        echo_pool=settings.debug,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=settings.db_pool_recycle,
        pool_timeout=settings.db_pool_timeout,
        poolclass=AsyncAdaptedQueuePool,
        connect_args={
            "server_settings": {
                "application_name": f"{settings.app_name} - {settings.environment}",
            },
        },
    )

    logger.info(
        f"Database engine created: pool_size={settings.db_pool_size}, "
        f"max_overflow={settings.db_max_overflow}"
    )

    return engine


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create the session factory shared by all requests."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


# -----------------------------------------------------------------------------
# Session Management
# -----------------------------------------------------------------------------


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that yields a database session for one request.

    Pending changes are committed when the handler returns and rolled back
    when it raises. Multi-write operations commit earlier through atomic().
    """
    sessionmaker: async_sessionmaker[AsyncSession] = request.app.state.sessionmaker
    async with sessionmaker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def atomic(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Run a block of writes as a single transaction.

    Commits when the block exits cleanly and rolls back on any exception.
    Application exceptions propagate unchanged; database failures are
    translated so callers only see AppException subclasses.

    Raises:
        ConflictError: If a unique or foreign key constraint rejected the write
        PersistenceError: On any other database failure

    Example:
        async with atomic(self.session):
            user = await self.user_repo.add(user)
            await self.token_service.issue(user)
    """
    try:
        yield session
        await session.commit()
    except AppException:
        await session.rollback()
        raise
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"Integrity error, transaction rolled back: {e.orig}")
        raise ConflictError("The request conflicts with existing data.") from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Database error, transaction rolled back: {e}", exc_info=True)
        raise PersistenceError() from e
    except BaseException:
        await session.rollback()
        raise


# -----------------------------------------------------------------------------
# Lifecycle Management
# -----------------------------------------------------------------------------


async def create_tables(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    from warden.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables created")


async def check_database_connection(
    sessionmaker: async_sessionmaker[AsyncSession] | None,
) -> bool:
    """
    Check that the database answers a trivial query.

    Returns:
        True if the database is reachable, False otherwise
    """
    if sessionmaker is None:
        return False
    try:
        async with sessionmaker() as session:
            await session.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return False


async def close_database_connection(engine: AsyncEngine) -> None:
    """
    Close database engine and dispose of connection pool.

    Args:
        engine: The AsyncEngine to dispose
    """
    try:
        await engine.dispose()
        logger.info("Database engine disposed successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error disposing database engine: {e}")
