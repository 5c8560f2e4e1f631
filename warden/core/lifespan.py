import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from warden.core.catalog import load_catalog
from warden.core.config import settings
from warden.core.database import (
    close_database_connection,
    create_database_engine,
    create_sessionmaker,
    create_tables,
)
from warden.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


# ============================================================================
# Lifespan Context Manager
# ============================================================================
@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore
    """
    Lifespan context manager for startup and shutdown events.

    Handles:
    - Database engine and session factory creation (stored in app.state)
    - Optional table creation and access catalog sync
    - Resource cleanup on shutdown
    """
    logger.info(f"Starting {settings.app_name} v{settings.version}")
    logger.info(f"Environment: {settings.environment}")

    engine = create_database_engine()
    app.state.sessionmaker = create_sessionmaker(engine)
    app.state.catalog = load_catalog()

    if settings.db_create_tables:
        await create_tables(engine)

    if settings.seed_access_catalog:
        async with app.state.sessionmaker() as session:
            await CatalogService(session, app.state.catalog).sync()

    logger.info("Sessionmaker created successfully")

    yield

    logger.info("Shutting down application")
    await close_database_connection(engine)
    app.state.sessionmaker = None
