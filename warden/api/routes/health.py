"""
Health Check Endpoints
"""

import logging
from typing import Any

import redis.asyncio as redis
from fastapi import APIRouter, Request
from redis.exceptions import RedisError

from warden.core.config import settings
from warden.core.database import check_database_connection

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


async def check_redis_connection() -> str:
    """
    Ping Redis when it is configured as rate limit storage.

    Returns:
        "ok", "ko", or "disabled" when no REDIS_URL is set
    """
    if not settings.redis_url:
        return "disabled"

    client = redis.from_url(settings.redis_url)
    try:
        await client.ping()
        return "ok"
    except RedisError as e:
        logger.error(f"Redis health check failed: {e}")
        return "ko"
    finally:
        await client.aclose()


@router.get("")
async def health_check() -> dict[str, str]:
    """Basic liveness check."""
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.version,
        "environment": settings.environment,
    }


@router.get("/ready")
async def readiness_check(request: Request) -> dict[str, Any]:
    """
    Readiness check endpoint.

    Verifies database connectivity and, if configured, Redis.
    """
    sessionmaker = getattr(request.app.state, "sessionmaker", None)
    db_healthy = await check_database_connection(sessionmaker)
    redis_status = await check_redis_connection()

    ready = db_healthy and redis_status != "ko"
    return {
        "status": "ready" if ready else "degraded",
        "app": settings.app_name,
        "version": settings.version,
        "checks": {
            "database": "ok" if db_healthy else "ko",
            "redis": redis_status,
        },
    }
