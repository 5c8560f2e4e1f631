"""
HTTP middleware.

This module provides:
- RequestIDMiddleware: request id on request.state, in log records and
  in the X-Request-ID response header
- SecurityHeadersMiddleware: hardening headers on every response
- RequestLoggingMiddleware: one access log line per request
"""

import logging
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from warden.core.logging import request_id_var

logger = logging.getLogger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id to each request.

    An incoming X-Request-ID header is kept so ids can be traced across
    services; otherwise a UUID4 is generated.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        reset_token = request_id_var.set(request_id)

        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(reset_token)

        response.headers["X-Request-ID"] = request_id
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add hardening headers to every response.

    Responses are marked no-store because register and login return bearer
    tokens. HSTS is only sent when enable_hsts is set (production).
    """

    def __init__(self, app: ASGIApp, enable_hsts: bool = False):
        super().__init__(app)
        self.enable_hsts = enable_hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Cache-Control"] = "no-store"

        if self.enable_hsts:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status, client, acting user and duration.

    2xx/3xx are logged at INFO, 4xx at WARNING, 5xx and unhandled errors
    at ERROR.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        client_host = request.client.host if request.client else "unknown"

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} failed - client={client_host} "
                f"duration={time.perf_counter() - started:.3f}s error={e}",
                exc_info=True,
            )
            raise

        duration = time.perf_counter() - started
        user = getattr(request.state, "user_id", None) or "-"
        message = (
            f"{request.method} {request.url.path} {response.status_code} - "
            f"client={client_host} user={user} duration={duration:.3f}s"
        )

        if response.status_code >= 500:
            logger.error(message)
        elif response.status_code >= 400:
            logger.warning(message)
        else:
            logger.info(message)

        response.headers["X-Response-Time"] = f"{duration:.3f}s"
        return response
