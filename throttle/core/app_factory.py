"""Application factory for the FastAPI app.

Centralizes app construction (logging, limiter, middleware, handlers,
routers) so tests can build isolated apps with their own limiter state.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI

from throttle.adapters.rate_limit.base import AbstractRateLimiter
from throttle.api.routes import health_router, limits_router
from throttle.core.config import settings
from throttle.core.exception_handlers import setup_exception_handlers
from throttle.core.logging import configure_logging
from throttle.core.middleware import request_id_middleware
from throttle.core.rate_limit import build_rate_limiter

logger = logging.getLogger(__name__)


def create_app(rate_limiter: AbstractRateLimiter | None = None) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        rate_limiter: Limiter to install; one is built from settings when
            omitted. Its store lives as long as the app.

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Throttle API",
        description=(
            "Fixed-window request rate limiting in front of an HTTP API. "
            "Clients over quota receive 429 with X-RateLimit-* and Retry-After headers."
        ),
        version="0.1.0",
    )

    if rate_limiter is None:
        rate_limiter = build_rate_limiter(settings.app)
    app.state.rate_limiter = rate_limiter

    app.middleware("http")(request_id_middleware)
    setup_exception_handlers(app)

    app.include_router(limits_router, prefix="/v1")
    app.include_router(health_router)

    logger.info(
        "app.startup",
        extra={
            "app_env": settings.app_env,
            "rate_limit_enabled": settings.app.rate_limit_enabled,
            "rate_limit_max_requests": settings.app.rate_limit_max_requests,
            "rate_limit_window_ms": settings.app.rate_limit_window_ms,
        },
    )

    return app
