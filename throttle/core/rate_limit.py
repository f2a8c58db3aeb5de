"""Rate limiting dependency for FastAPI routes.

This module is the HTTP-side collaborator of the fixed-window limiter:
it works out who the caller is, asks the limiter for a decision, and turns a
rejection into a ``RateLimitExceededError`` for the exception handler.

The limiter instance lives on ``app.state.rate_limiter`` (built by
``create_app``), so each application, and each test app, owns its own
counters.

Client identification:
- The socket peer address (``request.client.host``).
- The first ``X-Forwarded-For`` hop instead, when explicitly trusted.
- Otherwise the shared sentinel bucket (default ``"unknown"``).
"""

from __future__ import annotations

import logging

from fastapi import Request, Response

from throttle.adapters.rate_limit.base import AbstractRateLimiter
from throttle.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from throttle.core.config import AppSettings, settings
from throttle.core.errors import RateLimitExceededError
from throttle.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def build_rate_limiter(app_settings: AppSettings | None = None) -> AbstractRateLimiter:
    """Create a limiter with an empty in-memory store from settings."""

    cfg = app_settings or settings.app
    return InMemoryFixedWindowRateLimiter(
        max_requests=cfg.rate_limit_max_requests,
        window_ms=cfg.rate_limit_window_ms,
        unknown_client_id=cfg.rate_limit_unknown_client_id,
    )


def get_rate_limiter(request: Request) -> AbstractRateLimiter:
    """Return the limiter owned by the application serving ``request``."""

    return request.app.state.rate_limiter


def get_client_identifier(request: Request, unknown_client_id: str | None = None) -> str:
    """Work out the key a request is rate limited by.

    Args:
        request: Incoming request.
        unknown_client_id: Sentinel for unidentifiable clients; defaults to
            the configured ``rate_limit_unknown_client_id``.

    Returns:
        str: Client address, or the configured sentinel when none is available.
    """

    if settings.app.rate_limit_trust_forwarded_for:
        forwarded_for = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    if request.client and request.client.host:
        return request.client.host

    return unknown_client_id or settings.app.rate_limit_unknown_client_id


async def enforce_rate_limit(request: Request, response: Response) -> None:
    """FastAPI dependency enforcing the fixed-window limit.

    Counts the request against the caller's window. Admitted requests
    proceed (optionally with ``X-RateLimit-*`` headers on the response);
    rejected ones raise.

    Args:
        request: FastAPI request.
        response: Response being built, used for success headers.

    Raises:
        RateLimitExceededError: When the caller is over its quota.
    """

    if not settings.app.rate_limit_enabled:
        return

    limiter = get_rate_limiter(request)
    client_id = get_client_identifier(request, limiter.unknown_client_id)
    decision = limiter.check(client_id)

    log_fields = {
        "client_hash": hash_identifier(decision.client_id),
        "limit": decision.limit,
        "count": decision.count,
        "remaining": decision.remaining,
        "window_ms": limiter.window_ms,
    }

    if decision.allowed:
        logger.debug("rate_limit.allowed", extra=log_fields)
        if settings.app.rate_limit_headers_on_success:
            response.headers.update(decision.headers())
        return

    logger.warning(
        "rate_limit.exceeded",
        extra={**log_fields, "retry_after_s": decision.retry_after_seconds},
    )
    raise RateLimitExceededError(decision)
