from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from throttle.core.logging import hash_identifier
from throttle.core.rate_limit import enforce_rate_limit, get_client_identifier, get_rate_limiter
from throttle.schemas.rate_limit import (
    PingResponse,
    RateLimitErrorResponse,
    RateLimitStatusResponse,
)

router = APIRouter(tags=["Rate Limit"])


@router.get(
    "/ping",
    response_model=PingResponse,
    dependencies=[Depends(enforce_rate_limit)],
    responses={429: {"model": RateLimitErrorResponse, "description": "Rate limit exceeded"}},
)
async def ping() -> PingResponse:
    """Rate-limited liveness probe.

    Each call counts against the caller's window, which makes this endpoint
    handy for verifying limiter configuration end to end.
    """
    return PingResponse()


@router.get("/rate-limit/status", response_model=RateLimitStatusResponse)
async def rate_limit_status(request: Request) -> RateLimitStatusResponse:
    """Report the caller's usage in the current window without consuming a request."""
    limiter = get_rate_limiter(request)
    client_id = get_client_identifier(request, limiter.unknown_client_id)
    limit = limiter.max_requests
    snapshot = limiter.peek(client_id)

    if snapshot is None:
        return RateLimitStatusResponse(
            client_hash=hash_identifier(client_id),
            limit=limit,
            used=0,
            remaining=limit,
            window_ms=limiter.window_ms,
        )

    return RateLimitStatusResponse(
        client_hash=hash_identifier(snapshot.client_id),
        limit=limit,
        used=snapshot.count,
        remaining=max(0, limit - snapshot.count),
        reset_at=snapshot.reset_at,
        window_ms=limiter.window_ms,
    )
