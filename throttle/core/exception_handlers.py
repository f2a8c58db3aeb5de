"""Global exception handlers for consistent error responses.

Design:
- RateLimitExceededError → 429 with ``{"success": false, "message": ...}``
  and the X-RateLimit-* / Retry-After headers
- Unexpected Exception → generic 500 (safety net, nothing leaked)
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from throttle.core.config import settings
from throttle.core.errors import RateLimitExceededError
from throttle.core.logging import get_request_id

logger = logging.getLogger(__name__)


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceededError) -> JSONResponse:
    """Render a rejected rate limit decision as HTTP 429.

    The body keeps the ``success``/``message`` shape API clients already
    parse; the retry hint is repeated in ``Retry-After``.
    """
    headers = exc.decision.headers() if settings.app.rate_limit_include_headers else None

    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content={"success": False, "message": exc.message},
        headers=headers,
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors.

    Logs the failure for debugging but returns a generic message, so no
    stack trace or exception text reaches the client.
    """
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.exception_handler(RateLimitExceededError)(rate_limit_exceeded_handler)
    app.exception_handler(Exception)(general_exception_handler)
