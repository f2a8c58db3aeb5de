"""Application-level exception types.

Domain errors raised by the HTTP layer so handlers can turn them into
consistent JSON responses.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict

from throttle.adapters.rate_limit.base import RateLimitDecision


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    limit: int
    retry_after: int


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class RateLimitExceededError(AppError):
    """Raised when a client exceeds its request quota.

    This is an expected outcome rather than a failure; the handler turns it
    into a 429 response carrying the decision's headers.
    """

    def __init__(self, decision: RateLimitDecision) -> None:
        self.decision = decision
        super().__init__(
            code="rate_limit_exceeded",
            message=decision.message or "Too many requests.",
            details={
                "limit": decision.limit,
                "retry_after": decision.retry_after_seconds or 0,
            },
        )
