"""Rate limiter interfaces and value types.

The HTTP layer depends on these abstractions (not the concrete in-memory
implementation) so the counter storage can be swapped later without touching
routes or dependencies.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass
class RateLimitEntry:
    """Per-client window state.

    Attributes:
        count: Requests observed in the current window.
        reset_time: Epoch milliseconds at which the window ends.
    """

    count: int
    reset_time: int


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of a single admission check.

    Attributes:
        allowed: True when the request is admitted, False when rejected.
        client_id: Identifier the request was counted against.
        count: Request count in the current window, after this request.
        limit: Max requests per window.
        remaining: Requests left in the window (0 when rejected).
        reset_time_ms: Epoch milliseconds when the window ends.
        retry_after_seconds: Seconds until reset; only set when rejected.
    """

    allowed: bool
    client_id: str
    count: int
    limit: int
    remaining: int
    reset_time_ms: int
    retry_after_seconds: int | None = None

    @property
    def reset_at(self) -> int:
        """UNIX epoch seconds when the window resets (rounded up)."""
        return math.ceil(self.reset_time_ms / 1000)

    @property
    def message(self) -> str | None:
        if self.allowed:
            return None
        return f"Too many requests. Please try again in {self.retry_after_seconds} seconds."

    def headers(self) -> dict[str, str]:
        """Build the standard rate limit response headers.

        Returns:
            Mapping of header name to string value. ``Retry-After`` is only
            present on rejected decisions.
        """
        headers = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset": str(self.reset_at),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after_seconds or 0)
        return headers


class AbstractRateLimitStore(ABC):
    """Storage for per-client window entries."""

    @abstractmethod
    def get(self, key: str) -> RateLimitEntry | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, entry: RateLimitEntry) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def __len__(self) -> int:
        raise NotImplementedError


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @property
    @abstractmethod
    def max_requests(self) -> int:
        """Default quota per window."""
        raise NotImplementedError

    @property
    @abstractmethod
    def window_ms(self) -> int:
        """Default window size in milliseconds."""
        raise NotImplementedError

    @property
    @abstractmethod
    def unknown_client_id(self) -> str:
        """Shared bucket key used when a request has no client identifier."""
        raise NotImplementedError

    @abstractmethod
    def check(
        self,
        client_id: str,
        *,
        max_requests: int | None = None,
        window_ms: int | None = None,
        now: int | None = None,
    ) -> RateLimitDecision:
        """Count a request for ``client_id`` and decide whether it is admitted.

        Args:
            client_id: Key the limit is partitioned by (e.g., source IP).
            max_requests: Override for the limiter's default quota.
            window_ms: Override for the limiter's default window size.
            now: Current epoch milliseconds; defaults to the limiter clock.

        Returns:
            RateLimitDecision describing the outcome.
        """
        raise NotImplementedError

    @abstractmethod
    def peek(self, client_id: str, *, now: int | None = None) -> RateLimitDecision | None:
        """Report current usage for ``client_id`` without counting a request."""
        raise NotImplementedError
