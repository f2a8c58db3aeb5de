"""In-memory fixed-window rate limiter.

Notes:
- Per-process only: running multiple workers multiplies the effective limit.
- Thread-safe: the read-modify-write of an entry happens under a lock, so two
  concurrent requests from one client can never both slip under the limit.
- Entries are never evicted. Memory grows with the number of distinct clients
  for the lifetime of the store.
"""

from __future__ import annotations

import math
import threading
import time
from typing import Callable

from throttle.adapters.rate_limit.base import (
    AbstractRateLimiter,
    AbstractRateLimitStore,
    RateLimitDecision,
    RateLimitEntry,
)

UNKNOWN_CLIENT_ID = "unknown"

DEFAULT_MAX_REQUESTS = 5
DEFAULT_WINDOW_MS = 60 * 1000


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def _validate_limits(max_requests: int, window_ms: int) -> None:
    if max_requests < 1:
        raise ValueError("max_requests must be >= 1")
    if window_ms < 1:
        raise ValueError("window_ms must be >= 1")


class InMemoryRateLimitStore(AbstractRateLimitStore):
    """Registry mapping client identifiers to their window entry."""

    def __init__(self) -> None:
        self._entries: dict[str, RateLimitEntry] = {}

    def get(self, key: str) -> RateLimitEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: RateLimitEntry) -> None:
        self._entries[key] = entry

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


class InMemoryFixedWindowRateLimiter(AbstractRateLimiter):
    """Rate limiter using a fixed window that starts at a client's first request.

    Each client gets ``max_requests`` requests per ``window_ms``. The window
    begins when the client is first seen (or first seen after the previous
    window elapsed), not on wall-clock boundaries.

    Important:
        The counter keeps incrementing on rejected requests. A client that
        keeps retrying stays rejected until its window elapses.
    """

    def __init__(
        self,
        store: AbstractRateLimitStore | None = None,
        *,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_ms: int = DEFAULT_WINDOW_MS,
        unknown_client_id: str = UNKNOWN_CLIENT_ID,
        clock: Callable[[], int] = _epoch_ms,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Entry registry; a fresh in-memory store when omitted.
            max_requests: Default quota per window.
            window_ms: Default window size in milliseconds.
            unknown_client_id: Shared bucket key for empty client identifiers.
            clock: Time source returning epoch milliseconds.

        Raises:
            ValueError: If max_requests, window_ms or unknown_client_id are invalid.
        """
        _validate_limits(max_requests, window_ms)
        if not unknown_client_id:
            raise ValueError("unknown_client_id must be a non-empty string")

        self._store = store if store is not None else InMemoryRateLimitStore()
        self._max_requests = max_requests
        self._window_ms = window_ms
        self._unknown_client_id = unknown_client_id
        self._clock = clock
        self._lock = threading.RLock()

    @property
    def store(self) -> AbstractRateLimitStore:
        return self._store

    @property
    def max_requests(self) -> int:
        return self._max_requests

    @property
    def window_ms(self) -> int:
        return self._window_ms

    @property
    def unknown_client_id(self) -> str:
        return self._unknown_client_id

    def _build_admitted(self, client_id: str, entry: RateLimitEntry, limit: int) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=True,
            client_id=client_id,
            count=entry.count,
            limit=limit,
            remaining=max(0, limit - entry.count),
            reset_time_ms=entry.reset_time,
        )

    def _build_rejected(
        self, client_id: str, entry: RateLimitEntry, limit: int, now: int
    ) -> RateLimitDecision:
        retry_after = max(0, math.ceil((entry.reset_time - now) / 1000))
        return RateLimitDecision(
            allowed=False,
            client_id=client_id,
            count=entry.count,
            limit=limit,
            remaining=0,
            reset_time_ms=entry.reset_time,
            retry_after_seconds=retry_after,
        )

    def check(
        self,
        client_id: str,
        *,
        max_requests: int | None = None,
        window_ms: int | None = None,
        now: int | None = None,
    ) -> RateLimitDecision:
        """Count one request for ``client_id`` and decide admission.

        An empty identifier is counted against the shared ``unknown_client_id``
        bucket rather than rejected.

        Args:
            client_id: Key the limit is partitioned by.
            max_requests: Quota override for this call.
            window_ms: Window size override for this call.
            now: Current epoch milliseconds; defaults to the clock.

        Returns:
            RateLimitDecision for this request.

        Raises:
            ValueError: If an override limit is invalid.
        """
        limit = self._max_requests if max_requests is None else max_requests
        window = self._window_ms if window_ms is None else window_ms
        _validate_limits(limit, window)

        key = client_id or self._unknown_client_id
        if now is None:
            now = self._clock()

        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                entry = RateLimitEntry(count=0, reset_time=now + window)

            # A request landing exactly on reset_time still belongs to the old window.
            if now > entry.reset_time:
                entry.count = 0
                entry.reset_time = now + window

            entry.count += 1
            self._store.set(key, entry)

            if entry.count > limit:
                return self._build_rejected(key, entry, limit, now)
            return self._build_admitted(key, entry, limit)

    def peek(self, client_id: str, *, now: int | None = None) -> RateLimitDecision | None:
        """Return current usage for ``client_id`` without counting a request.

        Returns:
            None when the client has no entry or its window has elapsed.
        """
        key = client_id or self._unknown_client_id
        if now is None:
            now = self._clock()

        with self._lock:
            entry = self._store.get(key)
            if entry is None or now > entry.reset_time:
                return None
            snapshot = RateLimitEntry(count=entry.count, reset_time=entry.reset_time)

        if snapshot.count > self._max_requests:
            return self._build_rejected(key, snapshot, self._max_requests, now)
        return self._build_admitted(key, snapshot, self._max_requests)
