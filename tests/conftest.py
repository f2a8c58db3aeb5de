"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before anything imports ``throttle.core.config``,
because the settings object is built at import time.
"""

import os

os.environ["APP_ENV"] = "testing"

os.environ.setdefault("APP_RATE_LIMIT_ENABLED", "true")
os.environ.setdefault("APP_RATE_LIMIT_MAX_REQUESTS", "5")
os.environ.setdefault("APP_RATE_LIMIT_WINDOW_MS", "60000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from throttle.adapters.rate_limit.in_memory import InMemoryFixedWindowRateLimiter
from throttle.core.app_factory import create_app


@pytest.fixture
def clock() -> Mock:
    """Controllable epoch-millisecond clock."""
    return Mock(return_value=1_000)


@pytest.fixture
def limiter(clock: Mock) -> InMemoryFixedWindowRateLimiter:
    return InMemoryFixedWindowRateLimiter(max_requests=5, window_ms=60_000, clock=clock)


@pytest.fixture
def app(limiter: InMemoryFixedWindowRateLimiter) -> FastAPI:
    return create_app(rate_limiter=limiter)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
