"""Tests for global exception handlers.

Validates that rate limit rejections and unexpected failures
are rendered consistently, without leaking internals.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from throttle.adapters.rate_limit.base import RateLimitDecision
from throttle.core.errors import RateLimitExceededError
from throttle.core.exception_handlers import general_exception_handler, setup_exception_handlers


def _rejected_decision() -> RateLimitDecision:
    return RateLimitDecision(
        allowed=False,
        client_id="1.2.3.4",
        count=6,
        limit=5,
        remaining=0,
        reset_time_ms=61_000,
        retry_after_seconds=60,
    )


@pytest.fixture
def app_with_handlers() -> FastAPI:
    app = FastAPI()
    setup_exception_handlers(app)
    return app


@pytest.fixture
def client(app_with_handlers: FastAPI) -> TestClient:
    return TestClient(app_with_handlers)


class TestRateLimitHandler:
    def test_returns_429_with_success_false_body(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/limited")
        async def limited():
            raise RateLimitExceededError(_rejected_decision())

        response = client.get("/limited")

        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "message": "Too many requests. Please try again in 60 seconds.",
        }

    def test_sets_rate_limit_headers(self, client: TestClient, app_with_handlers: FastAPI):
        @app_with_handlers.get("/limited-headers")
        async def limited():
            raise RateLimitExceededError(_rejected_decision())

        response = client.get("/limited-headers")

        assert response.headers["X-RateLimit-Limit"] == "5"
        assert response.headers["X-RateLimit-Remaining"] == "0"
        assert response.headers["X-RateLimit-Reset"] == "61"
        assert response.headers["Retry-After"] == "60"

    def test_error_carries_code_and_details(self):
        exc = RateLimitExceededError(_rejected_decision())

        assert exc.code == "rate_limit_exceeded"
        assert exc.details == {"limit": 5, "retry_after": 60}
        assert str(exc) == "Too many requests. Please try again in 60 seconds."


class TestGeneralExceptionHandler:
    def test_general_exception_handler_hides_message(self):
        request = AsyncMock()
        request.url.path = "/test"
        request.method = "GET"

        exc = RuntimeError("store backend unreachable at 10.1.2.3")
        response = asyncio.run(general_exception_handler(request, exc))

        data = json.loads(bytes(response.body).decode())
        assert response.status_code == 500
        assert data["error"]["code"] == "internal_server_error"
        assert "10.1.2.3" not in data["error"]["message"]
        assert "RuntimeError" not in bytes(response.body).decode()


def test_setup_registers_all_handlers(app_with_handlers: FastAPI):
    assert RateLimitExceededError in app_with_handlers.exception_handlers
    assert set(app_with_handlers.exception_handlers) >= {RateLimitExceededError, Exception}
