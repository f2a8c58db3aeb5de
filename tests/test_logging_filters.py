"""Tests for log redaction and JSON formatting."""

from __future__ import annotations

import json
import logging
from io import StringIO

from throttle.core.logging import (
    JsonFormatter,
    RequestIdFilter,
    SensitiveDataFilter,
    clear_request_id,
    hash_identifier,
    set_request_id,
)


def _capture(name: str) -> tuple[logging.Logger, StringIO]:
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False

    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.addFilter(RequestIdFilter())
    handler.addFilter(SensitiveDataFilter())
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger, stream


def test_redacts_client_addresses():
    logger, stream = _capture("test_redact_ip")

    logger.info(
        "rate_limit.exceeded",
        extra={"client_ip": "203.0.113.9", "x-forwarded-for": "198.51.100.1", "limit": 5},
    )

    output = stream.getvalue()
    assert "203.0.113.9" not in output
    assert "198.51.100.1" not in output
    assert "[REDACTED]" in output
    assert json.loads(output)["limit"] == 5


def test_redacts_nested_headers():
    logger, stream = _capture("test_redact_nested")

    logger.info(
        "request.headers",
        extra={"headers": {"Authorization": "Bearer abc", "user-agent": "pytest"}},
    )

    data = json.loads(stream.getvalue())
    assert data["headers"]["Authorization"] == "[REDACTED]"
    assert data["headers"]["user-agent"] == "pytest"


def test_safe_fields_pass_through():
    logger, stream = _capture("test_safe")

    client_hash = hash_identifier("203.0.113.9")
    logger.info(
        "rate_limit.allowed",
        extra={"client_hash": client_hash, "remaining": 4, "window_ms": 60000},
    )

    data = json.loads(stream.getvalue())
    assert data["message"] == "rate_limit.allowed"
    assert data["level"] == "info"
    assert data["client_hash"] == client_hash
    assert data["remaining"] == 4
    assert "[REDACTED]" not in stream.getvalue()


def test_request_id_from_context():
    logger, stream = _capture("test_request_id")

    set_request_id("req-abc")
    try:
        logger.info("event")
    finally:
        clear_request_id()

    assert json.loads(stream.getvalue())["request_id"] == "req-abc"


def test_hash_identifier_is_stable_and_short():
    assert hash_identifier("1.2.3.4") == hash_identifier("1.2.3.4")
    assert hash_identifier("1.2.3.4") != hash_identifier("1.2.3.5")
    assert len(hash_identifier("1.2.3.4")) == 16
