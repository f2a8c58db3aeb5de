"""Tests for settings defaults and validation."""

import pytest
from pydantic import ValidationError

from throttle.core.config import AppSettings, LogSettings


def test_rate_limit_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "APP_RATE_LIMIT_ENABLED",
        "APP_RATE_LIMIT_MAX_REQUESTS",
        "APP_RATE_LIMIT_WINDOW_MS",
    ):
        monkeypatch.delenv(name, raising=False)

    cfg = AppSettings()

    assert cfg.rate_limit_enabled is True
    assert cfg.rate_limit_max_requests == 5
    assert cfg.rate_limit_window_ms == 60_000
    assert cfg.rate_limit_include_headers is True
    assert cfg.rate_limit_trust_forwarded_for is False
    assert cfg.rate_limit_unknown_client_id == "unknown"


def test_reads_prefixed_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_RATE_LIMIT_MAX_REQUESTS", "20")
    monkeypatch.setenv("APP_RATE_LIMIT_WINDOW_MS", "1000")

    cfg = AppSettings()

    assert cfg.rate_limit_max_requests == 20
    assert cfg.rate_limit_window_ms == 1000


@pytest.mark.parametrize(
    "name, value",
    [
        ("APP_RATE_LIMIT_MAX_REQUESTS", "0"),
        ("APP_RATE_LIMIT_WINDOW_MS", "0"),
        ("APP_RATE_LIMIT_UNKNOWN_CLIENT_ID", ""),
    ],
)
def test_rejects_invalid_values(monkeypatch: pytest.MonkeyPatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ValidationError):
        AppSettings()


def test_log_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    cfg = LogSettings()

    assert cfg.level == "INFO"
    assert cfg.format == "json"
    assert cfg.request_id_header == "X-Request-ID"
