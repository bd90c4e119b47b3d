"""Tests for environment configuration and settings-driven clients."""

from __future__ import annotations

import orjson
import pytest

from httpcase.foundation.config import HttpcaseSettings, RetrySettings, get_settings
from httpcase.http import BearerAuth, Client, HttpxTransport
from httpcase.runtime.observability import get_logger
from httpcase.runtime.retry import (
    ConstantBackoff,
    ExponentialBackoff,
    ScheduleBackoff,
    StopBackoff,
    ZeroBackoff,
)


def test_defaults() -> None:
    settings = get_settings()
    assert settings.http.timeout == 30.0
    assert settings.retry.strategy == "stop"
    assert settings.logging.level == "INFO"


def test_settings_are_cached() -> None:
    assert get_settings() is get_settings()


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HTTPCASE_HTTP_BASE_URL", "https://api.example.com")
    monkeypatch.setenv("HTTPCASE_RETRY_STRATEGY", "constant")
    monkeypatch.setenv("HTTPCASE_RETRY_MAX_ATTEMPTS", "4")
    monkeypatch.setenv("HTTPCASE_LOG_LEVEL", "debug")

    settings = HttpcaseSettings()
    assert settings.http.base_url == "https://api.example.com"
    assert settings.retry.strategy == "constant"
    assert settings.retry.max_attempts == 4
    assert settings.logging.level == "DEBUG"


def test_auth_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HTTPCASE_HTTP_AUTH", '{"auth_type": "bearer", "token": "tok_live_123456"}')
    auth = HttpcaseSettings().http.auth
    assert isinstance(auth, BearerAuth)
    assert auth.token.get_secret_value() == "tok_live_123456"
    assert "tok_live_123456" not in repr(auth)


@pytest.mark.parametrize(("strategy", "cls"), [
    ("stop", StopBackoff),
    ("zero", ZeroBackoff),
    ("constant", ConstantBackoff),
    ("exponential", ExponentialBackoff),
    ("schedule", ScheduleBackoff),
])
def test_retry_settings_build_backoff(strategy: str, cls: type) -> None:
    factory = RetrySettings(strategy=strategy, max_attempts=3).backoff()
    assert isinstance(factory(), cls)


def test_retry_settings_parameters_flow_through() -> None:
    policy = RetrySettings(strategy="constant", interval=0.5, max_attempts=2).backoff()()
    assert policy.next(1) == (0.5, True)
    assert policy.next(2) == (0.0, False)


@pytest.mark.asyncio
async def test_client_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HTTPCASE_HTTP_BASE_URL", "https://api.example.com/v2/")
    monkeypatch.setenv("HTTPCASE_HTTP_USER_AGENT", "billing-sync/3.1")
    monkeypatch.setenv("HTTPCASE_RETRY_STRATEGY", "zero")

    async with Client.from_settings(HttpcaseSettings()) as client:
        assert isinstance(client.transport, HttpxTransport)
        assert client.get("/invoices").addr == "https://api.example.com/v2/invoices"
        assert client.headers == (("User-Agent", "billing-sync/3.1"),)
        assert isinstance(client.backoff_factory(), ZeroBackoff)
    assert client.transport.client.is_closed


@pytest.mark.asyncio
async def test_client_from_settings_applies_logging(monkeypatch: pytest.MonkeyPatch,
                                                    capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("HTTPCASE_LOG_FORMAT", "json")
    monkeypatch.setenv("HTTPCASE_LOG_LEVEL", "warning")

    async with Client.from_settings(HttpcaseSettings()):
        log = get_logger("httpcase.request")
        log.info("dispatching")
        log.warning("response drain failed", status=200)

    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 1
    entry = orjson.loads(lines[0])
    assert (entry["event"], entry["level"], entry["status"]) == ("response drain failed", "warning", 200)
