"""Tests for structured logging: binding, renderers, scoped context."""

from __future__ import annotations

import contextvars
import io

import orjson
import pytest

from httpcase.runtime.observability import (
    BoundLogger,
    CaptureRenderer,
    ConsoleRenderer,
    JsonRenderer,
    configure_logging,
    get_logger,
    log_context,
)


def test_bind_returns_new_logger(log: BoundLogger, capture: CaptureRenderer) -> None:
    bound = log.bind(service="billing")
    bound.info("started")
    log.info("plain")
    assert capture.entries[0].context == {"service": "billing"}
    assert capture.entries[1].context == {}


def test_bind_request_redacts_url(log: BoundLogger, capture: CaptureRenderer) -> None:
    log.bind_request("GET", "https://h/p?access_token=XYZ").info("dispatching")
    ctx = capture.entries[0].context
    assert ctx["method"] == "GET"
    assert "XYZ" not in ctx["url"]


def test_level_filtering(capture: CaptureRenderer) -> None:
    quiet = BoundLogger(_renderer=capture, _level=30)
    quiet.info("hidden")
    quiet.warning("shown")
    assert capture.events() == ["shown"]


def test_log_context_scoped(log: BoundLogger, capture: CaptureRenderer) -> None:
    with log_context(request_id="abc123"):
        log.info("inside")
    log.info("outside")
    assert capture.entries[0].context["request_id"] == "abc123"
    assert "request_id" not in capture.entries[1].context


def test_json_renderer() -> None:
    out = io.StringIO()
    BoundLogger(_renderer=JsonRenderer(output=out)).warning("drain failed", status=200, problems=["x"])
    line = orjson.loads(out.getvalue())
    assert line["level"] == "warning"
    assert line["event"] == "drain failed"
    assert line["problems"] == ["x"]


def test_console_renderer_plain() -> None:
    out = io.StringIO()
    log = BoundLogger(_renderer=ConsoleRenderer(output=out, show_timestamp=False))
    log.info("retrying", retry=1, error="status=503 method=\"GET\"", problems=["x"])
    assert out.getvalue().strip() == '[info] retrying error="status=503 method=\\"GET\\"" problems=["x"] retry=1'


def test_configure_logging_rejects_unknown_format() -> None:
    with pytest.raises(ValueError, match="Unknown log format"):
        configure_logging(format="xml")


def test_get_logger_names_logger() -> None:
    assert get_logger("httpcase.retry", attempt=0).context == {"attempt": 0, "logger": "httpcase.retry"}


def test_configure_logging_sets_format_and_level() -> None:
    out = io.StringIO()

    def emit() -> None:
        assert isinstance(configure_logging(format="json", level="warning", output=out), JsonRenderer)
        log = get_logger("httpcase.retry")
        log.info("retrying", retry=1)
        log.warning("response drain failed")

    # Global configuration lives in context vars; keep it out of other tests
    contextvars.copy_context().run(emit)
    lines = out.getvalue().splitlines()
    assert [orjson.loads(line)["event"] for line in lines] == ["response drain failed"]
