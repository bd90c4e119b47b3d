"""Structured logging with bound context.

Every layer of httpcase logs through a BoundLogger: the retry loop logs each
retry and give-up, the request executor logs dispatches at debug level and
body-drain problems at warning level. Event names are constant; everything
variable travels as a field. URLs are redacted before they are bound, so
secrets in query strings never reach a log line.

Quick Start:
    >>> from httpcase.runtime.observability import configure_logging, get_logger
    >>>
    >>> configure_logging(format="console")  # or "json" for log shippers
    >>> log = get_logger("payments").bind_request("POST", "https://api/charges?secret=s3")
    >>> log.info("dispatching", attempt=0)
    # => 10:30:45.120 [info] dispatching attempt=0 logger="payments" method="POST"
    #    url="https://api/charges?secret=REDACTED"
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, Callable, Protocol, TextIO, runtime_checkable

import orjson

from httpcase.foundation.errors import redact_url

if TYPE_CHECKING:
    from types import TracebackType

    import httpx

JsonDict = dict[str, Any]

# Fields added by log_context; follows the task across awaits
_log_context: ContextVar[JsonDict] = ContextVar("log_context", default={})


# ─────────────────────────────────────────────────────────────────────────────
# Logger
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class BoundLogger:
    """Logger carrying a fixed set of fields; bind() derives a new one.

    Example:
        >>> log = get_logger("httpcase.request").bind(attempt=2)
        >>> log.debug("dispatching", method="GET")
    """

    context: JsonDict = field(default_factory=dict)
    _renderer: LogRenderer | None = None
    _level: int = logging.DEBUG

    def bind(self, **kw: Any) -> BoundLogger:
        return BoundLogger(context={**self.context, **kw}, _renderer=self._renderer, _level=self._level)

    def bind_request(self, method: str, url: str | httpx.URL, **kw: Any) -> BoundLogger:
        """Bind request identity; the URL is redacted first."""
        return self.bind(method=method, url=redact_url(url) if url else "", **kw)

    def _log(self, level: int, event: str, **kw: Any) -> None:
        if level < self._level:
            return
        fields = {**_log_context.get(), **self.context, **kw}
        (self._renderer or _get_renderer()).render(LogEntry(time.time(), logging.getLevelName(level).lower(), event, fields))

    def debug(self, event: str, **kw: Any) -> None: self._log(logging.DEBUG, event, **kw)
    def info(self, event: str, **kw: Any) -> None: self._log(logging.INFO, event, **kw)
    def warning(self, event: str, **kw: Any) -> None: self._log(logging.WARNING, event, **kw)
    def error(self, event: str, **kw: Any) -> None: self._log(logging.ERROR, event, **kw)


@dataclass(slots=True)
class LogEntry:
    timestamp: float
    level: str
    event: str
    context: JsonDict

    @property
    def when(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)


class log_context:  # noqa: N801
    """Adds fields to every entry logged inside the block, by any logger.

    Example:
        >>> with log_context(call_id="c-17"):
        ...     await client.get("/orders").do()   # retry and dispatch lines carry call_id
    """

    __slots__ = ("_fields", "_token")

    def __init__(self, **kw: Any) -> None:
        self._fields: JsonDict = dict(kw)
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _log_context.set({**_log_context.get(), **self._fields})
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                 exc_tb: TracebackType | None) -> None:
        if self._token is not None:
            _log_context.reset(self._token)  # type: ignore[arg-type]
            self._token = None


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


@dataclass(slots=True)
class ConsoleRenderer:
    """One line per entry: ``HH:MM:SS.mmm [level] event key=value ...``.

    Values are written as JSON, so strings are quoted and escaped the same
    way HttpError renders them.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    show_timestamp: bool = True

    def render(self, entry: LogEntry) -> None:
        head = [entry.when.strftime("%H:%M:%S.%f")[:-3]] if self.show_timestamp else []
        fields = [f"{k}={_dumps(v)}" for k, v in sorted(entry.context.items())]
        print(" ".join([*head, f"[{entry.level}]", entry.event, *fields]), file=self.output)


@dataclass(slots=True)
class JsonRenderer:
    """JSON Lines output for log aggregation."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        record = {"timestamp": entry.when.isoformat(), "level": entry.level, "event": entry.event, **entry.context}
        print(_dumps(record), file=self.output)


@dataclass(slots=True)
class NoOpRenderer:
    """Discards everything (format "none")."""

    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class CaptureRenderer:
    """Keeps entries in memory; handy for asserting on log output in tests."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level is None or e.level == level]


# ─────────────────────────────────────────────────────────────────────────────
# Global Configuration
# ─────────────────────────────────────────────────────────────────────────────


_renderer: ContextVar[LogRenderer | None] = ContextVar("log_renderer", default=None)
_default_level: ContextVar[int] = ContextVar("log_level", default=logging.INFO)

_FORMATS: dict[str, Callable[[TextIO | None], LogRenderer]] = {
    "console": lambda out: ConsoleRenderer(output=out or sys.stderr),
    "json": lambda out: JsonRenderer(output=out or sys.stdout),
    "none": lambda out: NoOpRenderer(),
}


def configure_logging(format: str = "console", level: str = "INFO", *, output: TextIO | None = None) -> LogRenderer:  # noqa: A002
    """Pick the renderer and minimum level used by loggers from get_logger()."""
    if (make := _FORMATS.get(format)) is None:
        raise ValueError(f"Unknown log format {format!r}; expected one of {sorted(_FORMATS)}")
    renderer = make(output)
    _renderer.set(renderer)
    _default_level.set(logging.getLevelNamesMapping().get(level.upper(), logging.INFO))
    return renderer


def get_logger(name: str | None = None, **initial_context: Any) -> BoundLogger:
    """Structured logger; ``name`` is added to context as 'logger'."""
    ctx = {**initial_context, **({"logger": name} if name else {})}
    return BoundLogger(context=ctx, _level=_default_level.get())


def _get_renderer() -> LogRenderer:
    if (renderer := _renderer.get()) is None:
        _renderer.set(renderer := ConsoleRenderer())
    return renderer


def _dumps(value: object) -> str:
    return orjson.dumps(value, default=str, option=orjson.OPT_NON_STR_KEYS).decode()
