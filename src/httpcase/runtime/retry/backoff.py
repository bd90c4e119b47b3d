"""Backoff policies deciding how long to wait before the next retry, or to stop.

Each policy answers ``next(retry) -> (wait_seconds, keep_going)`` where
``retry`` is the 1-based count of retries issued so far. A policy instance
belongs to exactly one call; factories hand out a fresh instance per call.

- ZeroBackoff: Retry immediately, optionally bounded
- StopBackoff: Never retry
- ConstantBackoff: Fixed interval between retries
- ExponentialBackoff: Randomized exponential growth, stops at a ceiling
- ScheduleBackoff: Caller-supplied list of waits, optionally jittered

Once a policy answers stop it stays exhausted: every later call to ``next``
returns ``(0.0, False)``.
"""

from __future__ import annotations

import random
import threading
from abc import ABC, abstractmethod
from typing import Callable, Protocol, runtime_checkable


@runtime_checkable
class Backoff(Protocol):
    """Protocol for wait-or-stop decisions between attempts."""

    def next(self, retry: int) -> tuple[float, bool]:
        """Return (wait in seconds, whether to retry) for the given 1-based retry."""
        ...


BackoffFactory = Callable[[], Backoff]

_STOP: tuple[float, bool] = (0.0, False)


def jitter(ms: int) -> int:
    """Randomize ``ms`` into [ms/2, 3ms/2), never below 1 for positive input."""
    if ms <= 0:
        return 0
    return max(1, ms // 2 + random.randrange(ms))


class BackoffPolicy(ABC):
    """Shared bookkeeping: max-calls cutoff and the terminal EXHAUSTED state."""

    __slots__ = ("max_calls", "_exhausted")

    def __init__(self, max_calls: int = 0) -> None:
        self.max_calls = max_calls
        self._exhausted = False

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def next(self, retry: int) -> tuple[float, bool]:
        if self._exhausted:
            return _STOP
        if self.max_calls > 0 and retry >= self.max_calls:
            return self._stop()
        wait, ok = self._next(retry)
        return (wait, True) if ok else self._stop()

    def _stop(self) -> tuple[float, bool]:
        self._exhausted = True
        return _STOP

    @abstractmethod
    def _next(self, retry: int) -> tuple[float, bool]: ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(max_calls={self.max_calls}, exhausted={self._exhausted})"


class ZeroBackoff(BackoffPolicy):
    """Retry with no wait; ``max_calls=0`` means forever."""

    __slots__ = ()

    def _next(self, retry: int) -> tuple[float, bool]:
        return 0.0, True


class StopBackoff(BackoffPolicy):
    """Never retry."""

    __slots__ = ()

    def __init__(self) -> None:
        super().__init__(0)

    def _next(self, retry: int) -> tuple[float, bool]:
        return _STOP


class ConstantBackoff(BackoffPolicy):
    """Same interval before every retry.

    Attributes:
        interval: Wait in seconds
    """

    __slots__ = ("interval",)

    def __init__(self, interval: float, max_calls: int = 0) -> None:
        super().__init__(max_calls)
        self.interval = interval

    def _next(self, retry: int) -> tuple[float, bool]:
        return self.interval, True


class ExponentialBackoff(BackoffPolicy):
    """Exponential growth with a random multiplier in [1, 2].

    wait = min(r * initial * factor^retry, ceiling) with r uniform in [1, 2],
    computed in whole milliseconds. Reaching the ceiling stops the policy
    instead of waiting, as does an initial wait under one millisecond.

    Attributes:
        initial: Base wait in seconds
        ceiling: Largest wait in seconds; reaching it stops retrying
        factor: Growth factor per retry (default: 2.0)
    """

    __slots__ = ("initial", "ceiling", "factor")

    def __init__(self, initial: float, ceiling: float, max_calls: int = 0, factor: float = 2.0) -> None:
        super().__init__(max_calls)
        self.initial, self.ceiling, self.factor = initial, ceiling, factor

    def _next(self, retry: int) -> tuple[float, bool]:
        initial_ms, ceiling_ms = _to_ms(self.initial), _to_ms(self.ceiling)
        if initial_ms <= 0:
            return _STOP
        try:
            grown = initial_ms * self.factor ** retry
        except OverflowError:
            return _STOP
        scaled = (1.0 + random.random()) * grown
        if scaled >= ceiling_ms:
            return _STOP
        return int(scaled) / 1000, True


class ScheduleBackoff(BackoffPolicy):
    """Waits taken from a fixed schedule; retry N uses the Nth entry.

    The whole decision, exhausted latch included, runs under a lock so a
    single instance may be consulted by concurrent attempts.

    Attributes:
        ticks: Schedule in whole milliseconds
        use_jitter: Randomize each wait into [0.5x, 1.5x]
    """

    __slots__ = ("ticks", "use_jitter", "_lock")

    def __init__(self, ticks: tuple[float, ...], max_calls: int = 0, jitter: bool = False) -> None:
        super().__init__(max_calls)
        self.ticks = tuple(_to_ms(t) for t in ticks)
        self.use_jitter = jitter
        self._lock = threading.Lock()

    def next(self, retry: int) -> tuple[float, bool]:
        with self._lock:
            return super().next(retry)

    def _next(self, retry: int) -> tuple[float, bool]:
        if retry < 1 or retry > len(self.ticks):
            return _STOP
        ms = self.ticks[retry - 1]
        if self.use_jitter:
            ms = jitter(ms)
        return ms / 1000, True


def _to_ms(seconds: float) -> int:
    return int(round(seconds * 1000))


# ═════════════════════════════════════════════════════════════════════════════
# Factories: each returns a callable producing a fresh policy per call
# ═════════════════════════════════════════════════════════════════════════════


def zero_backoff(max_calls: int = 0) -> BackoffFactory:
    return lambda: ZeroBackoff(max_calls)


def stop_backoff() -> BackoffFactory:
    return StopBackoff


def constant_backoff(interval: float, max_calls: int = 0) -> BackoffFactory:
    """Fixed ``interval`` seconds between retries, at most ``max_calls`` attempts."""
    return lambda: ConstantBackoff(interval, max_calls)


def exponential_backoff(initial: float, ceiling: float, max_calls: int = 0, factor: float = 2.0) -> BackoffFactory:
    """Randomized exponential waits starting at ``initial``, stopping at ``ceiling``."""
    return lambda: ExponentialBackoff(initial, ceiling, max_calls, factor)


def schedule_backoff(*ticks: float, max_calls: int = 0, jitter: bool = False) -> BackoffFactory:
    """Waits (in seconds) from ``ticks``; stops once the schedule runs out."""
    return lambda: ScheduleBackoff(ticks, max_calls, jitter)
