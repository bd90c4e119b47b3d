"""Call context passed explicitly down the retry/attempt chain.

A CallContext carries the 0-based attempt number, an optional cancellation
token and an optional deadline. It is immutable: the retry loop derives a new
context for every attempt with ``with_attempt``, so caller-supplied hooks
(response-error transforms, decoders) can see which attempt they run in.

Every suspension point of a call (transport dispatch, inter-retry wait) goes
through ``guard``, which races the awaitable against cancellation and the
deadline and reports the loser as a failure value instead of raising.

Example:
    >>> token = CancelToken()
    >>> ctx = CallContext().with_cancel(token).with_timeout(5.0)
    >>> result = await ctx.sleep(0.5)
    >>> result.is_ok()
    True
"""

from __future__ import annotations

import asyncio
import inspect
import time
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, TypeVar

from httpcase.foundation.errors import Err, ErrorCode, HttpError, Ok, Result

if TYPE_CHECKING:
    from collections.abc import Awaitable

T = TypeVar("T")


class CancelToken:
    """One-shot cancellation signal shared between a caller and its calls.

    Cancelling is idempotent; the first reason wins.
    """

    __slots__ = ("_event", "_reason")

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason = ""

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    async def wait(self) -> None:
        """Suspend until cancel() is called."""
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled}, reason={self._reason!r})"


@dataclass(frozen=True, slots=True)
class CallContext:
    """Per-attempt view of a call: attempt index, cancellation, deadline.

    Attributes:
        attempt: 0-based index of the attempt currently running
        cancel: Token whose cancellation aborts the call
        deadline: Absolute time.monotonic() value after which the call fails
    """

    attempt: int = 0
    cancel: CancelToken | None = None
    deadline: float | None = None

    def with_attempt(self, attempt: int) -> CallContext:
        return replace(self, attempt=attempt)

    def with_cancel(self, token: CancelToken) -> CallContext:
        return replace(self, cancel=token)

    def with_timeout(self, seconds: float) -> CallContext:
        """Derive a context whose deadline is at most ``seconds`` from now."""
        deadline = time.monotonic() + seconds
        if self.deadline is not None:
            deadline = min(deadline, self.deadline)
        return replace(self, deadline=deadline)

    def remaining(self) -> float | None:
        """Seconds left before the deadline, None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def error(self) -> HttpError | None:
        """The context's own failure if it is already cancelled or expired."""
        if self.cancel is not None and self.cancel.cancelled:
            return HttpError(code=ErrorCode.CANCELLED, message=f"context cancelled: {self.cancel.reason}")
        if self.deadline is not None and time.monotonic() >= self.deadline:
            return HttpError(code=ErrorCode.DEADLINE_EXCEEDED, message="context deadline exceeded")
        return None

    async def guard(self, aw: Awaitable[T]) -> Result[T, HttpError]:
        """Await ``aw`` unless cancellation or the deadline comes first.

        Returns Ok(value) when the awaitable finishes first, otherwise
        Err(HttpError) with code CANCELLED or DEADLINE_EXCEEDED. Exceptions
        raised by the awaitable propagate unchanged.
        """
        if (err := self.error()) is not None:
            if inspect.iscoroutine(aw):
                aw.close()
            return Err(err)
        if self.cancel is None and self.deadline is None:
            return Ok(await aw)

        task = asyncio.ensure_future(aw)
        waiters: set[asyncio.Future[object]] = {task}
        if self.cancel is not None:
            waiters.add(asyncio.ensure_future(self.cancel.wait()))
        try:
            done, _ = await asyncio.wait(waiters, timeout=self.remaining(), return_when=asyncio.FIRST_COMPLETED)
        finally:
            for w in waiters:
                if not w.done():
                    w.cancel()

        if task in done:
            return Ok(task.result())
        # Let the abandoned task observe its cancellation before returning
        await asyncio.gather(task, return_exceptions=True)
        return Err(self.error() or HttpError(code=ErrorCode.DEADLINE_EXCEEDED, message="context deadline exceeded"))

    async def sleep(self, seconds: float) -> Result[None, HttpError]:
        """Cancellable wait; a zero-length wait still honors cancellation."""
        return await self.guard(asyncio.sleep(max(0.0, seconds)))


def background() -> CallContext:
    """Root context: attempt 0, never cancelled, no deadline."""
    return CallContext()
