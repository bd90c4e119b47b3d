"""Retry loop around a single-attempt function.

The loop owns the attempt counter and exposes it to each attempt through
the CallContext. Only the failure's ``retry`` flag drives control flow; the
not-found and exists flags pass through untouched for the caller.

    attempt 0 ─► ok ──────────────────────────────► return value
             └─► failure, not retryable ──────────► return failure
             └─► failure, retryable ─► policy.next(n)
                                        ├─ stop ──► return failure
                                        └─ wait ──► sleep (cancellable) ─► attempt n
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, TypeVar

from httpcase.foundation.errors import Err, HttpError, Result, is_retryable
from httpcase.runtime.context import CallContext
from httpcase.runtime.observability import BoundLogger, get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from .backoff import BackoffFactory

T = TypeVar("T")

AttemptFn = Callable[[CallContext], "Awaitable[Result[T, HttpError]]"]
OnRetry = Callable[[int, HttpError, float], None]


async def retry(
    ctx: CallContext | None,
    attempt_fn: AttemptFn[T],
    backoff: BackoffFactory,
    *,
    on_retry: OnRetry | None = None,
    log: BoundLogger | None = None,
) -> Result[T, HttpError]:
    """Run ``attempt_fn`` until it succeeds, fails for good, or the policy stops.

    Args:
        ctx: Call context carrying cancellation and deadline (None = background)
        attempt_fn: One attempt; receives the context tagged with its 0-based index
        backoff: Factory producing the policy for this call
        on_retry: Called as (retry number, failure, wait) before each wait
        log: Logger to report retries and give-ups on

    Returns:
        The first success, the first non-retryable failure, the last failure
        when the policy stops, or the context's own failure when cancellation
        or the deadline interrupts a wait.
    """
    ctx = ctx or CallContext()
    log = log or get_logger("httpcase.retry")
    policy = backoff()
    n = 0

    while True:
        result = await attempt_fn(ctx.with_attempt(n))
        if result.is_ok():
            return result
        failure = result.unwrap_err()
        if not is_retryable(failure):
            return result

        n += 1
        wait, keep_going = policy.next(n)
        if not keep_going:
            log.info("giving up", attempts=n, error=failure.backoff_message())
            return result

        log.info("retrying", retry=n, wait=wait, error=failure.backoff_message())
        if on_retry is not None:
            on_retry(n, failure, wait)

        slept = await ctx.sleep(wait)
        if slept.is_err():
            return Err(slept.unwrap_err())
