"""Retry loop and backoff policies.

Example:
    >>> from httpcase.runtime.retry import constant_backoff, retry
    >>>
    >>> async def attempt(ctx):
    ...     return await fetch_once(ctx)
    >>>
    >>> result = await retry(None, attempt, constant_backoff(0.5, max_calls=3))
"""

from .backoff import (
    Backoff,
    BackoffFactory,
    BackoffPolicy,
    ConstantBackoff,
    ExponentialBackoff,
    ScheduleBackoff,
    StopBackoff,
    ZeroBackoff,
    constant_backoff,
    exponential_backoff,
    jitter,
    schedule_backoff,
    stop_backoff,
    zero_backoff,
)
from .orchestrator import AttemptFn, OnRetry, retry

__all__ = [
    # Backoff strategies
    "Backoff", "BackoffFactory", "BackoffPolicy",
    "ZeroBackoff", "StopBackoff", "ConstantBackoff", "ExponentialBackoff", "ScheduleBackoff",
    "zero_backoff", "stop_backoff", "constant_backoff", "exponential_backoff", "schedule_backoff",
    "jitter",
    # Loop
    "retry", "AttemptFn", "OnRetry",
]
