"""Tests for CallContext guarding: cancellation, deadlines, propagation."""

from __future__ import annotations

import asyncio

import pytest

from httpcase.foundation.errors import ErrorCode
from httpcase.runtime.context import CallContext, CancelToken, background


def test_with_attempt_returns_new_context() -> None:
    ctx = background()
    nxt = ctx.with_attempt(3)
    assert (ctx.attempt, nxt.attempt) == (0, 3)


def test_with_timeout_keeps_earliest_deadline() -> None:
    ctx = CallContext().with_timeout(10.0)
    tighter = ctx.with_timeout(1.0)
    assert tighter.deadline is not None and ctx.deadline is not None
    assert tighter.deadline < ctx.deadline
    assert ctx.with_timeout(100.0).deadline == ctx.deadline


def test_cancel_first_reason_wins() -> None:
    token = CancelToken()
    token.cancel("first")
    token.cancel("second")
    assert token.cancelled and token.reason == "first"


@pytest.mark.asyncio
async def test_guard_returns_value() -> None:
    async def value() -> int:
        return 7

    result = await CallContext(cancel=CancelToken()).guard(value())
    assert result.unwrap() == 7


@pytest.mark.asyncio
async def test_guard_already_cancelled_does_not_run() -> None:
    ran = False

    async def work() -> None:
        nonlocal ran
        ran = True

    token = CancelToken()
    token.cancel("stop")
    result = await CallContext(cancel=token).guard(work())
    assert result.unwrap_err().code == ErrorCode.CANCELLED
    assert not ran


@pytest.mark.asyncio
async def test_guard_cancel_while_running() -> None:
    token = CancelToken()
    asyncio.get_running_loop().call_later(0.01, token.cancel)
    result = await CallContext(cancel=token).guard(asyncio.sleep(5))
    assert result.unwrap_err().code == ErrorCode.CANCELLED


@pytest.mark.asyncio
async def test_guard_deadline() -> None:
    result = await CallContext().with_timeout(0.01).guard(asyncio.sleep(5))
    assert result.unwrap_err().code == ErrorCode.DEADLINE_EXCEEDED


@pytest.mark.asyncio
async def test_guard_propagates_exceptions() -> None:
    async def boom() -> None:
        raise LookupError("nope")

    with pytest.raises(LookupError):
        await CallContext(cancel=CancelToken()).guard(boom())
    with pytest.raises(LookupError):
        await background().guard(boom())


@pytest.mark.asyncio
async def test_sleep_zero_ok_when_not_cancelled() -> None:
    assert (await CallContext(cancel=CancelToken()).sleep(0)).is_ok()
