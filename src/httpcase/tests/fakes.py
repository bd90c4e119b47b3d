"""Test doubles: recording fake transports and streaming bodies."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable

import httpx
import orjson

Handler = Callable[[httpx.Request], httpx.Response]


class FakeTransport:
    """Transport double: records every request and answers through ``handler``.

    ``handler`` may raise to simulate a transport failure.
    """

    def __init__(self, handler: Handler) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    async def send(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


class TrackedStream(httpx.AsyncByteStream):
    """Unread response body that records closing and can fail mid-read.

    ``delay`` seconds pass before every chunk after the first, simulating a
    body that arrives slowly after the headers.
    """

    def __init__(self, *chunks: bytes, fail: Exception | None = None, delay: float = 0.0) -> None:
        self.chunks = chunks
        self.fail = fail
        self.delay = delay
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for i, chunk in enumerate(self.chunks):
            if i and self.delay:
                await asyncio.sleep(self.delay)
            yield chunk
        if self.fail is not None:
            raise self.fail

    async def aclose(self) -> None:
        self.closed = True


def respond(status: int, content: bytes = b"", headers: dict[str, str] | None = None) -> Handler:
    """Handler answering every request with the same status and body."""
    return lambda request: httpx.Response(status, content=content, headers=headers, request=request)


def echo(request: httpx.Request) -> httpx.Response:
    """Return the JSON body that was sent, with the request method filled in."""
    payload = orjson.loads(request.content)
    payload["method"] = request.method
    return httpx.Response(200, content=orjson.dumps(payload), request=request,
                          headers={"Content-Type": "application/json"})
