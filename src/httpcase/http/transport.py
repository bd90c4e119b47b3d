"""Transport boundary: anything that turns a built request into a response.

The executor only needs ``await transport.send(request)``. HttpxTransport is
the default implementation on top of ``httpx.AsyncClient``; tests substitute
``httpx.MockTransport`` underneath it or a hand-written fake implementing
the protocol directly.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, runtime_checkable

import httpx

from httpcase.foundation.errors import RetryableError

if TYPE_CHECKING:
    from types import TracebackType

    from httpcase.runtime.context import CallContext


@runtime_checkable
class Transport(Protocol):
    async def send(self, request: httpx.Request) -> httpx.Response: ...


# Transforms a transport failure before classification; sees the attempt index
ResponseErrorFn = Callable[[Exception, "CallContext"], Exception]


class HttpxTransport:
    """Transport backed by an ``httpx.AsyncClient``.

    Responses are returned unread (``stream=True``); the executor owns reading
    and closing them. When the transport creates its own client it also
    closes it on ``aclose()``; a caller-supplied client is left open.
    """

    __slots__ = ("_client", "_owns_client")

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float = 30.0,
        verify: bool = True,
        follow_redirects: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            verify=verify,
            follow_redirects=follow_redirects,
            transport=transport,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def send(self, request: httpx.Request) -> httpx.Response:
        return await self._client.send(request, stream=True)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                        exc_tb: TracebackType | None) -> None:
        await self.aclose()


def retry_transport_errors(exc: Exception, ctx: CallContext) -> Exception:
    """Mark httpx timeouts and network errors retryable; leave the rest alone."""
    if isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)):
        retryable = RetryableError(f"{type(exc).__name__}: {exc} (attempt {ctx.attempt})")
        retryable.__cause__ = exc
        return retryable
    return exc
