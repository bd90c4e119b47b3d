"""Buffer-and-replay for one-shot response bodies.

A response body stream can be read once. The executor reads it exactly once
into a ReplayBuffer and then hands independent readers to every consumer
(error classification, error-body decoder, success decoder), so each sees
the full original bytes.

    >>> buf = await ReplayBuffer().consume(response)
    >>> decoder(buf.reader())       # first consumer
    >>> buf.text()                  # second consumer, same bytes
"""

from __future__ import annotations

import io
from typing import BinaryIO

import httpx


class ReplayBuffer:
    """Owned copy of a response body with any number of independent readers."""

    __slots__ = ("_data", "_consumed")

    def __init__(self, data: bytes = b"") -> None:
        self._data = data
        self._consumed = bool(data)

    async def consume(self, response: httpx.Response) -> ReplayBuffer:
        """Read the response body once; later calls are no-ops."""
        if not self._consumed:
            self._data = await response.aread()
            self._consumed = True
        return self

    @property
    def data(self) -> bytes:
        return self._data

    def reader(self) -> BinaryIO:
        """Fresh reader positioned at the start of the buffered body."""
        return io.BytesIO(self._data)

    def text(self, encoding: str = "utf-8") -> str:
        return self._data.decode(encoding, errors="replace")

    def __bytes__(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ReplayBuffer({len(self._data)} bytes)"


async def drain(response: httpx.Response, *, read_rest: bool = True) -> list[str]:
    """Read whatever is left of the body (unless ``read_rest`` is False) and close the response.

    Returns a description of every problem hit on the way; an empty list
    means the response was released cleanly.
    """
    problems: list[str] = []
    if read_rest and not response.is_stream_consumed:
        try:
            async for _ in response.aiter_raw():
                pass
        except (httpx.HTTPError, httpx.StreamError) as e:
            problems.append(f"drain response body: {e}")
    if not response.is_closed:
        try:
            await response.aclose()
        except (httpx.HTTPError, httpx.StreamError) as e:
            problems.append(f"close response body: {e}")
    return problems
