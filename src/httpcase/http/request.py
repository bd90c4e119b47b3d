"""Immutable request configuration and the single-attempt executor.

A Request is built by a Client and refined with builder methods, each of
which returns a new Request. ``do()`` runs the retry loop around
``_attempt``, which performs exactly one dispatch:

    1. encode the body (missing encoder is a configuration error)
    2. build the wire request: headers and query params, last write wins,
       then auth decoration
    3. dispatch through the transport, guarded by the call context
    4. read the body once into a ReplayBuffer, under the same guard
    5. classify the status against success / retry / not-found / exists
       predicates, or decode the body on success
    6. drain and close the response on every exit path

Example:
    >>> result = await (
    ...     client.post("/orders")
    ...     .body(order)
    ...     .success(status_created())
    ...     .retry_status(status_in(502, 503))
    ...     .exists(status_conflict())
    ...     .decode(json_decode(Order))
    ...     .do()
    ... )
    >>> if result.is_err() and result.unwrap_err().exists:
    ...     order = await client.get(f"/orders/{order.id}").decode(json_decode(Order)).do()
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import httpx

from httpcase.foundation.errors import (
    Err,
    ErrorCode,
    HttpError,
    HttpException,
    Ok,
    Result,
    is_retryable,
    new_error,
)
from httpcase.io.body import ReplayBuffer, drain
from httpcase.runtime.observability import get_logger
from httpcase.runtime.retry import BackoffFactory, OnRetry, retry, stop_backoff

from .status import StatusFn, status_matches

if TYPE_CHECKING:
    from httpcase.io.codec import Decoder, Encoder
    from httpcase.runtime.context import CallContext

    from .auth import AuthFn
    from .transport import ResponseErrorFn, Transport

T = TypeVar("T")
U = TypeVar("U")

NO_ENCODER = "no encode fn provided for body"

Pair = tuple[str, str]


@dataclass(frozen=True, slots=True)
class Request(Generic[T]):
    """Everything needed to perform one call, possibly over several attempts.

    Headers and query params are kept in insertion order and applied as a
    map, so a key set twice resolves to its last value. Predicate lists are
    OR-combined; an empty success list means no status counts as success.
    """

    method: str
    addr: str
    transport: Transport = field(repr=False)
    payload: Any = field(default=None, repr=False)
    headers: tuple[Pair, ...] = ()
    params: tuple[Pair, ...] = ()
    auth_fn: AuthFn | None = field(default=None, repr=False)
    encoder: Encoder | None = field(default=None, repr=False)
    decoder: Decoder[T] | None = field(default=None, repr=False)
    error_decoder: Decoder[Any] | None = field(default=None, repr=False)
    response_error: ResponseErrorFn | None = field(default=None, repr=False)
    success_fns: tuple[StatusFn, ...] = field(default=(), repr=False)
    retry_fns: tuple[StatusFn, ...] = field(default=(), repr=False)
    not_found_fns: tuple[StatusFn, ...] = field(default=(), repr=False)
    exists_fns: tuple[StatusFn, ...] = field(default=(), repr=False)
    backoff_factory: BackoffFactory = field(default_factory=stop_backoff, repr=False)

    # ─────────────────────────────────────────────────────────────────
    # Builders
    # ─────────────────────────────────────────────────────────────────

    def auth(self, fn: AuthFn | None) -> Request[T]:
        """Override the client's auth for this request (None disables it)."""
        return replace(self, auth_fn=fn)

    def backoff(self, factory: BackoffFactory) -> Request[T]:
        return replace(self, backoff_factory=factory)

    def body(self, value: Any) -> Request[T]:
        return replace(self, payload=value)

    def content_type(self, ctype: str) -> Request[T]:
        return self.header("Content-Type", ctype)

    def decode(self, fn: Decoder[U]) -> Request[U]:
        """Decode successful response bodies with ``fn``."""
        return replace(self, decoder=fn)  # type: ignore[return-value,arg-type]

    def exists(self, *fns: StatusFn) -> Request[T]:
        return replace(self, exists_fns=self.exists_fns + fns)

    def header(self, key: str, value: str) -> Request[T]:
        return replace(self, headers=(*self.headers, (key, value)))

    def on_error(self, fn: Decoder[Any]) -> Request[T]:
        """Decode the body of unsuccessful responses; the value lands on HttpError.decoded_body."""
        return replace(self, error_decoder=fn)

    def not_found(self, *fns: StatusFn) -> Request[T]:
        return replace(self, not_found_fns=self.not_found_fns + fns)

    def query_param(self, key: str, value: str) -> Request[T]:
        return replace(self, params=(*self.params, (key, value)))

    def query_params(self, key: str, value: str, *pairs: str) -> Request[T]:
        """Add several params as flat key/value pairs; a trailing unpaired key is ignored."""
        flat = (key, value, *pairs)
        return replace(self, params=(*self.params, *zip(flat[0::2], flat[1::2])))

    def retry_status(self, *fns: StatusFn) -> Request[T]:
        return replace(self, retry_fns=self.retry_fns + fns)

    def retry_response_error(self, fn: ResponseErrorFn) -> Request[T]:
        """Transform transport failures before classification, e.g. to mark them retryable."""
        return replace(self, response_error=fn)

    def success(self, *fns: StatusFn) -> Request[T]:
        return replace(self, success_fns=self.success_fns + fns)

    # ─────────────────────────────────────────────────────────────────
    # Execution
    # ─────────────────────────────────────────────────────────────────

    async def do(self, ctx: CallContext | None = None, *, on_retry: OnRetry | None = None) -> Result[T | None, HttpError]:
        """Perform the call with retries; returns Ok(decoded value or None) or Err(HttpError)."""
        log = get_logger("httpcase.retry", method=self.method)
        return await retry(ctx, self._attempt, self.backoff_factory, on_retry=on_retry, log=log)

    async def do_or_raise(self, ctx: CallContext | None = None) -> T | None:
        """Like do(), raising HttpException on failure."""
        result = await self.do(ctx)
        if result.is_err():
            raise HttpException(result.unwrap_err())
        return result.unwrap()

    def do_sync(self, ctx: CallContext | None = None) -> Result[T | None, HttpError]:
        """Run do() on a fresh event loop; not for use inside a running loop."""
        return asyncio.run(self.do(ctx))

    async def _attempt(self, ctx: CallContext) -> Result[T | None, HttpError]:
        content: bytes | None = None
        if self.payload is not None:
            if self.encoder is None:
                return Err(HttpError(code=ErrorCode.INVALID_CONFIG, message=NO_ENCODER, op="encode"))
            try:
                content = self.encoder(self.payload).read()
            except Exception as e:
                return Err(new_error(code=ErrorCode.ENCODE_ERROR, cause=e, op="encode"))

        try:
            request = self._build(content)
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            return Err(new_error(code=ErrorCode.INVALID_REQUEST, cause=e, op="build"))

        log = get_logger("httpcase.request").bind_request(request.method, request.url, attempt=ctx.attempt)
        log.debug("dispatching")
        try:
            sent = await ctx.guard(self.transport.send(request))
        except Exception as e:
            return Err(self._transport_failure(e, ctx))
        if sent.is_err():
            return Err(sent.unwrap_err())

        response = sent.unwrap()
        try:
            outcome = await self._classify(ctx, request, response)
        finally:
            # An expired context only closes the response, leaving the rest unread
            problems = await drain(response, read_rest=ctx.error() is None)

        if problems:
            note = "; ".join(problems)
            if outcome.is_err():
                return Err(outcome.unwrap_err().with_note(note))
            log.warning("response drain failed", status=response.status_code, problems=problems)
        return outcome

    def _build(self, content: bytes | None) -> httpx.Request:
        headers = httpx.Headers()
        if content is not None and self.encoder is not None:
            headers["Content-Type"] = self.encoder.content_type
        for key, value in self.headers:
            headers[key] = value

        url = httpx.URL(self.addr)
        if self.params:
            url = url.copy_merge_params(dict(self.params))

        request = httpx.Request(self.method, url, headers=headers, content=content)
        return self.auth_fn(request) if self.auth_fn is not None else request

    async def _classify(self, ctx: CallContext, request: httpx.Request,
                        response: httpx.Response) -> Result[T | None, HttpError]:
        buf = ReplayBuffer()
        try:
            read = await ctx.guard(buf.consume(response))
        except (httpx.HTTPError, httpx.StreamError) as e:
            return Err(self._transport_failure(e, ctx, response))
        if read.is_err():
            return Err(read.unwrap_err())

        status = response.status_code
        if not status_matches(status, self.success_fns):
            cause, decoded = None, None
            if self.error_decoder is not None:
                try:
                    decoded = self.error_decoder(buf.reader())
                except Exception as e:
                    cause = e
            return Err(new_error(
                cause=cause,
                response=response,
                request=request,
                body=buf,
                retry=status_matches(status, self.retry_fns),
                not_found=status_matches(status, self.not_found_fns),
                exists=status_matches(status, self.exists_fns),
                op="status",
                decoded_body=decoded,
            ))

        if self.decoder is None:
            return Ok(None)
        try:
            return Ok(self.decoder(buf.reader()))
        except Exception as e:
            return Err(new_error(
                code=ErrorCode.DECODE_ERROR,
                cause=e,
                response=response,
                request=request,
                body=buf,
                retry=is_retryable(e),
                op="decode",
            ))

    def _transport_failure(self, exc: Exception, ctx: CallContext,
                           response: httpx.Response | None = None) -> HttpError:
        if self.response_error is not None:
            exc = self.response_error(exc, ctx)
        return new_error(
            code=ErrorCode.TRANSPORT_ERROR,
            cause=exc,
            response=response,
            retry=is_retryable(exc),
            op="transport",
        )
