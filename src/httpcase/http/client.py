"""Client: request factory carrying per-client defaults.

A Client holds the defaults every request starts from (transport, base URL,
auth, encoder, backoff, headers). ``with_*`` methods return a new Client, so
a shared base client can be specialized per call site without affecting
others:

    >>> async with Client.from_settings() as base:
    ...     billing = base.with_base_url("https://billing.internal").with_auth(bearer_auth(token))
    ...     result = await billing.get("/invoices/42").success(status_ok()).decode(json_decode(Invoice)).do()
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from httpcase.io.codec import json_encode
from httpcase.runtime.retry import stop_backoff

from .request import Request
from .transport import HttpxTransport

if TYPE_CHECKING:
    from types import TracebackType

    from httpcase.foundation.config import HttpcaseSettings
    from httpcase.io.codec import Encoder
    from httpcase.runtime.retry import BackoffFactory

    from .auth import AuthFn
    from .transport import Transport


@dataclass(frozen=True, slots=True)
class Client:
    """Immutable set of request defaults bound to a transport.

    Attributes:
        transport: Sends built requests
        base_url: Prefix joined to every request address with exactly one slash
        auth_fn: Default auth decoration (requests may override)
        encoder: Default body encoder (JSON)
        backoff_factory: Default backoff (never retry)
        headers: Headers applied before request-level headers
        owns_transport: Close the transport when the client is closed
    """

    transport: Transport = field(repr=False)
    base_url: str = ""
    auth_fn: AuthFn | None = field(default=None, repr=False)
    encoder: Encoder | None = field(default_factory=json_encode, repr=False)
    backoff_factory: BackoffFactory = field(default_factory=stop_backoff, repr=False)
    headers: tuple[tuple[str, str], ...] = ()
    owns_transport: bool = field(default=False, repr=False)

    @classmethod
    def from_settings(cls, settings: HttpcaseSettings | None = None) -> Client:
        """httpx-backed client configured from HTTPCASE_* settings; also applies the logging section."""
        if settings is None:
            from httpcase.foundation.config import get_settings
            settings = get_settings()
        settings.logging.configure()
        http = settings.http
        transport = HttpxTransport(timeout=http.timeout, verify=http.verify_ssl, follow_redirects=http.follow_redirects)
        return cls(
            transport,
            base_url=http.base_url,
            auth_fn=http.auth,
            backoff_factory=settings.retry.backoff(),
            headers=(("User-Agent", http.user_agent),) if http.user_agent else (),
            owns_transport=True,
        )

    # ─────────────────────────────────────────────────────────────────
    # Defaults
    # ─────────────────────────────────────────────────────────────────

    def with_auth(self, fn: AuthFn | None) -> Client:
        return replace(self, auth_fn=fn)

    def with_backoff(self, factory: BackoffFactory) -> Client:
        return replace(self, backoff_factory=factory)

    def with_base_url(self, base_url: str) -> Client:
        return replace(self, base_url=base_url)

    def with_content_type(self, ctype: str) -> Client:
        return self.with_header("Content-Type", ctype)

    def with_encoder(self, encoder: Encoder | None) -> Client:
        return replace(self, encoder=encoder)

    def with_header(self, key: str, value: str) -> Client:
        return replace(self, headers=(*self.headers, (key, value)))

    # ─────────────────────────────────────────────────────────────────
    # Request factory
    # ─────────────────────────────────────────────────────────────────

    def request(self, method: str, addr: str) -> Request[Any]:
        return Request(
            method=method.upper(),
            addr=join_url(self.base_url, addr),
            transport=self.transport,
            headers=self.headers,
            auth_fn=self.auth_fn,
            encoder=self.encoder,
            backoff_factory=self.backoff_factory,
        )

    def get(self, addr: str) -> Request[Any]: return self.request("GET", addr)
    def post(self, addr: str) -> Request[Any]: return self.request("POST", addr)
    def put(self, addr: str) -> Request[Any]: return self.request("PUT", addr)
    def patch(self, addr: str) -> Request[Any]: return self.request("PATCH", addr)
    def delete(self, addr: str) -> Request[Any]: return self.request("DELETE", addr)

    # ─────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        if self.owns_transport and (close := getattr(self.transport, "aclose", None)) is not None:
            await close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, exc_type: type[BaseException] | None, exc_val: BaseException | None,
                        exc_tb: TracebackType | None) -> None:
        await self.aclose()


def join_url(base_url: str, addr: str) -> str:
    """Join with exactly one slash between base and path; an empty side is left as is."""
    if not base_url:
        return addr
    if not addr:
        return base_url
    return f"{base_url.rstrip('/')}/{addr.lstrip('/')}"
