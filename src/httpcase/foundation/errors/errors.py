"""Classified failures for HTTP calls.

HttpError is the single structured value every failed attempt produces. It
records what was sent and what came back (status, method, redacted URL,
bodies) together with three independent flags that callers and the retry
loop inspect directly:

- retry: the retry loop may dispatch the request again
- not_found: the caller's not-found predicates matched the status
- exists: the caller's already-exists predicates matched the status

The flags are not mutually exclusive; a 409 can be both retryable and
"exists" if both predicate lists match it.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

import httpx
import orjson
from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from httpcase.io.body import ReplayBuffer


REDACTED = "REDACTED"
_SECRET_KEYS: tuple[str, ...] = ("access_token", "secret")
_DEFAULT_MESSAGE = "received unexpected response"


class ErrorCode(StrEnum):
    """Where in the request pipeline a failure originated."""
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_REQUEST = "INVALID_REQUEST"
    ENCODE_ERROR = "ENCODE_ERROR"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    UNEXPECTED_STATUS = "UNEXPECTED_STATUS"
    DECODE_ERROR = "DECODE_ERROR"
    CANCELLED = "CANCELLED"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"


class RetryableError(Exception):
    """Transient failure raised by a transport, codec or response-error transform.

    Raising (or returning from a transform) an instance of this class is the
    only way for caller-supplied code to mark a failure as retryable.
    """


class HttpError(BaseModel):
    """Structured failure of a single attempt.

    Attributes:
        code: Pipeline stage the failure came from
        status: Response status code, 0 when no response was received
        method: Request method of the response's request
        url: Request URL with secret query values replaced by REDACTED
        message: Error text from the underlying cause
        response_body: Full response body text
        request_body: Request body text, captured for JSON requests only
        retry: Whether the retry loop may try again
        not_found: Whether a not-found predicate matched
        exists: Whether an already-exists predicate matched
        op: Optional origin label
        cause: Underlying exception, if any
        decoded_body: Value produced by the request's error-body decoder
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        arbitrary_types_allowed=True,
        revalidate_instances="never",
        json_schema_extra={
            "title": "HTTP Error",
            "examples": [{
                "code": "UNEXPECTED_STATUS",
                "status": 503,
                "method": "GET",
                "url": "https://api.example.com/items?access_token=REDACTED",
                "message": "received unexpected response",
                "retry": True,
            }],
        },
    )

    code: ErrorCode = ErrorCode.UNEXPECTED_STATUS
    status: int = 0
    method: str = ""
    url: str = ""
    message: str = _DEFAULT_MESSAGE
    response_body: str = Field(default="", repr=False)
    request_body: str = Field(default="", repr=False)
    retry: bool = False
    not_found: bool = False
    exists: bool = False
    op: str = ""
    cause: BaseException | None = Field(default=None, repr=False, exclude=True)
    decoded_body: Any = Field(default=None, repr=False, exclude=True)

    def _base(self) -> list[str]:
        parts: list[str] = []
        if self.status:
            parts.append(f"status={self.status}")
        if self.method:
            parts.append(f"method={self.method}")
        if self.url:
            parts.append(f"url={_quote(self.url)}")
        return parts

    def backoff_message(self) -> str:
        """Condensed message for logging inside a retry loop."""
        return " ".join(self._base())

    def render(self) -> str:
        """Full diagnostic: status, method, url, then error and body segments."""
        parts = self._base()
        if self.message:
            parts.append(f"err={_quote(self.message)}")
        if self.response_body:
            parts.append(f"response_body={_quote(self.response_body)}")
        if self.request_body:
            parts.append(f"request_body={_quote(self.request_body)}")
        return " ".join(parts)

    __str__ = render

    def with_note(self, note: str) -> HttpError:
        """Return a copy with note appended to the error text."""
        message = f"{self.message}; {note}" if self.message else note
        return self.model_copy(update={"message": message})

    def __hash__(self) -> int:
        return hash((self.code, self.status, self.method, self.url, self.message, self.retry))


class HttpException(Exception):
    """Exception carrying an HttpError, for callers that prefer raising."""

    __slots__ = ("error",)

    def __init__(self, error: HttpError) -> None:
        self.error = error
        super().__init__(error.render())


def new_error(
    *,
    code: ErrorCode = ErrorCode.UNEXPECTED_STATUS,
    cause: BaseException | None = None,
    response: httpx.Response | None = None,
    request: httpx.Request | None = None,
    body: bytes | ReplayBuffer | None = None,
    retry: bool = False,
    not_found: bool = False,
    exists: bool = False,
    op: str = "",
    decoded_body: Any = None,
) -> HttpError:
    """Classify a failure from its independent contributions.

    Without a response only the cause contributes: status stays 0 and no
    method, URL or bodies are recorded. With a response, the URL of the
    request that produced it (falling back to ``request``) is redacted
    before being stored, and the body is taken from ``body`` (a replay
    buffer the caller already filled) or from the response's already-read
    content.
    """
    fields: dict[str, Any] = {
        "code": code,
        "message": str(cause) if cause is not None else _DEFAULT_MESSAGE,
        "retry": retry,
        "not_found": not_found,
        "exists": exists,
        "op": op,
        "cause": cause,
        "decoded_body": decoded_body,
    }
    if response is None:
        return HttpError(**fields)

    req = _request_of(response) or request
    if req is not None:
        fields["method"] = req.method
        fields["url"] = redact_url(req.url)
        if "application/json" in req.headers.get("content-type", ""):
            fields["request_body"] = _request_text(req)
    fields["status"] = response.status_code
    fields["response_body"] = _body_text(response, body)
    return HttpError(**fields)


def redact_url(url: str | httpx.URL) -> str:
    """Replace non-empty access_token / secret query values with REDACTED."""
    parsed = httpx.URL(url)
    for key in _SECRET_KEYS:
        if any(parsed.params.get_list(key)):
            parsed = parsed.copy_set_param(key, REDACTED)
    return str(parsed)


def is_retryable(failure: HttpError | BaseException | None) -> bool:
    """Whether a failure value or exception signals that a retry may succeed."""
    match failure:
        case HttpError():
            return failure.retry
        case HttpException():
            return failure.error.retry
        case RetryableError():
            return True
    return False


def is_not_found(failure: HttpError | BaseException | None) -> bool:
    match failure:
        case HttpError():
            return failure.not_found
        case HttpException():
            return failure.error.not_found
    return False


def is_exists(failure: HttpError | BaseException | None) -> bool:
    match failure:
        case HttpError():
            return failure.exists
        case HttpException():
            return failure.error.exists
    return False


def _quote(s: str) -> str:
    return orjson.dumps(s).decode()


def _request_of(response: httpx.Response) -> httpx.Request | None:
    try:
        return response.request
    except RuntimeError:  # response built without a request
        return None


def _request_text(request: httpx.Request) -> str:
    try:
        return request.content.decode("utf-8", errors="replace")
    except httpx.RequestNotRead:
        return ""


def _body_text(response: httpx.Response, body: bytes | ReplayBuffer | None) -> str:
    if body is not None:
        return bytes(body).decode("utf-8", errors="replace")
    try:
        return response.content.decode("utf-8", errors="replace")
    except httpx.ResponseNotRead:
        return ""
