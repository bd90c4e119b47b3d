"""Tests for failure classification, redaction and diagnostic rendering."""

from __future__ import annotations

import httpx
import pytest
from pydantic import ValidationError

from httpcase.foundation.errors import (
    REDACTED,
    ErrorCode,
    HttpError,
    HttpException,
    RetryableError,
    is_exists,
    is_not_found,
    is_retryable,
    new_error,
    redact_url,
)
from httpcase.io.body import ReplayBuffer


def _response(status: int, url: str, body: bytes = b"", **req_kw: object) -> httpx.Response:
    request = httpx.Request("POST", url, **req_kw)  # type: ignore[arg-type]
    return httpx.Response(status, content=body, request=request)


# ─────────────────────────────────────────────────────────────────────────────
# Redaction
# ─────────────────────────────────────────────────────────────────────────────


def test_access_token_never_exposed() -> None:
    err = new_error(response=_response(500, "https://api.example.com/v1?access_token=XYZ&page=2"))
    rendered = str(err)
    assert "XYZ" not in rendered
    assert f"access_token={REDACTED}" in rendered
    assert "page=2" in rendered


def test_secret_redacted() -> None:
    assert redact_url("https://h/p?secret=s3cr3t") == f"https://h/p?secret={REDACTED}"


def test_empty_secret_left_alone() -> None:
    assert redact_url("https://h/p?secret=&a=1") == "https://h/p?secret=&a=1"


def test_url_without_secrets_unchanged() -> None:
    assert redact_url("https://h/p?a=1&b=2") == "https://h/p?a=1&b=2"


# ─────────────────────────────────────────────────────────────────────────────
# Classification
# ─────────────────────────────────────────────────────────────────────────────


def test_no_response_only_cause_fields() -> None:
    err = new_error(cause=ConnectionResetError("reset by peer"), code=ErrorCode.TRANSPORT_ERROR)
    assert err.status == 0
    assert err.method == "" and err.url == "" and err.response_body == ""
    assert err.message == "reset by peer"
    assert str(err) == 'err="reset by peer"'


def test_default_message_without_cause() -> None:
    err = new_error(response=_response(502, "https://h/p"))
    assert err.message == "received unexpected response"


def test_render_order_and_quoting() -> None:
    err = new_error(
        response=_response(500, "https://h/p", body=b'{"Name":"error"}\n',
                           content=b'{"a":1}', headers={"Content-Type": "application/json"}),
    )
    assert str(err) == (
        'status=500 method=POST url="https://h/p" err="received unexpected response" '
        'response_body="{\\"Name\\":\\"error\\"}\\n" request_body="{\\"a\\":1}"'
    )


def test_request_body_only_captured_for_json() -> None:
    err = new_error(response=_response(500, "https://h/p", content=b"a=1",
                                       headers={"Content-Type": "application/x-www-form-urlencoded"}))
    assert err.request_body == ""
    assert "request_body" not in str(err)


def test_body_taken_from_replay_buffer() -> None:
    response = httpx.Response(500, stream=httpx.ByteStream(b"unread"), request=httpx.Request("GET", "https://h"))
    err = new_error(response=response, body=ReplayBuffer(b"buffered"))
    assert err.response_body == "buffered"


def test_flags_are_independent() -> None:
    err = new_error(response=_response(409, "https://h/p"), retry=True, not_found=True, exists=True)
    assert (err.retry, err.not_found, err.exists) == (True, True, True)
    assert is_retryable(err) and is_not_found(err) and is_exists(err)


def test_backoff_message_is_base_only() -> None:
    err = new_error(cause=ValueError("x"), response=_response(503, "https://h/p?secret=abc"))
    assert err.backoff_message() == f'status=503 method=POST url="https://h/p?secret={REDACTED}"'


def test_with_note_appends_and_keeps_flags() -> None:
    err = HttpError(status=500, message="boom", retry=True)
    noted = err.with_note("close response body: broken pipe")
    assert noted.message == "boom; close response body: broken pipe"
    assert noted.retry and err.message == "boom"


def test_error_is_frozen() -> None:
    err = HttpError()
    with pytest.raises(ValidationError):
        err.retry = True  # type: ignore[misc]


# ─────────────────────────────────────────────────────────────────────────────
# Capability queries
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.parametrize(("failure", "expected"), [
    (RetryableError("timeout"), True),
    (HttpException(HttpError(retry=True)), True),
    (HttpException(HttpError()), False),
    (ValueError("bad"), False),
    (None, False),
])
def test_is_retryable(failure: object, expected: bool) -> None:
    assert is_retryable(failure) is expected  # type: ignore[arg-type]


def test_exception_wraps_error() -> None:
    err = HttpError(status=404, not_found=True)
    exc = HttpException(err)
    assert exc.error is err
    assert str(exc) == str(err)
    assert is_not_found(exc) and not is_exists(exc)
