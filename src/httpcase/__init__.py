"""httpcase - declarative HTTP calls with classified failures and pluggable backoff.

Requests are built from an immutable Client, dispatched through an
injectable transport, classified against caller-declared status predicates
and retried under a backoff policy. Every call returns a Result: the decoded
value, or an HttpError carrying redacted diagnostics and the independent
retry / not_found / exists flags.

Quick Start:
    >>> from httpcase import Client, HttpxTransport, constant_backoff, json_decode, status_ok, status_in
    >>>
    >>> client = Client(HttpxTransport(), base_url="https://api.example.com")
    >>> result = await (
    ...     client.get("/users/7")
    ...     .success(status_ok())
    ...     .retry_status(status_in(502, 503))
    ...     .backoff(constant_backoff(0.2, max_calls=3))
    ...     .decode(json_decode(User))
    ...     .do()
    ... )
    >>> if result.is_err():
    ...     err = result.unwrap_err()
    ...     print(err.not_found, err)  # False status=503 method=GET url="..." ...

Configuration from the environment:
    >>> async with Client.from_settings() as client:   # HTTPCASE_* variables
    ...     ...
"""

__version__ = "0.1.0"

from httpcase.foundation.config import (
    HttpcaseSettings,
    HttpSettings,
    LoggingSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)
from httpcase.foundation.errors import (
    REDACTED,
    Err,
    ErrorCode,
    HttpError,
    HttpException,
    Ok,
    Result,
    RetryableError,
    is_exists,
    is_not_found,
    is_retryable,
    new_error,
    redact_url,
)
from httpcase.http import (
    ApiKeyAuth,
    AuthFn,
    BasicAuth,
    BearerAuth,
    Client,
    HttpxTransport,
    Request,
    StatusFn,
    Transport,
    api_key_auth,
    basic_auth,
    bearer_auth,
    retry_transport_errors,
    status_accepted,
    status_conflict,
    status_created,
    status_in,
    status_in_range,
    status_internal_server_error,
    status_is,
    status_matches,
    status_no_content,
    status_not,
    status_not_found,
    status_not_in,
    status_ok,
    status_successful,
    status_unprocessable_entity,
)
from httpcase.io import ReplayBuffer, json_decode, json_encode, msgpack_decode, msgpack_encode
from httpcase.runtime import CallContext, CancelToken, background
from httpcase.runtime.observability import configure_logging, get_logger, log_context
from httpcase.runtime.retry import (
    Backoff,
    BackoffFactory,
    constant_backoff,
    exponential_backoff,
    retry,
    schedule_backoff,
    stop_backoff,
    zero_backoff,
)

__all__ = [
    "__version__",
    # Client
    "Client", "Request", "Transport", "HttpxTransport", "retry_transport_errors",
    # Auth
    "AuthFn", "BasicAuth", "BearerAuth", "ApiKeyAuth", "basic_auth", "bearer_auth", "api_key_auth",
    # Status
    "StatusFn", "status_matches", "status_is", "status_in", "status_in_range", "status_not", "status_not_in",
    "status_ok", "status_created", "status_accepted", "status_no_content", "status_not_found", "status_conflict",
    "status_unprocessable_entity", "status_internal_server_error", "status_successful",
    # Errors
    "ErrorCode", "HttpError", "HttpException", "RetryableError", "new_error", "redact_url", "REDACTED",
    "is_retryable", "is_not_found", "is_exists", "Result", "Ok", "Err",
    # Retry
    "Backoff", "BackoffFactory", "retry",
    "zero_backoff", "stop_backoff", "constant_backoff", "exponential_backoff", "schedule_backoff",
    # Context
    "CallContext", "CancelToken", "background",
    # Codecs
    "ReplayBuffer", "json_encode", "json_decode", "msgpack_encode", "msgpack_decode",
    # Logging & config
    "configure_logging", "get_logger", "log_context",
    "HttpcaseSettings", "HttpSettings", "LoggingSettings", "RetrySettings", "get_settings", "clear_settings_cache",
]
