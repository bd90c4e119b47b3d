"""HTTP layer: client factory, request executor and its collaborators."""

from .auth import (
    ApiKeyAuth,
    AuthConfig,
    AuthFn,
    BasicAuth,
    BearerAuth,
    api_key_auth,
    basic_auth,
    bearer_auth,
)
from .client import Client, join_url
from .request import NO_ENCODER, Request
from .status import (
    StatusFn,
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
from .transport import HttpxTransport, ResponseErrorFn, Transport, retry_transport_errors

__all__ = [
    # Client
    "Client", "Request", "join_url", "NO_ENCODER",
    # Auth
    "AuthFn", "AuthConfig", "BasicAuth", "BearerAuth", "ApiKeyAuth",
    "basic_auth", "bearer_auth", "api_key_auth",
    # Transport
    "Transport", "HttpxTransport", "ResponseErrorFn", "retry_transport_errors",
    # Status predicates
    "StatusFn", "status_matches",
    "status_is", "status_in", "status_in_range", "status_not", "status_not_in",
    "status_ok", "status_created", "status_accepted", "status_no_content", "status_not_found",
    "status_conflict", "status_unprocessable_entity", "status_internal_server_error", "status_successful",
]
