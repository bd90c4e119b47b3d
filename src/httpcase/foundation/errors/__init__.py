"""Failure values for httpcase.

- ErrorCode: Where in the pipeline a failure originated
- HttpError/HttpException: Classified failure and its raisable wrapper
- RetryableError: Marker raised by transports, codecs and transforms
- Result/Ok/Err: Success-or-failure value returned by every call
"""

from .errors import (
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
from .result import Err, Ok, Result

__all__ = [
    # Classified failures
    "ErrorCode", "HttpError", "HttpException", "RetryableError", "new_error",
    "REDACTED", "redact_url",
    # Capability queries
    "is_retryable", "is_not_found", "is_exists",
    # Result monad
    "Result", "Ok", "Err",
]
