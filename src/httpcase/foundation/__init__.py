"""Foundation - error values and configuration shared by every layer."""

from __future__ import annotations

__all__ = [
    # Errors
    "ErrorCode", "HttpError", "HttpException", "RetryableError", "new_error",
    "is_retryable", "is_not_found", "is_exists",
    "Result", "Ok", "Err",
    # Config
    "HttpcaseSettings", "get_settings", "clear_settings_cache",
    "LoggingSettings", "RetrySettings", "HttpSettings",
]


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    if name in ("HttpcaseSettings", "get_settings", "clear_settings_cache",
                "LoggingSettings", "RetrySettings", "HttpSettings"):
        from . import config
        return getattr(config, name)
    if name in __all__:
        from . import errors
        return getattr(errors, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
