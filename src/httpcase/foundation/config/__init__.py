"""Configuration management using pydantic-settings."""

from .settings import (
    HttpcaseSettings,
    HttpSettings,
    LoggingSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "HttpSettings",
    "HttpcaseSettings",
    "LoggingSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
