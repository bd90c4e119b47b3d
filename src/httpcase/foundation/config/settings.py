"""Environment-based configuration using pydantic-settings.

Every default a Client picks up when built from configuration lives here:
base URL, timeouts, auth, backoff and logging. Supports .env files and
nested configuration.

Example:
    >>> from httpcase.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.http.timeout
    30.0
    >>> settings.retry.strategy
    'stop'

    # Or with environment variables:
    # HTTPCASE_HTTP_BASE_URL=https://api.example.com
    # HTTPCASE_RETRY_STRATEGY=exponential
    # HTTPCASE_HTTP_AUTH='{"auth_type": "bearer", "token": "tok_live_1234"}'
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, NonNegativeInt, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from httpcase.http.auth import AuthConfig
from httpcase.runtime.retry.backoff import (
    BackoffFactory,
    constant_backoff,
    exponential_backoff,
    schedule_backoff,
    stop_backoff,
    zero_backoff,
)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HTTPCASE_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    def configure(self) -> None:
        """Apply to the global structured logger."""
        from httpcase.runtime.observability import configure_logging
        configure_logging(format=self.format, level=self.level)


class RetrySettings(BaseSettings):
    """Default backoff for requests built from configuration.

    ``strategy`` picks the policy; the remaining fields parameterize it.
    ``max_attempts`` of 0 leaves the policy unbounded (where it has no other
    stopping rule).
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTPCASE_RETRY_",
        extra="ignore",
    )

    strategy: Literal["stop", "zero", "constant", "exponential", "schedule"] = "stop"
    max_attempts: NonNegativeInt = 0
    interval: PositiveFloat = Field(default=1.0, description="Constant strategy wait in seconds")
    initial_delay: PositiveFloat = Field(default=0.1, description="Exponential strategy base wait in seconds")
    max_delay: PositiveFloat = Field(default=30.0, description="Exponential strategy ceiling in seconds")
    factor: Annotated[float, Field(gt=1.0)] = 2.0
    schedule: tuple[PositiveFloat, ...] = Field(default=(0.1, 0.5, 1.0), description="Schedule strategy waits")
    jitter: bool = False

    def backoff(self) -> BackoffFactory:
        """Backoff factory for the configured strategy."""
        match self.strategy:
            case "stop": return stop_backoff()
            case "zero": return zero_backoff(self.max_attempts)
            case "constant": return constant_backoff(self.interval, self.max_attempts)
            case "exponential":
                return exponential_backoff(self.initial_delay, self.max_delay, self.max_attempts, self.factor)
            case "schedule": return schedule_backoff(*self.schedule, max_calls=self.max_attempts, jitter=self.jitter)
        raise ValueError(f"Unknown retry strategy: {self.strategy}")


class HttpSettings(BaseSettings):
    """HTTP client default configuration."""

    model_config = SettingsConfigDict(
        env_prefix="HTTPCASE_HTTP_",
        extra="ignore",
    )

    base_url: str = ""
    timeout: PositiveFloat = Field(default=30.0, description="Default request timeout")
    verify_ssl: bool = True
    follow_redirects: bool = True
    user_agent: str = "httpcase/1.0"
    auth: AuthConfig | None = Field(default=None, description="Auth strategy applied to every request")


class HttpcaseSettings(BaseSettings):
    """Root settings.

    Loads configuration from environment variables with HTTPCASE_ prefix.
    Supports nested configuration and .env files.

    Example environment variables:
        HTTPCASE_LOG_LEVEL=DEBUG
        HTTPCASE_HTTP_TIMEOUT=60
        HTTPCASE_RETRY_STRATEGY=constant
        HTTPCASE_RETRY_MAX_ATTEMPTS=3
    """

    model_config = SettingsConfigDict(
        env_prefix="HTTPCASE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    http: HttpSettings = Field(default_factory=HttpSettings)


@lru_cache(maxsize=1)
def get_settings() -> HttpcaseSettings:
    """Get the global settings instance (cached)."""
    return HttpcaseSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
