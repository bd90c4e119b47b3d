"""Request authorization decorators.

An auth function takes the fully built wire request, adds credentials and
returns it. The built-in strategies are frozen pydantic models holding their
credentials as SecretStr, so they can come from configuration and never leak
into reprs or JSON dumps:

    >>> auth = bearer_auth("tok_live_1234")
    >>> auth
    BearerAuth(auth_type='bearer', token=SecretStr('**********'))
    >>> auth(httpx.Request("GET", "https://api")).headers["Authorization"]
    'Bearer tok_live_1234'
"""

from __future__ import annotations

import base64
from typing import Annotated, Callable, Literal, Union

import httpx
from pydantic import BaseModel, ConfigDict, Discriminator, Field, SecretStr, Tag, field_serializer

AuthFn = Callable[[httpx.Request], httpx.Request]


class BearerAuth(BaseModel):
    """Bearer token authentication (OAuth2, JWT)."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")
    auth_type: Literal["bearer"] = "bearer"
    token: SecretStr = Field(..., description="Bearer token value (OAuth2/JWT)")

    def __call__(self, request: httpx.Request) -> httpx.Request:
        request.headers["Authorization"] = f"Bearer {self.token.get_secret_value()}"
        return request

    @field_serializer("token", when_used="json")
    def _mask_token(self, v: SecretStr) -> str:
        secret = v.get_secret_value()
        return f"{secret[:4]}...{secret[-4:]}" if len(secret) > 8 else "***"

    def __hash__(self) -> int:
        return hash((self.auth_type, self.token.get_secret_value()))


class BasicAuth(BaseModel):
    """HTTP Basic authentication."""

    model_config = ConfigDict(frozen=True, extra="forbid", revalidate_instances="never")
    auth_type: Literal["basic"] = "basic"
    username: str
    password: SecretStr

    def __call__(self, request: httpx.Request) -> httpx.Request:
        credentials = base64.b64encode(f"{self.username}:{self.password.get_secret_value()}".encode()).decode()
        request.headers["Authorization"] = f"Basic {credentials}"
        return request

    @field_serializer("password", when_used="json")
    def _mask_password(self, v: SecretStr) -> str:
        return "***"

    def __hash__(self) -> int:
        return hash((self.auth_type, self.username))


class ApiKeyAuth(BaseModel):
    """API key sent in a header."""

    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True, revalidate_instances="never")
    auth_type: Literal["api_key"] = "api_key"
    key: SecretStr = Field(..., description="API key value")
    header_name: Annotated[str, Field(
        default="X-API-Key",
        pattern=r"^[A-Za-z][A-Za-z0-9-]*$",
        description="HTTP header name for the key",
    )]

    def __call__(self, request: httpx.Request) -> httpx.Request:
        request.headers[self.header_name] = self.key.get_secret_value()
        return request

    @field_serializer("key", when_used="json")
    def _mask_key(self, v: SecretStr) -> str:
        secret = v.get_secret_value()
        return f"{secret[:4]}..." if len(secret) > 4 else "***"

    def __hash__(self) -> int:
        return hash((self.auth_type, self.header_name))


def _auth_discriminator(v: dict[str, object] | BaseModel) -> str:
    if isinstance(v, dict):
        return str(v.get("auth_type", ""))
    return getattr(v, "auth_type", "")


# Tagged union for loading an auth strategy from configuration
AuthConfig = Annotated[
    Union[
        Annotated[BearerAuth, Tag("bearer")],
        Annotated[BasicAuth, Tag("basic")],
        Annotated[ApiKeyAuth, Tag("api_key")],
    ],
    Discriminator(_auth_discriminator),
]


def basic_auth(username: str, password: str) -> BasicAuth:
    return BasicAuth(username=username, password=SecretStr(password))


def bearer_auth(token: str) -> BearerAuth:
    return BearerAuth(token=SecretStr(token))


def api_key_auth(key: str, header_name: str = "X-API-Key") -> ApiKeyAuth:
    return ApiKeyAuth(key=SecretStr(key), header_name=header_name)
