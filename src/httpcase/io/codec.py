"""Body codecs: orjson (JSON) and msgpack (binary).

Encoders turn a value into a readable byte stream and advertise the content
type the executor should send by default. Decoders read a byte stream and
validate the result into a target type through a pydantic TypeAdapter, so
``json_decode(list[Item])`` yields ``Item`` instances, not dicts.

Usage:
    >>> enc = json_encode()
    >>> enc.content_type
    'application/json'
    >>> json_decode(dict[str, int])(enc({"a": 1}))
    {'a': 1}

Both codecs are core dependencies; there is no fallback to stdlib json.
"""

from __future__ import annotations

import dataclasses
import io
from typing import Any, BinaryIO, Generic, Protocol, TypeVar, runtime_checkable

import msgpack
import orjson
from pydantic import BaseModel, TypeAdapter

T = TypeVar("T")

JSON = "application/json"
MSGPACK = "application/msgpack"


@runtime_checkable
class Encoder(Protocol):
    content_type: str

    def __call__(self, value: Any) -> BinaryIO: ...


@runtime_checkable
class Decoder(Protocol[T]):
    def __call__(self, reader: BinaryIO) -> T: ...


def _to_builtin(value: Any) -> Any:
    """Fallback for types neither orjson nor msgpack serialize natively."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Type is not serializable: {type(value).__name__}")


# ═══════════════════════════════════════════════════════════════════════════════
# Encoders
# ═══════════════════════════════════════════════════════════════════════════════


class JsonEncoder:
    """orjson encoder; dataclasses, datetimes and UUIDs are native, pydantic models via model_dump."""

    __slots__ = ()
    content_type = JSON

    def __call__(self, value: Any) -> BinaryIO:
        return io.BytesIO(orjson.dumps(value, default=_to_builtin, option=orjson.OPT_UTC_Z))


class MsgpackEncoder:
    """MessagePack encoder for compact binary bodies."""

    __slots__ = ()
    content_type = MSGPACK

    def __call__(self, value: Any) -> BinaryIO:
        return io.BytesIO(msgpack.packb(value, default=_to_builtin, use_bin_type=True))


# ═══════════════════════════════════════════════════════════════════════════════
# Decoders
# ═══════════════════════════════════════════════════════════════════════════════


class JsonDecoder(Generic[T]):
    __slots__ = ("_adapter",)
    content_type = JSON

    def __init__(self, type_: type[T] | Any = Any) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def __call__(self, reader: BinaryIO) -> T:
        return self._adapter.validate_python(orjson.loads(reader.read()))


class MsgpackDecoder(Generic[T]):
    __slots__ = ("_adapter",)
    content_type = MSGPACK

    def __init__(self, type_: type[T] | Any = Any) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def __call__(self, reader: BinaryIO) -> T:
        return self._adapter.validate_python(msgpack.unpackb(reader.read(), raw=False, strict_map_key=False))


# Singletons (stateless)
_json_encoder = JsonEncoder()
_msgpack_encoder = MsgpackEncoder()


def json_encode() -> JsonEncoder:
    return _json_encoder


def msgpack_encode() -> MsgpackEncoder:
    return _msgpack_encoder


def json_decode(type_: type[T] | Any = Any) -> JsonDecoder[T]:
    """Decoder parsing JSON and validating it as ``type_``."""
    return JsonDecoder(type_)


def msgpack_decode(type_: type[T] | Any = Any) -> MsgpackDecoder[T]:
    """Decoder unpacking MessagePack and validating it as ``type_``."""
    return MsgpackDecoder(type_)
