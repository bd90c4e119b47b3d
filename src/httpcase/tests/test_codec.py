"""Tests for body codecs."""

from __future__ import annotations

import io
from dataclasses import dataclass

import msgpack
import orjson
import pytest
from pydantic import BaseModel, ValidationError

from httpcase.io.codec import Decoder, Encoder, json_decode, json_encode, msgpack_decode, msgpack_encode


class Item(BaseModel):
    name: str
    qty: int = 1


@dataclass
class Point:
    x: int
    y: int


def test_content_types() -> None:
    assert json_encode().content_type == "application/json"
    assert msgpack_encode().content_type == "application/msgpack"
    assert isinstance(json_encode(), Encoder)
    assert isinstance(json_decode(), Decoder)


def test_json_encode_models_and_dataclasses() -> None:
    encoded = json_encode()({"item": Item(name="bolt"), "at": Point(1, 2)}).read()
    assert orjson.loads(encoded) == {"item": {"name": "bolt", "qty": 1}, "at": {"x": 1, "y": 2}}


def test_json_encode_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        json_encode()({"bad": object()})


def test_json_decode_validates_into_type() -> None:
    items = json_decode(list[Item])(io.BytesIO(b'[{"name": "nut", "qty": 4}]'))
    assert items == [Item(name="nut", qty=4)]


def test_json_decode_any_is_plain_data() -> None:
    assert json_decode()(io.BytesIO(b'{"a": [1, 2]}')) == {"a": [1, 2]}


def test_json_decode_failures() -> None:
    with pytest.raises(orjson.JSONDecodeError):
        json_decode()(io.BytesIO(b"not json"))
    with pytest.raises(ValidationError):
        json_decode(Item)(io.BytesIO(b'{"qty": 2}'))


def test_msgpack_dataclass() -> None:
    encoded = msgpack_encode()(Point(3, 4)).read()
    assert msgpack.unpackb(encoded) == {"x": 3, "y": 4}
    assert msgpack_decode(Point)(io.BytesIO(encoded)) == Point(3, 4)


def test_msgpack_pydantic_model() -> None:
    encoded = msgpack_encode()(Item(name="gear", qty=2)).read()
    assert msgpack_decode(Item)(io.BytesIO(encoded)) == Item(name="gear", qty=2)
