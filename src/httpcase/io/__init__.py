"""Body handling: replay buffering and codecs."""

from .body import ReplayBuffer, drain
from .codec import (
    JSON,
    MSGPACK,
    Decoder,
    Encoder,
    JsonDecoder,
    JsonEncoder,
    MsgpackDecoder,
    MsgpackEncoder,
    json_decode,
    json_encode,
    msgpack_decode,
    msgpack_encode,
)

__all__ = [
    # Replay
    "ReplayBuffer", "drain",
    # Codecs
    "Encoder", "Decoder", "JSON", "MSGPACK",
    "JsonEncoder", "JsonDecoder", "MsgpackEncoder", "MsgpackDecoder",
    "json_encode", "json_decode", "msgpack_encode", "msgpack_decode",
]
