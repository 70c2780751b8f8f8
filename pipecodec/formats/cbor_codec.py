"""CBOR codec (RFC 8949) backed by ``cbor2``.

RULES:
- Byte strings, semantic tags, and undefined fail to decode
- Floats are written as float64 so decoding returns the same Float
"""

from __future__ import annotations

import cbor2

from pipecodec.core.value import Value, to_native
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec, native_to_value

LABEL = "CBOR"


def decode(data: bytes) -> Value:
    try:
        obj = cbor2.loads(data)
    except (cbor2.CBORDecodeError, ValueError, EOFError, RecursionError) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return native_to_value(obj, LABEL)


def encode(value: Value) -> bytes:
    try:
        return cbor2.dumps(to_native(value))
    except (cbor2.CBOREncodeError, ValueError, TypeError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc


CODEC = Codec("cbor", LABEL, decode, encode, ("cbor",))
