"""JSON codec (RFC 8259) using the standard library.

RULES:
- Decode accepts UTF-8/16/32 bytes, as json.loads does
- Encode is compact (no spaces) and keeps non-ASCII text unescaped
- NaN and Infinity are not JSON and fail to encode
"""

from __future__ import annotations

import json

from pipecodec.core.value import Value, to_native
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec, native_to_value

LABEL = "JSON"


def decode(data: bytes) -> Value:
    try:
        obj = json.loads(data)
    except (ValueError, UnicodeDecodeError, RecursionError) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return native_to_value(obj, LABEL)


def encode(value: Value) -> bytes:
    try:
        text = json.dumps(
            to_native(value),
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (ValueError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc
    return text.encode("utf-8")


CODEC = Codec("json", LABEL, decode, encode, ("json",))
