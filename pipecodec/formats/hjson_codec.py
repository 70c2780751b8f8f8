"""Hjson codec: JSON in, human-readable indented JSON out.

WHY: People reading a stream by eye want one key per line, not compact
JSON. Every JSON document is valid Hjson, so indented JSON is the form
written here. It reads back with any JSON or Hjson parser.

RULES:
- Decode accepts JSON text (the JSON subset of Hjson)
- Encode indents by two spaces, keeps key order and non-ASCII text
- NaN and Infinity fail to encode
"""

from __future__ import annotations

import json

from pipecodec.core.value import Value, to_native
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec, native_to_value

LABEL = "Hjson"


def decode(data: bytes) -> Value:
    try:
        obj = json.loads(data)
    except (ValueError, UnicodeDecodeError, RecursionError) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return native_to_value(obj, LABEL)


def encode(value: Value) -> bytes:
    try:
        text = json.dumps(to_native(value), indent=2, ensure_ascii=False, allow_nan=False)
    except (ValueError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc
    return text.encode("utf-8")


CODEC = Codec("hjson", LABEL, decode, encode, ("hjson",))
