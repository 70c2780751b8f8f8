"""URL form codec (application/x-www-form-urlencoded).

WHY: Query strings and HTML form bodies are flat key/value lists of text.
Decoding always yields a Map of Strings; encoding only works for Values
that are already flat.

RULES:
- Decode: repeated keys keep the last value, blank values are kept
- Encode: top level must be a Map of scalars
- Bool -> "true"/"false", Integer/Float -> str(), Null -> empty value
- Spaces are written as "+"
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode

from pipecodec.core.value import (
    Bool,
    Float,
    Integer,
    Map,
    Null,
    String,
    Value,
    type_name,
)
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec

LABEL = "URL"


def decode(data: bytes) -> Value:
    try:
        text = data.decode("utf-8")
        pairs = parse_qsl(
            text.strip(),
            keep_blank_values=True,
            strict_parsing=True,
            errors="strict",
        )
    except (UnicodeDecodeError, ValueError) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return Map.from_pairs((key, String(item)) for key, item in pairs)


def _scalar_text(key: str, value: Value) -> str:
    if isinstance(value, Null):
        return ""
    if isinstance(value, Bool):
        return "true" if value.value else "false"
    if isinstance(value, (Integer, Float, String)):
        return str(value.value)
    raise EncodeError(
        "{}: value of '{}' must be a scalar, got {}".format(LABEL, key, type_name(value))
    )


def encode(value: Value) -> bytes:
    if not isinstance(value, Map):
        raise EncodeError(
            "{}: top level must be a map, got {}".format(LABEL, type_name(value))
        )
    pairs = [(key, _scalar_text(key, item)) for key, item in value.entries.items()]
    return urlencode(pairs).encode("ascii")


CODEC = Codec("url", LABEL, decode, encode, ("url", "urlencoded"))
