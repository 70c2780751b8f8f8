"""YAML codec backed by PyYAML's safe loader and dumper.

RULES:
- Only the first document of a stream is read; an empty document is Null
- Timestamps decode to ISO-8601 strings, !!binary fails to decode
- Output is block style with the original key order
"""

from __future__ import annotations

import yaml

from pipecodec.core.value import Value, to_native
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec, iso_datetime, native_to_value

LABEL = "YAML"


def decode(data: bytes) -> Value:
    try:
        obj = yaml.safe_load(data)
    except (yaml.YAMLError, RecursionError) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return native_to_value(obj, LABEL, iso_datetime)


def encode(value: Value) -> bytes:
    try:
        text = yaml.safe_dump(
            to_native(value),
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    except (yaml.YAMLError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc
    return text.encode("utf-8")


CODEC = Codec("yaml", LABEL, decode, encode, ("yaml", "yml"))
