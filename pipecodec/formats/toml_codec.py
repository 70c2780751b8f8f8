"""TOML codec: tomllib (tomli before 3.11) to read, tomli-w to write.

WHY: TOML is a configuration format, not a general data format. It has
no null and its documents are always tables, so several Values that JSON
carries happily cannot be written as TOML.

HOW: Encoding checks the Value tree first and raises EncodeError with a
precise reason instead of letting the library drop or mangle entries.
Decoding turns TOML date/time values into ISO-8601 strings.

RULES:
- Top level must be a Map
- Null anywhere in the tree is an EncodeError
- Offset date-times, local date-times, dates, and times decode as strings
- Arrays may mix types (TOML 1.0); tables inside arrays are written inline
"""

from __future__ import annotations

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore

import tomli_w

from pipecodec.core.value import Array, Map, Null, Value, to_native, type_name
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec, iso_datetime, native_to_value

LABEL = "TOML"


def decode(data: bytes) -> Value:
    try:
        obj = tomllib.loads(data.decode("utf-8"))
    except UnicodeDecodeError as exc:
        raise DecodeError("{}: input is not UTF-8: {}".format(LABEL, exc)) from exc
    except (tomllib.TOMLDecodeError, RecursionError) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return native_to_value(obj, LABEL, iso_datetime)


def _check_no_null(value: Value, path: str) -> None:
    if isinstance(value, Null):
        raise EncodeError("{}: null at '{}' has no TOML representation".format(LABEL, path))
    if isinstance(value, Array):
        for index, item in enumerate(value.items):
            _check_no_null(item, "{}[{}]".format(path, index))
    elif isinstance(value, Map):
        for key, item in value.entries.items():
            _check_no_null(item, "{}.{}".format(path, key) if path else key)


def encode(value: Value) -> bytes:
    if not isinstance(value, Map):
        raise EncodeError(
            "{}: top level must be a map, got {}".format(LABEL, type_name(value))
        )
    try:
        _check_no_null(value, "")
        return tomli_w.dumps(to_native(value)).encode("utf-8")
    except (TypeError, ValueError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc


CODEC = Codec("toml", LABEL, decode, encode, ("toml",))
