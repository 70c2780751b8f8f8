"""MessagePack codec backed by the ``msgpack`` package.

RULES:
- str is packed with the str family, floats always as float64
- Integers use the smallest msgpack representation
- bin and ext payloads have no Value counterpart and fail to decode
- Trailing bytes after the first object are a decode error
"""

from __future__ import annotations

import msgpack

from pipecodec.core.value import Value, to_native
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec, native_to_value

LABEL = "MessagePack"


def _reject_ext(code, data):
    raise DecodeError("{}: extension type {} is not supported".format(LABEL, code))


def decode(data: bytes) -> Value:
    try:
        obj = msgpack.unpackb(
            data,
            raw=False,
            strict_map_key=True,
            ext_hook=_reject_ext,
        )
    except DecodeError:
        raise
    except (ValueError, TypeError, RecursionError, msgpack.UnpackException) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return native_to_value(obj, LABEL)


def encode(value: Value) -> bytes:
    try:
        return msgpack.packb(to_native(value), use_bin_type=True)
    except (ValueError, TypeError, OverflowError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc


CODEC = Codec("msgpack", LABEL, decode, encode, ("msgpack", "mp"))
