"""Python pickle codec restricted to plain data.

WHY: Unpickling can import and call arbitrary objects, which turns a
data converter into a code runner. Refusing every global keeps only the
opcodes that build None, bools, numbers, strings, lists, tuples, and
dicts, which is all the Value model needs anyway.

RULES:
- Encode uses pickle protocol 3
- Any global reference in the input is a decode error
- Tuples decode as Arrays; bytes, sets, and other types are rejected
"""

from __future__ import annotations

import io
import pickle

from pipecodec.core.value import Value, to_native
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec, native_to_value

LABEL = "Pickle"
PROTOCOL = 3


class _DataOnlyUnpickler(pickle.Unpickler):
    def find_class(self, module, name):
        raise pickle.UnpicklingError(
            "global '{}.{}' is not allowed".format(module, name)
        )


def decode(data: bytes) -> Value:
    # Malformed pickles surface as many unrelated exception types.
    try:
        obj = _DataOnlyUnpickler(io.BytesIO(data)).load()
    except Exception as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    return native_to_value(obj, LABEL)


def encode(value: Value) -> bytes:
    try:
        return pickle.dumps(to_native(value), protocol=PROTOCOL)
    except (pickle.PicklingError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc


CODEC = Codec("pickle", LABEL, decode, encode, ("pickle", "pkl"))
