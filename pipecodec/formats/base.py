"""Codec capability record shared by every format module.

WHY: Not every format works in both directions. A format that can only be
read (or only written) must still be registrable without a placeholder
function that fails at run time. Describing a codec as a record of
optional capabilities makes that asymmetry a plain data question that can
be checked before any byte is read.

HOW: Codec is a frozen dataclass holding the format id, a display label,
and optional ``decode`` / ``encode`` callables working on the Value model.
``can_decode`` / ``can_encode`` report which directions exist.

RULES:
- ``name`` is the lowercase registry key, e.g. ``"msgpack"``
- decode(bytes) -> Value raises DecodeError on malformed input
- encode(Value) -> bytes raises EncodeError on unrepresentable values
- Missing directions are None, never a stub that raises
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from pipecodec.core.value import Value, ValueModelError, from_native
from pipecodec.errors import DecodeError

Decoder = Callable[[bytes], Value]
Encoder = Callable[[Value], bytes]


@dataclass(frozen=True)
class Codec:
    """One serialization format and the directions it supports.

    Attributes:
        name: Registry key, lowercase.
        label: Human-readable name used in messages, e.g. ``"MessagePack"``.
        decode: Bytes -> Value, or None if the format cannot be read.
        encode: Value -> bytes, or None if the format cannot be written.
        extensions: Conventional file extensions, without the dot.
    """

    name: str
    label: str
    decode: Optional[Decoder] = None
    encode: Optional[Encoder] = None
    extensions: tuple[str, ...] = ()

    @property
    def can_decode(self) -> bool:
        return self.decode is not None

    @property
    def can_encode(self) -> bool:
        return self.encode is not None


def native_to_value(obj, label: str, coerce=None) -> Value:
    """Run from_native() and report model violations as a DecodeError."""
    try:
        return from_native(obj, coerce)
    except (ValueModelError, RecursionError) as exc:
        raise DecodeError("{}: {}".format(label, exc)) from exc


def iso_datetime(obj):
    """Coerce hook rendering date/time objects as ISO-8601 strings.

    Returns ``obj`` unchanged for anything without ``isoformat``, which
    from_native() treats as "not handled".
    """
    isoformat = getattr(obj, "isoformat", None)
    if isoformat is None:
        return obj
    return isoformat()
