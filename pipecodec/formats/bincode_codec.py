"""Bincode-style binary codec for the Value model.

WHY: Bincode is not self-describing: a reader must already know the Rust
type it is decoding into. To carry arbitrary Values it is applied to the
Value enum itself, the same way a serde enum is laid out by bincode 1.x,
which also keeps the Integer/Float distinction on the wire.

HOW: Every Value starts with its variant index as a u32 little-endian,
followed by the variant's payload:

  0 Null     —
  1 Bool     — 1 byte, 0 or 1
  2 Integer  — i64 little-endian
  3 Float    — f64 little-endian
  4 String   — u64 little-endian byte length + UTF-8 bytes
  5 Array    — u64 little-endian item count + items
  6 Map      — u64 little-endian entry count + (key string, value) pairs

RULES:
- Map keys are written as bare strings (length + bytes, no variant tag)
- Bool bytes other than 0/1, unknown tags, bad UTF-8, and trailing bytes
  are decode errors
"""

from __future__ import annotations

import struct

from pipecodec.core.value import (
    Array,
    Bool,
    Float,
    Integer,
    Map,
    Null,
    String,
    Value,
    ValueModelError,
)
from pipecodec.errors import DecodeError, EncodeError
from pipecodec.formats.base import Codec

LABEL = "Bincode"

_TAG = struct.Struct("<I")
_LEN = struct.Struct("<Q")
_I64 = struct.Struct("<q")
_F64 = struct.Struct("<d")

TAG_NULL, TAG_BOOL, TAG_INTEGER, TAG_FLOAT, TAG_STRING, TAG_ARRAY, TAG_MAP = range(7)

# Nesting beyond this is treated as malformed input.
MAX_DEPTH = 512


def _encode_str(text: str, out: list[bytes]) -> None:
    raw = text.encode("utf-8")
    out.append(_LEN.pack(len(raw)))
    out.append(raw)


def _encode_value(value: Value, out: list[bytes]) -> None:
    if isinstance(value, Null):
        out.append(_TAG.pack(TAG_NULL))
    elif isinstance(value, Bool):
        out.append(_TAG.pack(TAG_BOOL))
        out.append(b"\x01" if value.value else b"\x00")
    elif isinstance(value, Integer):
        out.append(_TAG.pack(TAG_INTEGER))
        out.append(_I64.pack(value.value))
    elif isinstance(value, Float):
        out.append(_TAG.pack(TAG_FLOAT))
        out.append(_F64.pack(value.value))
    elif isinstance(value, String):
        out.append(_TAG.pack(TAG_STRING))
        _encode_str(value.value, out)
    elif isinstance(value, Array):
        out.append(_TAG.pack(TAG_ARRAY))
        out.append(_LEN.pack(len(value.items)))
        for item in value.items:
            _encode_value(item, out)
    elif isinstance(value, Map):
        out.append(_TAG.pack(TAG_MAP))
        out.append(_LEN.pack(len(value.entries)))
        for key, item in value.entries.items():
            _encode_str(key, out)
            _encode_value(item, out)
    else:
        raise EncodeError("{}: not a Value: {!r}".format(LABEL, value))


def encode(value: Value) -> bytes:
    out: list[bytes] = []
    try:
        _encode_value(value, out)
    except (struct.error, UnicodeEncodeError, RecursionError) as exc:
        raise EncodeError("{}: {}".format(LABEL, exc)) from exc
    return b"".join(out)


class _Reader:
    """Cursor over a bincode buffer."""

    def __init__(self, data: bytes) -> None:
        self.data = data
        self.offset = 0

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise DecodeError(
                "{}: unexpected end of data at offset {} (needed {} bytes)".format(
                    LABEL, self.offset, size
                )
            )
        chunk = self.data[self.offset:end]
        self.offset = end
        return chunk

    def unpack(self, fmt: struct.Struct) -> tuple:
        return fmt.unpack(self.take(fmt.size))

    def length(self) -> int:
        (size,) = self.unpack(_LEN)
        # Every element needs at least one byte, so a larger count is corrupt.
        if size > len(self.data) - self.offset:
            raise DecodeError("{}: length {} exceeds remaining input".format(LABEL, size))
        return size

    def string(self) -> str:
        raw = self.take(self.length())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("{}: invalid UTF-8 string: {}".format(LABEL, exc)) from exc


def _decode_value(reader: _Reader, depth: int) -> Value:
    if depth > MAX_DEPTH:
        raise DecodeError("{}: nesting deeper than {}".format(LABEL, MAX_DEPTH))
    (tag,) = reader.unpack(_TAG)
    if tag == TAG_NULL:
        return Null()
    if tag == TAG_BOOL:
        flag = reader.take(1)[0]
        if flag > 1:
            raise DecodeError("{}: invalid bool byte {}".format(LABEL, flag))
        return Bool(flag == 1)
    if tag == TAG_INTEGER:
        return Integer(reader.unpack(_I64)[0])
    if tag == TAG_FLOAT:
        return Float(reader.unpack(_F64)[0])
    if tag == TAG_STRING:
        return String(reader.string())
    if tag == TAG_ARRAY:
        count = reader.length()
        return Array(tuple(_decode_value(reader, depth + 1) for _ in range(count)))
    if tag == TAG_MAP:
        count = reader.length()
        pairs = []
        for _ in range(count):
            key = reader.string()
            pairs.append((key, _decode_value(reader, depth + 1)))
        return Map.from_pairs(pairs)
    raise DecodeError("{}: unknown variant tag {}".format(LABEL, tag))


def decode(data: bytes) -> Value:
    reader = _Reader(data)
    try:
        value = _decode_value(reader, 0)
    except (ValueModelError, RecursionError) as exc:
        raise DecodeError("{}: {}".format(LABEL, exc)) from exc
    if reader.offset != len(data):
        raise DecodeError(
            "{}: {} trailing bytes after value".format(LABEL, len(data) - reader.offset)
        )
    return value


CODEC = Codec("bincode", LABEL, decode, encode, ("bincode", "bin"))
