"""Framing modes and the strategies that find and re-create message boundaries.

WHY: A byte stream carries no notion of "message". Streaming tools agree
on a framing rule instead: the whole stream is one message, every message
is prefixed with its length, or every message ends with a marker byte.
Reading and writing those rules is independent of any data format, so it
lives here on its own.

HOW: Framing is an immutable description (kind + optional delimiter).
make_strategy() turns it into a stateful strategy object for one source:
  UnframedStrategy  — whole stream is one message
  SizedStrategy     — [u32 big-endian length N][N bytes]
  DelimitedStrategy — [bytes][marker], final marker optional

RULES:
- read_frame() returns bytes for a frame and None at end-of-stream
- End-of-stream is never raised; truncation is (FramingError subclasses)
- Delimiter strings are <digits><b|d|h|o>?, hexadecimal by default
- A payload that contains the marker byte is split there; no escaping
"""

from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional

from pipecodec.errors import (
    FramingError,
    InvalidDelimiterError,
    TruncatedBodyError,
    TruncatedHeaderError,
)

logger = logging.getLogger(__name__)

SIZE_HEADER = struct.Struct(">I")
MAX_FRAME_SIZE = 0xFFFFFFFF

# Bytes requested per read when scanning for a delimiter.
_CHUNK_SIZE = 64 * 1024

_RADIX_SUFFIXES = {"b": 2, "d": 10, "h": 16, "o": 8}
_DIGITS = "0123456789abcdef"

# Renders bytes for display (see frames.Radix); None writes them raw.
Display = Optional[Callable[[bytes], bytes]]


class FramingKind(str, enum.Enum):
    """How message boundaries are marked in a byte stream."""

    NONE = "none"
    SIZED = "sized"
    DELIMITED = "delimited"


@dataclass(frozen=True)
class Framing:
    """Immutable framing configuration for one side of a run.

    Attributes:
        kind: Which boundary rule applies.
        delimiter: Marker byte value (0–255), only set for DELIMITED.
    """

    kind: FramingKind = FramingKind.NONE
    delimiter: Optional[int] = None

    def __post_init__(self) -> None:
        if self.kind is FramingKind.DELIMITED:
            if self.delimiter is None or not 0 <= self.delimiter <= 255:
                raise InvalidDelimiterError(
                    "Delimiter must be a byte value 0-255, got {!r}".format(self.delimiter)
                )
        elif self.delimiter is not None:
            raise InvalidDelimiterError(
                "A delimiter is only valid with delimited framing"
            )

    @classmethod
    def none(cls) -> "Framing":
        return cls(FramingKind.NONE)

    @classmethod
    def sized(cls) -> "Framing":
        return cls(FramingKind.SIZED)

    @classmethod
    def delimited(cls, delimiter: int) -> "Framing":
        return cls(FramingKind.DELIMITED, delimiter)

    def __str__(self) -> str:
        if self.kind is FramingKind.DELIMITED:
            return "delimited(0x{:02X})".format(self.delimiter)
        return self.kind.value


def parse_delimiter(text: str) -> int:
    """Parse a delimiter byte written with an optional radix suffix.

    WHY: A newline is 1010b, 10d, 0Ah, or 012o depending on the reader's
    habits. All four spellings must resolve to the same byte.

    HOW: A trailing b/d/h/o (any case) selects the base and is stripped;
    without one the whole string is read as hexadecimal.

    RULES:
    - Empty bodies or digits outside the base raise InvalidDelimiterError
    - Values outside 0–255 raise InvalidDelimiterError
    - Signs, whitespace, and 0x-style prefixes are not accepted

    Args:
        text: Delimiter string from configuration, e.g. ``"0Ah"``.

    Returns:
        The delimiter as an int byte value.
    """
    body = text.strip()
    base = 16
    if body and body[-1].lower() in _RADIX_SUFFIXES:
        # A trailing b or d is always a suffix, never a hex digit.
        base = _RADIX_SUFFIXES[body[-1].lower()]
        body = body[:-1]
    allowed = _DIGITS[:base]
    if not body or any(ch not in allowed for ch in body.lower()):
        raise InvalidDelimiterError(
            "Invalid delimiter '{}': not a base-{} number".format(text, base)
        )
    value = int(body, base)
    if not 0 <= value <= 255:
        raise InvalidDelimiterError(
            "Invalid delimiter '{}': {} does not fit in one byte".format(text, value)
        )
    return value


def _read_exact(source: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, looping over short reads until EOF."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = source.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _write_display(sink: BinaryIO, data: bytes, display: Display) -> None:
    sink.write(display(data) if display is not None else data)


class FramingStrategy:
    """Reads frames from a source and writes framed payloads to a sink.

    Strategies hold per-source state (the unframed "already read" flag, the
    delimiter scan buffer), so each source gets a fresh instance from
    make_strategy().
    """

    def __init__(self, framing: Framing) -> None:
        self.framing = framing

    def read_frame(self, source: BinaryIO) -> Optional[bytes]:
        raise NotImplementedError

    def write_frame(self, sink: BinaryIO, payload: bytes, display: Display = None) -> None:
        raise NotImplementedError


class UnframedStrategy(FramingStrategy):
    """The entire stream is a single message."""

    def __init__(self, framing: Framing) -> None:
        super().__init__(framing)
        self._consumed = False

    def read_frame(self, source: BinaryIO) -> Optional[bytes]:
        if self._consumed:
            return None
        self._consumed = True
        data = source.read()
        return data or None

    def write_frame(self, sink: BinaryIO, payload: bytes, display: Display = None) -> None:
        _write_display(sink, payload, display)


class SizedStrategy(FramingStrategy):
    """Each message is prefixed by its length as a big-endian u32."""

    def read_frame(self, source: BinaryIO) -> Optional[bytes]:
        header = _read_exact(source, SIZE_HEADER.size)
        if not header:
            return None
        if len(header) < SIZE_HEADER.size:
            raise TruncatedHeaderError(len(header))
        (length,) = SIZE_HEADER.unpack(header)
        body = _read_exact(source, length)
        if len(body) < length:
            raise TruncatedBodyError(length, len(body))
        return body

    def write_frame(self, sink: BinaryIO, payload: bytes, display: Display = None) -> None:
        if len(payload) > MAX_FRAME_SIZE:
            raise FramingError(
                "Frame of {} bytes exceeds the 4-byte size header".format(len(payload))
            )
        _write_display(sink, SIZE_HEADER.pack(len(payload)), display)
        _write_display(sink, payload, display)


class DelimitedStrategy(FramingStrategy):
    """Each message ends with a marker byte; the last one may be unterminated.

    Bytes read past a marker are kept in ``_pending`` for the next call.
    Buffered sources are drained with ``read1`` so an interactive session
    gets each line as soon as it is typed instead of waiting on a full chunk.
    """

    def __init__(self, framing: Framing) -> None:
        super().__init__(framing)
        self._marker = bytes([framing.delimiter])
        self._pending = bytearray()
        self._eof = False

    def _fill(self, source: BinaryIO) -> None:
        read1 = getattr(source, "read1", None)
        chunk = read1(_CHUNK_SIZE) if read1 is not None else source.read(1)
        if chunk:
            self._pending.extend(chunk)
        else:
            self._eof = True

    def read_frame(self, source: BinaryIO) -> Optional[bytes]:
        scanned = 0
        while True:
            index = self._pending.find(self._marker, scanned)
            if index >= 0:
                frame = bytes(self._pending[:index])
                del self._pending[:index + 1]
                return frame
            scanned = len(self._pending)
            if self._eof:
                break
            self._fill(source)

        if not self._pending:
            return None
        # Stream ended mid-message: the tail is the final frame.
        frame = bytes(self._pending)
        self._pending.clear()
        logger.debug("Unterminated final frame of %d bytes", len(frame))
        return frame

    def write_frame(self, sink: BinaryIO, payload: bytes, display: Display = None) -> None:
        _write_display(sink, payload, display)
        # The marker stays raw even under a display transform so an
        # interactive console with a newline delimiter prompts on a new line.
        sink.write(self._marker)


_STRATEGIES = {
    FramingKind.NONE: UnframedStrategy,
    FramingKind.SIZED: SizedStrategy,
    FramingKind.DELIMITED: DelimitedStrategy,
}


def make_strategy(framing: Framing) -> FramingStrategy:
    """Create a fresh strategy instance for one source or sink."""
    return _STRATEGIES[framing.kind](framing)
