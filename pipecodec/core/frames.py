"""Frame reader, frame writer, and the radix display transform.

WHY: The pipeline should not care how boundaries are found or how bytes
reach the sink. FrameReader hides framing behind plain iteration;
FrameWriter hides header/marker placement, display rendering, and the
per-message flush that keeps downstream tools in step.

HOW: FrameReader wraps a framing strategy and yields frames until the
strategy reports end-of-stream. FrameWriter asks its strategy to write one
framed payload and flushes. OSError from the underlying stream is wrapped
in TranscodeIOError so the error kind survives the thread hand-off.

RULES:
- Frames are yielded lazily, in stream order, once
- Every written message is flushed before write() returns
- Radix rendering covers payload and size header, never the delimiter
"""

from __future__ import annotations

import enum
import logging
from typing import BinaryIO, Iterator, Optional

from pipecodec.core.framing import Framing, make_strategy
from pipecodec.errors import ConfigurationError, TranscodeIOError

logger = logging.getLogger(__name__)


class Radix(str, enum.Enum):
    """Numeral base used to display encoded bytes for humans.

    Rendering writes each byte as a numeral followed by one space, e.g.
    ``b"\\x81\\xa4"`` in hexadecimal becomes ``b"81 A4 "``. Hexadecimal is
    uppercase and no numeral is zero-padded.
    """

    BINARY = "b"
    DECIMAL = "d"
    HEXADECIMAL = "X"
    OCTAL = "o"

    @classmethod
    def parse(cls, text: str) -> "Radix":
        """Accept b/bin/binary, d/dec/decimal, h/hex/hexadecimal, o/oct/octal."""
        key = text.strip().lower()
        for radix, names in _RADIX_NAMES.items():
            if key in names:
                return radix
        raise ConfigurationError(
            "Unknown radix '{}'. Use bin, dec, hex, or oct".format(text)
        )

    def render(self, data: bytes) -> bytes:
        spec = self.value
        return "".join(format(byte, spec) + " " for byte in data).encode("ascii")


_RADIX_NAMES = {
    Radix.BINARY: ("b", "bin", "binary"),
    Radix.DECIMAL: ("d", "dec", "decimal"),
    Radix.HEXADECIMAL: ("h", "hex", "hexadecimal"),
    Radix.OCTAL: ("o", "oct", "octal"),
}


class FrameReader:
    """Lazy sequence of raw frames read from one source.

    Iterating a second time continues where the first stopped, which after
    end-of-stream means yielding nothing; a fresh reader over a fresh source
    is the only way to start over.
    """

    def __init__(self, source: BinaryIO, framing: Framing) -> None:
        self.source = source
        self.framing = framing
        self._strategy = make_strategy(framing)
        self._done = False
        self.frames_read = 0
        self.bytes_read = 0

    def read(self) -> Optional[bytes]:
        """Return the next frame, or None once the stream is exhausted."""
        if self._done:
            return None
        try:
            frame = self._strategy.read_frame(self.source)
        except (OSError, ValueError) as exc:
            # ValueError is what a closed file object raises on read.
            self._done = True
            raise TranscodeIOError("Failed to read input: {}".format(exc)) from exc
        except Exception:
            self._done = True
            raise
        if frame is None:
            self._done = True
            logger.debug("End of stream after %d frame(s)", self.frames_read)
            return None
        self.frames_read += 1
        self.bytes_read += len(frame)
        logger.debug("Read frame %d (%d bytes)", self.frames_read, len(frame))
        return frame

    def __iter__(self) -> Iterator[bytes]:
        while True:
            frame = self.read()
            if frame is None:
                return
            yield frame


class FrameWriter:
    """Writes framed messages to a sink, flushing after each one."""

    def __init__(
        self,
        sink: BinaryIO,
        framing: Framing,
        display: Optional[Radix] = None,
    ) -> None:
        self.sink = sink
        self.framing = framing
        self.display = display
        self._strategy = make_strategy(framing)
        self.frames_written = 0
        self.bytes_written = 0

    def write(self, payload: bytes) -> None:
        render = self.display.render if self.display is not None else None
        try:
            self._strategy.write_frame(self.sink, payload, render)
            self.sink.flush()
        except (OSError, ValueError, TypeError) as exc:
            # ValueError: closed sink; TypeError: sink opened in text mode.
            raise TranscodeIOError("Failed to write output: {}".format(exc)) from exc
        self.frames_written += 1
        self.bytes_written += len(payload)
        logger.debug("Wrote frame %d (%d bytes)", self.frames_written, len(payload))
