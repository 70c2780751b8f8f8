"""Producer/consumer transcode pipeline.

WHY: Unframed input has to be read to the end before it can be decoded,
but framed input can be converted message by message as it arrives. A
reader thread that only finds frames, feeding a consumer that decodes,
encodes, and writes, lets output for message 1 appear while message 2 is
still being typed or sent, and keeps a slow sink from forcing the whole
stream into memory.

HOW: The producer thread iterates a FrameReader and puts tagged tuples on
a bounded queue.Queue:
  (_FRAME_MSG, bytes)      — one raw frame
  (_ERROR_MSG, exception)  — reading failed, run must stop
  (_DONE_MSG, None)        — end-of-stream reached
The calling thread is the consumer. It takes items in order, runs
decode -> encode through the codec registry, and hands the result to a
FrameWriter, which flushes after every message. The first error on either
side stops the run: producer errors travel through the queue as the
original exception object, consumer errors set a stop event so the
producer abandons its remaining frames.

RULES:
- Exactly one producer and one consumer; frames are never reordered
- The queue is bounded (RunConfig.queue_size, >= 1)
- The caller sees the original exception class, never a generic wrapper
- Nothing of frame K+1 is written once frame K has failed
- End-of-stream ends the run normally and is never raised
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Any, BinaryIO, Optional

from pipecodec.config import (
    DEFAULT_FROM_FORMAT,
    DEFAULT_QUEUE_SIZE,
    DEFAULT_TO_FORMAT,
    RunConfig,
)
from pipecodec.core.frames import FrameReader, FrameWriter, Radix
from pipecodec.core.framing import Framing
from pipecodec.errors import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    TranscodeError,
    TranscodeIOError,
)
from pipecodec.formats import resolve_pair

logger = logging.getLogger(__name__)

# Queue message types
_FRAME_MSG = "frame"
_ERROR_MSG = "error"
_DONE_MSG = "done"

# How often a producer blocked on a full queue checks the stop event.
_PUT_POLL_SECONDS = 0.05

_Message = tuple[str, Any]


@dataclass
class RunStats:
    """Counters for one completed run."""

    frames_in: int = 0
    frames_out: int = 0
    bytes_in: int = 0
    bytes_out: int = 0


class TranscodePipeline:
    """One run: a source, a sink, and a resolved RunConfig.

    A pipeline instance runs once. Build a new one for the next source.
    """

    def __init__(self, source: BinaryIO, sink: BinaryIO, config: RunConfig) -> None:
        if config.queue_size < 1:
            raise ConfigurationError(
                "Queue size must be at least 1, got {}".format(config.queue_size)
            )
        self.config = config
        self.source_codec, self.target_codec = resolve_pair(
            config.from_format, config.to_format
        )
        self._reader = FrameReader(source, config.input_framing)
        self._writer = FrameWriter(sink, config.output_framing, config.radix)
        self._queue: "queue.Queue[_Message]" = queue.Queue(maxsize=config.queue_size)
        self._stop_event = threading.Event()

    def _put(self, message: _Message) -> bool:
        """Block until the message is queued; False if the run was stopped."""
        while not self._stop_event.is_set():
            try:
                self._queue.put(message, timeout=_PUT_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False

    def _produce(self) -> None:
        try:
            for frame in self._reader:
                if not self._put((_FRAME_MSG, frame)):
                    logger.debug("Reader stopped after %d frame(s)", self._reader.frames_read)
                    return
        except TranscodeError as exc:
            # Re-raised by the consumer with its original type.
            logger.debug("Reader failed: %s", exc)
            self._put((_ERROR_MSG, exc))
            return
        except Exception as exc:
            logger.debug("Reader failed unexpectedly: %r", exc)
            error = TranscodeIOError("Failed to read input: {}".format(exc))
            error.__cause__ = exc
            self._put((_ERROR_MSG, error))
            return
        self._put((_DONE_MSG, None))

    def _consume(self) -> None:
        while True:
            msg_type, msg_data = self._queue.get()
            if msg_type == _DONE_MSG:
                return
            if msg_type == _ERROR_MSG:
                raise msg_data
            self._writer.write(self._transcode(msg_data))

    def _transcode(self, frame: bytes) -> bytes:
        """Decode one frame and encode it, classifying any untyped failure.

        Registered codecs are expected to raise DecodeError / EncodeError,
        but a third-party codec may leak its library's exceptions.
        """
        try:
            value = self.source_codec.decode(frame)
        except TranscodeError:
            raise
        except Exception as exc:
            raise DecodeError("{}: {}".format(self.source_codec.label, exc)) from exc
        try:
            return self.target_codec.encode(value)
        except TranscodeError:
            raise
        except Exception as exc:
            raise EncodeError("{}: {}".format(self.target_codec.label, exc)) from exc

    def run(self) -> RunStats:
        """Transcode every frame of the source into the sink.

        Returns:
            Frame and byte counters for the run.

        Raises:
            TranscodeError: The first decode, encode, framing, or I/O error.
        """
        producer = threading.Thread(
            target=self._produce,
            name="pipecodec-reader",
            daemon=True,
        )
        producer.start()
        try:
            self._consume()
        except BaseException:
            # A producer blocked on a read cannot be interrupted; being a
            # daemon thread it ends with the process.
            self._stop_event.set()
            raise
        producer.join()

        stats = RunStats(
            frames_in=self._reader.frames_read,
            frames_out=self._writer.frames_written,
            bytes_in=self._reader.bytes_read,
            bytes_out=self._writer.bytes_written,
        )
        logger.info(
            "Transcoded %d frame(s) %s -> %s (%d -> %d bytes)",
            stats.frames_out,
            self.source_codec.label,
            self.target_codec.label,
            stats.bytes_in,
            stats.bytes_out,
        )
        return stats


def run(
    source: BinaryIO,
    sink: BinaryIO,
    input_framing: Optional[Framing] = None,
    output_framing: Optional[Framing] = None,
    from_format: str = DEFAULT_FROM_FORMAT,
    to_format: str = DEFAULT_TO_FORMAT,
    display: Optional[Radix] = None,
    queue_size: int = DEFAULT_QUEUE_SIZE,
) -> RunStats:
    """Transcode a framed stream from one format to another.

    Args:
        source: Readable binary stream, read sequentially until EOF.
        sink: Writable binary stream, flushed after every message.
        input_framing: Boundary rule for the source (default: unframed).
        output_framing: Boundary rule for the sink (default: unframed).
        from_format: Registry id of the input format.
        to_format: Registry id of the output format.
        display: Optional radix rendering of the output bytes.
        queue_size: Capacity of the reader/writer hand-off queue.

    Returns:
        Counters for the completed run.
    """
    config = RunConfig(
        from_format=from_format,
        to_format=to_format,
        input_framing=input_framing or Framing.none(),
        output_framing=output_framing or Framing.none(),
        radix=display,
        queue_size=queue_size,
    )
    return TranscodePipeline(source, sink, config).run()
