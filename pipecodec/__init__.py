"""pipecodec — pipe-friendly stream transcoder between serialization formats.

WHY: Tools on either side of a pipe rarely agree on a wire format. One
speaks JSON, the other size-framed MessagePack. This package converts a
byte stream message by message so the two can talk without buffering the
whole stream.

HOW: Four layers: framing (find message boundaries), the Value model
(format-neutral tree), the format registry (decode/encode per format),
and the pipeline (producer thread reads frames, consumer transcodes and
writes them in order).

RULES:
- Every codec decodes into and encodes from the same Value model
- Adding a format = one new module in formats/, one registry line
- Errors are typed and fatal; end-of-stream is never an error
"""

from pipecodec.core.framing import Framing
from pipecodec.core.pipeline import run
from pipecodec.formats import decode, encode, transcode

__version__ = "0.1.0"

__all__ = ["Framing", "decode", "encode", "run", "transcode", "__version__"]
