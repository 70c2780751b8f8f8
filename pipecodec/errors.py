"""Error taxonomy for transcoding runs.

WHY: Every failure is fatal to a run, but the CLI still needs to tell a
malformed message apart from a broken pipe or a bad flag so it can pick
the right exit status. One class per kind keeps that classification intact
across the producer/consumer thread boundary.

HOW: TranscodeError carries ``kind`` and ``exit_code`` as class attributes.
Subclasses only override those two. Library exceptions are chained with
``raise ... from exc`` so the original cause stays available.

RULES:
- End-of-stream is not an exception anywhere in the package
- decode/encode -> 1, configuration -> 2, io -> 3, framing -> 4
- InvalidDelimiterError is both a framing and a configuration error
"""

from __future__ import annotations


class TranscodeError(Exception):
    """Base class for every error raised by a transcoding run."""

    kind = "generic"
    exit_code = 2


class DecodeError(TranscodeError):
    """Input bytes are malformed for the declared source format."""

    kind = "decode"
    exit_code = 1


class EncodeError(TranscodeError):
    """A Value cannot be represented in the declared target format."""

    kind = "encode"
    exit_code = 1


class ConfigurationError(TranscodeError):
    """Invalid or conflicting configuration detected before any I/O."""

    kind = "configuration"
    exit_code = 2


class UnknownFormatError(ConfigurationError):
    """A format id does not match any registered codec."""

    def __init__(self, format_id: str, available: list[str]) -> None:
        super().__init__(
            "Unknown format '{}'. Available formats: {}".format(
                format_id, ", ".join(available)
            )
        )
        self.format_id = format_id


class TranscodeIOError(TranscodeError):
    """Reading the source or writing the sink failed."""

    kind = "io"
    exit_code = 3


class FramingError(TranscodeError):
    """The byte stream violates the configured framing."""

    kind = "framing"
    exit_code = 4


class TruncatedHeaderError(FramingError):
    """Stream ended inside a 4-byte size header."""

    def __init__(self, received: int) -> None:
        super().__init__(
            "Truncated size header: expected 4 bytes, got {}".format(received)
        )
        self.received = received


class TruncatedBodyError(FramingError):
    """Stream ended before the declared frame length was read."""

    def __init__(self, expected: int, received: int) -> None:
        super().__init__(
            "Truncated frame: header declared {} bytes, got {}".format(
                expected, received
            )
        )
        self.expected = expected
        self.received = received


class InvalidDelimiterError(FramingError, ConfigurationError):
    """A delimiter string does not resolve to a single byte value."""

    kind = "framing"
    exit_code = 4
