"""Unit tests for framing modes, delimiter parsing, and frame I/O.

WHY: Framing is the wire contract with the tools on either side of the
pipe. An off-by-one in the size header or a leaked delimiter byte breaks
every message that follows.

HOW: Strategies and readers run over io.BytesIO sources; writers write
into io.BytesIO sinks. Byte strings are compared exactly.

RULES:
- Sized header is a big-endian u32
- Delimiter is stripped on read, appended on write, raw under radix display
- Truncation raises the specific FramingError subclass
"""

import io

import pytest

from pipecodec.core.frames import FrameReader, FrameWriter, Radix
from pipecodec.core.framing import (
    DelimitedStrategy,
    Framing,
    FramingKind,
    SizedStrategy,
    UnframedStrategy,
    make_strategy,
    parse_delimiter,
)
from pipecodec.errors import (
    ConfigurationError,
    FramingError,
    InvalidDelimiterError,
    TranscodeIOError,
    TruncatedBodyError,
    TruncatedHeaderError,
)


class _TrickleSource:
    """Source whose read() returns at most one byte, like a slow pipe."""

    def __init__(self, data):
        self._data = io.BytesIO(data)

    def read(self, size=-1):
        if size is None or size < 0:
            return self._data.read()
        return self._data.read(min(size, 1))


class _FailingStream:
    def read(self, size=-1):
        raise OSError("device unplugged")

    def write(self, data):
        raise OSError("disk full")

    def flush(self):
        pass


# =========================================================================
# Delimiter parsing
# =========================================================================

class TestParseDelimiter:
    """parse_delimiter() resolves <digits><b|d|h|o>? to one byte."""

    @pytest.mark.parametrize("text", ["1010b", "10d", "0Ah", "012o", "0A", "a", "0aH", "12O"])
    def test_newline_spellings(self, text):
        assert parse_delimiter(text) == 0x0A

    def test_hex_is_default(self):
        assert parse_delimiter("FF") == 255
        assert parse_delimiter("10") == 16

    def test_bounds(self):
        assert parse_delimiter("0d") == 0
        assert parse_delimiter("255d") == 255

    @pytest.mark.parametrize("text", ["", "h", "256d", "100h", "12b", "9o", "zz", "-1d", "0x0A", "1 0d"])
    def test_invalid(self, text):
        with pytest.raises(InvalidDelimiterError):
            parse_delimiter(text)

    def test_invalid_delimiter_is_configuration_error(self):
        with pytest.raises(ConfigurationError):
            parse_delimiter("300d")


class TestFramingConfig:
    """Framing is immutable and validated on construction."""

    def test_constructors(self):
        assert Framing.none().kind is FramingKind.NONE
        assert Framing.sized().kind is FramingKind.SIZED
        assert Framing.delimited(10).delimiter == 10

    def test_delimited_requires_byte(self):
        with pytest.raises(InvalidDelimiterError):
            Framing(FramingKind.DELIMITED)
        with pytest.raises(InvalidDelimiterError):
            Framing.delimited(256)

    def test_delimiter_only_with_delimited(self):
        with pytest.raises(InvalidDelimiterError):
            Framing(FramingKind.SIZED, 10)

    def test_str(self):
        assert str(Framing.delimited(10)) == "delimited(0x0A)"
        assert str(Framing.sized()) == "sized"

    def test_make_strategy(self):
        assert isinstance(make_strategy(Framing.none()), UnframedStrategy)
        assert isinstance(make_strategy(Framing.sized()), SizedStrategy)
        assert isinstance(make_strategy(Framing.delimited(0)), DelimitedStrategy)


# =========================================================================
# Strategies
# =========================================================================

class TestUnframed:
    """The whole stream is one frame, read once."""

    def test_reads_everything_once(self):
        strategy = make_strategy(Framing.none())
        source = io.BytesIO(b"abc\ndef")
        assert strategy.read_frame(source) == b"abc\ndef"
        assert strategy.read_frame(source) is None

    def test_empty_stream_is_end_of_stream(self):
        strategy = make_strategy(Framing.none())
        assert strategy.read_frame(io.BytesIO(b"")) is None

    def test_write_is_verbatim(self):
        sink = io.BytesIO()
        make_strategy(Framing.none()).write_frame(sink, b"\x00payload")
        assert sink.getvalue() == b"\x00payload"


class TestSized:
    """[u32 big-endian length][payload] frames."""

    def test_reads_consecutive_frames(self):
        strategy = make_strategy(Framing.sized())
        source = io.BytesIO(b"\x00\x00\x00\x02hi\x00\x00\x00\x00\x00\x00\x00\x03abc")
        assert strategy.read_frame(source) == b"hi"
        assert strategy.read_frame(source) == b""
        assert strategy.read_frame(source) == b"abc"
        assert strategy.read_frame(source) is None

    def test_truncated_header(self):
        strategy = make_strategy(Framing.sized())
        with pytest.raises(TruncatedHeaderError) as excinfo:
            strategy.read_frame(io.BytesIO(b"\x00\x00\x01"))
        assert excinfo.value.received == 3

    def test_truncated_body(self):
        strategy = make_strategy(Framing.sized())
        with pytest.raises(TruncatedBodyError) as excinfo:
            strategy.read_frame(io.BytesIO(b"\x00\x00\x00\x0d{\"boo"))
        assert excinfo.value.expected == 13
        assert excinfo.value.received == 5
        assert isinstance(excinfo.value, FramingError)

    def test_short_reads_are_joined(self):
        strategy = make_strategy(Framing.sized())
        source = _TrickleSource(b"\x00\x00\x00\x05hello")
        assert strategy.read_frame(source) == b"hello"
        assert strategy.read_frame(source) is None

    def test_write_prefixes_length(self):
        sink = io.BytesIO()
        make_strategy(Framing.sized()).write_frame(sink, b"\x81\xa4bool\xc3")
        assert sink.getvalue() == b"\x00\x00\x00\x07\x81\xa4bool\xc3"

    @pytest.mark.parametrize("size", [0, 1, 255, 256, 70000])
    def test_round_trip(self, size):
        payload = bytes(i % 256 for i in range(size))
        sink = io.BytesIO()
        make_strategy(Framing.sized()).write_frame(sink, payload)
        sink.seek(0)
        assert make_strategy(Framing.sized()).read_frame(sink) == payload


class TestDelimited:
    """[payload][marker] frames; the last marker is optional."""

    def test_strips_marker(self):
        strategy = make_strategy(Framing.delimited(0x0A))
        source = io.BytesIO(b"one\ntwo\n")
        assert strategy.read_frame(source) == b"one"
        assert strategy.read_frame(source) == b"two"
        assert strategy.read_frame(source) is None

    def test_unterminated_final_frame(self):
        strategy = make_strategy(Framing.delimited(0x0A))
        source = io.BytesIO(b"one\ntail")
        assert strategy.read_frame(source) == b"one"
        assert strategy.read_frame(source) == b"tail"
        assert strategy.read_frame(source) is None

    def test_empty_stream(self):
        strategy = make_strategy(Framing.delimited(0x00))
        assert strategy.read_frame(io.BytesIO(b"")) is None

    def test_empty_frame_between_markers(self):
        strategy = make_strategy(Framing.delimited(0x3B))
        source = io.BytesIO(b"a;;b")
        assert [strategy.read_frame(source) for _ in range(4)] == [b"a", b"", b"b", None]

    def test_source_without_read1(self):
        strategy = make_strategy(Framing.delimited(0x7C))
        source = _TrickleSource(b"ab|cd|")
        assert strategy.read_frame(source) == b"ab"
        assert strategy.read_frame(source) == b"cd"
        assert strategy.read_frame(source) is None

    def test_marker_inside_payload_splits_frame(self):
        strategy = make_strategy(Framing.delimited(0x0A))
        source = io.BytesIO(b"\x01\x0a\x02\x0a")
        assert strategy.read_frame(source) == b"\x01"
        assert strategy.read_frame(source) == b"\x02"

    def test_write_appends_marker(self):
        sink = io.BytesIO()
        make_strategy(Framing.delimited(0x0A)).write_frame(sink, b"abc")
        assert sink.getvalue() == b"abc\n"

    def test_round_trip(self):
        payload = bytes(b for b in range(256) if b != 0xFF)
        sink = io.BytesIO()
        make_strategy(Framing.delimited(0xFF)).write_frame(sink, payload)
        sink.seek(0)
        assert make_strategy(Framing.delimited(0xFF)).read_frame(sink) == payload


# =========================================================================
# Reader / writer / radix display
# =========================================================================

class TestRadix:
    """Radix.render() formats each byte followed by a space."""

    DATA = bytes([0x81, 0xA4, 0x62, 0x6F, 0x6F, 0x6C, 0xC3])

    def test_hex(self):
        assert Radix.HEXADECIMAL.render(self.DATA) == b"81 A4 62 6F 6F 6C C3 "

    def test_hex_is_not_padded(self):
        assert Radix.HEXADECIMAL.render(b"\x00\x0a") == b"0 A "

    def test_decimal(self):
        assert Radix.DECIMAL.render(self.DATA) == b"129 164 98 111 111 108 195 "

    def test_binary(self):
        assert Radix.BINARY.render(self.DATA) == (
            b"10000001 10100100 1100010 1101111 1101111 1101100 11000011 "
        )

    def test_octal(self):
        assert Radix.OCTAL.render(self.DATA) == b"201 244 142 157 157 154 303 "

    @pytest.mark.parametrize("text,expected", [
        ("h", Radix.HEXADECIMAL), ("HEX", Radix.HEXADECIMAL), ("Hexadecimal", Radix.HEXADECIMAL),
        ("d", Radix.DECIMAL), ("dec", Radix.DECIMAL), ("b", Radix.BINARY),
        ("binary", Radix.BINARY), ("O", Radix.OCTAL), ("oct", Radix.OCTAL),
    ])
    def test_parse(self, text, expected):
        assert Radix.parse(text) is expected

    def test_parse_unknown(self):
        with pytest.raises(ConfigurationError):
            Radix.parse("base64")


class TestFrameReader:
    """FrameReader yields frames lazily and only once."""

    def test_iterates_frames(self):
        reader = FrameReader(io.BytesIO(b"a\nb\nc"), Framing.delimited(0x0A))
        assert list(reader) == [b"a", b"b", b"c"]
        assert reader.frames_read == 3
        assert reader.bytes_read == 3

    def test_exhausted_reader_yields_nothing(self):
        reader = FrameReader(io.BytesIO(b"x"), Framing.none())
        assert list(reader) == [b"x"]
        assert list(reader) == []

    def test_os_error_becomes_io_error(self):
        reader = FrameReader(_FailingStream(), Framing.none())
        with pytest.raises(TranscodeIOError):
            reader.read()

    def test_framing_error_propagates(self):
        reader = FrameReader(io.BytesIO(b"\x00"), Framing.sized())
        with pytest.raises(TruncatedHeaderError):
            list(reader)


class TestFrameWriter:
    """FrameWriter frames, renders, and flushes every message."""

    def test_flushes_each_message(self):
        class _Sink(io.BytesIO):
            flushes = 0

            def flush(self):
                self.flushes += 1
                super().flush()

        sink = _Sink()
        writer = FrameWriter(sink, Framing.sized())
        writer.write(b"a")
        writer.write(b"bc")
        assert sink.flushes == 2
        assert sink.getvalue() == b"\x00\x00\x00\x01a\x00\x00\x00\x02bc"
        assert writer.frames_written == 2

    def test_radix_renders_size_header(self):
        sink = io.BytesIO()
        FrameWriter(sink, Framing.sized(), Radix.HEXADECIMAL).write(b"\xc3")
        assert sink.getvalue() == b"0 0 0 1 C3 "

    def test_radix_keeps_delimiter_raw(self):
        sink = io.BytesIO()
        FrameWriter(sink, Framing.delimited(0x0A), Radix.HEXADECIMAL).write(b"\x81\xa4")
        assert sink.getvalue() == b"81 A4 \n"

    def test_os_error_becomes_io_error(self):
        writer = FrameWriter(_FailingStream(), Framing.none())
        with pytest.raises(TranscodeIOError):
            writer.write(b"x")
