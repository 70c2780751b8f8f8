"""Command-line interface for the pipecodec stream transcoder.

WHY: The transcoder lives in shell pipelines: ``producer | pipecodec -t
yaml | consumer``. The CLI maps flags onto a RunConfig, opens the source
and sink, runs the pipeline, and turns any failure into one error line
and a meaningful exit status.

HOW: argparse collects the options; resolve_config() validates them all
before anything is opened. Each input file (or stdin) is run through its
own pipeline in order, all writing to the same sink. Diagnostics use the
logging module on stderr so stdout carries data only.

RULES:
- Defaults: JSON in, MessagePack out, no framing, stdin to stdout
- --sized / --delimited set both sides; the -input/-output forms set one
- Sized and delimited framing on the same side is a configuration error
- Exit codes: 0 ok, 1 decode/encode, 2 configuration, 3 I/O, 4 framing,
  130 interrupted
- Errors print exactly once: ``Error[<code>] (<kind>): <message>``
"""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import ExitStack
from typing import BinaryIO, Optional

from pipecodec import __version__
from pipecodec.config import DEFAULT_LOG_LEVEL, RunConfig, resolve_config
from pipecodec.core.pipeline import TranscodePipeline
from pipecodec.errors import ConfigurationError, TranscodeError, TranscodeIOError
from pipecodec.formats import decodable_formats, encodable_formats

logger = logging.getLogger("pipecodec")

EXIT_INTERRUPTED = 130


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else getattr(logging, DEFAULT_LOG_LEVEL, logging.WARNING)
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _report_error(error: TranscodeError) -> None:
    """Print the single user-visible error line to stderr."""
    print(
        "Error[{}] ({}): {}".format(error.exit_code, error.kind, error),
        file=sys.stderr,
        flush=True,
    )


def _config_from_args(args: argparse.Namespace) -> RunConfig:
    """Merge the combined and per-side framing flags, then resolve.

    RULES:
    - --delimited cannot be mixed with --delimited-input/--delimited-output
    - --sized cannot be mixed with any delimited option
    """
    if args.delimited is not None and (
        args.delimited_input is not None or args.delimited_output is not None
    ):
        raise ConfigurationError(
            "--delimited cannot be combined with --delimited-input or --delimited-output"
        )
    if args.sized and (
        args.delimited is not None
        or args.delimited_input is not None
        or args.delimited_output is not None
    ):
        raise ConfigurationError("--sized cannot be combined with delimited framing")

    return resolve_config(
        from_format=args.from_format,
        to_format=args.to_format,
        sized_input=args.sized or args.sized_input,
        sized_output=args.sized or args.sized_output,
        delimited_input=args.delimited if args.delimited is not None else args.delimited_input,
        delimited_output=args.delimited if args.delimited is not None else args.delimited_output,
        radix=args.radix,
        queue_size=args.queue_size,
    )


def _open_input(path: str, stack: ExitStack) -> BinaryIO:
    if path == "-":
        return sys.stdin.buffer
    try:
        return stack.enter_context(open(path, "rb"))
    except OSError as exc:
        raise TranscodeIOError("Cannot open input '{}': {}".format(path, exc)) from exc


def _open_output(path: Optional[str], stack: ExitStack) -> BinaryIO:
    if path is None or path == "-":
        return sys.stdout.buffer
    try:
        return stack.enter_context(open(path, "wb"))
    except OSError as exc:
        raise TranscodeIOError("Cannot open output '{}': {}".format(path, exc)) from exc


def transcode_files(config: RunConfig, inputs: list[str], output: Optional[str]) -> int:
    """Run one pipeline per input, in order, into a shared sink.

    Returns:
        Total number of frames written.
    """
    frames = 0
    with ExitStack() as stack:
        sink = _open_output(output, stack)
        for path in inputs or ["-"]:
            source = _open_input(path, stack)
            logger.debug(
                "Transcoding %s: %s %s -> %s %s",
                "stdin" if path == "-" else path,
                config.from_format,
                config.input_framing,
                config.to_format,
                config.output_framing,
            )
            stats = TranscodePipeline(source, sink, config).run()
            frames += stats.frames_out
    return frames


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Separate from main() so tests can inspect the parser without running
    a pipeline.
    """
    parser = argparse.ArgumentParser(
        prog="pipecodec",
        description="Transcode a stream of serialized data from one format to another, "
                    "optionally adding or removing size- or delimiter-based framing.",
    )

    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILES",
        help="Input files, read in order. Reads stdin when omitted or for '-'.",
    )

    parser.add_argument(
        "-f", "--from",
        dest="from_format",
        default=None,
        help="Input format, case insensitive. Decodable: {}. "
             "Default: JSON.".format(", ".join(decodable_formats())),
    )

    parser.add_argument(
        "-t", "--to",
        dest="to_format",
        default=None,
        help="Output format, case insensitive. Encodable: {}. "
             "Default: MessagePack.".format(", ".join(encodable_formats())),
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Write to this file instead of stdout.",
    )

    parser.add_argument(
        "-r", "--radix",
        default=None,
        metavar="RADIX",
        help="Write output bytes as space-separated numerals in this radix: "
             "bin, dec, hex, or oct (or b, d, h, o). Delimiter bytes stay raw.",
    )

    parser.add_argument(
        "-s", "--sized",
        action="store_true",
        help="Read and write a 4-byte big-endian length before each message.",
    )

    parser.add_argument(
        "--sized-input",
        action="store_true",
        help="Input messages are prefixed with a 4-byte big-endian length.",
    )

    parser.add_argument(
        "--sized-output",
        action="store_true",
        help="Prefix output messages with a 4-byte big-endian length.",
    )

    parser.add_argument(
        "-d", "--delimited",
        default=None,
        metavar="BYTE",
        help="Messages on input and output end with this byte, written with a "
             "radix suffix: b, d, h, or o (e.g. 0Ah, 10d). Hexadecimal if omitted.",
    )

    parser.add_argument(
        "--delimited-input",
        default=None,
        metavar="BYTE",
        help="Input messages end with this byte (same notation as --delimited).",
    )

    parser.add_argument(
        "--delimited-output",
        default=None,
        metavar="BYTE",
        help="Append this byte to each output message (same notation as --delimited).",
    )

    parser.add_argument(
        "--queue-size",
        type=int,
        default=None,
        help="Frames buffered between reader and writer "
             "(default: PIPECODEC_QUEUE_SIZE or 8).",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log each frame to stderr.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point for ``pipecodec`` and ``python -m pipecodec``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Returns normally on success; failures exit with the error's exit code
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = _config_from_args(args)
        transcode_files(config, args.files, args.output)
    except TranscodeError as e:
        _report_error(e)
        sys.exit(e.exit_code)
    except BrokenPipeError as e:
        _report_error(TranscodeIOError("Output closed: {}".format(e)))
        sys.exit(TranscodeIOError.exit_code)
    except KeyboardInterrupt:
        print("\nCancelled by user.", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)


if __name__ == "__main__":
    main()
