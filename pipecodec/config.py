"""Run configuration: environment defaults and one-shot resolution.

WHY: A run needs six decisions (two formats, two framings, display radix,
queue size) before it reads a byte. Resolving them in one pure function,
once, keeps flag parsing and environment lookups out of the pipeline and
lets every configuration mistake surface before any I/O.

HOW: python-dotenv loads the .env file on import. Module-level defaults
come from environment variables. resolve_config() takes raw option values
(as the CLI or a caller has them), applies defaults, parses delimiters and
radix names, checks for conflicts, validates formats against the registry,
and returns a frozen RunConfig.

RULES:
- PIPECODEC_FROM / PIPECODEC_TO default to json / msgpack
- PIPECODEC_QUEUE_SIZE defaults to 8 and must be >= 1; it is read by
  resolve_config(), never at import, so a bad value is reported like any
  other configuration error
- Sized and delimited framing on the same side is a ConfigurationError
- resolve_config() performs no I/O and mutates nothing
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from pipecodec.core.frames import Radix
from pipecodec.core.framing import Framing, parse_delimiter
from pipecodec.errors import ConfigurationError
from pipecodec.formats import resolve_pair

# Load .env from the working directory (where the command is run from)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(
            "{} must be an integer, got '{}'".format(name, raw)
        ) from None


DEFAULT_FROM_FORMAT = os.getenv("PIPECODEC_FROM", "json")
DEFAULT_TO_FORMAT = os.getenv("PIPECODEC_TO", "msgpack")
DEFAULT_QUEUE_SIZE = 8
DEFAULT_LOG_LEVEL = os.getenv("PIPECODEC_LOG_LEVEL", "WARNING").upper()


def default_queue_size() -> int:
    """Queue size from PIPECODEC_QUEUE_SIZE, read when a run is configured.

    Raises:
        ConfigurationError: The variable is set but not an integer.
    """
    return _env_int("PIPECODEC_QUEUE_SIZE", DEFAULT_QUEUE_SIZE)


@dataclass(frozen=True)
class RunConfig:
    """Everything a pipeline run needs besides its source and sink.

    Attributes:
        from_format: Registry id of the input format.
        to_format: Registry id of the output format.
        input_framing: How frames are found in the source.
        output_framing: How frames are marked in the sink.
        radix: Optional display transform for the output.
        queue_size: Capacity of the producer/consumer hand-off queue.
    """

    from_format: str = DEFAULT_FROM_FORMAT
    to_format: str = DEFAULT_TO_FORMAT
    input_framing: Framing = Framing()
    output_framing: Framing = Framing()
    radix: Optional[Radix] = None
    queue_size: int = DEFAULT_QUEUE_SIZE


def _resolve_framing(side: str, sized: bool, delimiter: Optional[str]) -> Framing:
    if sized and delimiter is not None:
        raise ConfigurationError(
            "Sized and delimited {} framing cannot be combined".format(side)
        )
    if delimiter is not None:
        return Framing.delimited(parse_delimiter(delimiter))
    if sized:
        return Framing.sized()
    return Framing.none()


def resolve_config(
    from_format: Optional[str] = None,
    to_format: Optional[str] = None,
    sized_input: bool = False,
    sized_output: bool = False,
    delimited_input: Optional[str] = None,
    delimited_output: Optional[str] = None,
    radix: Optional[str] = None,
    queue_size: Optional[int] = None,
) -> RunConfig:
    """Resolve raw option values into a validated RunConfig.

    WHY: The pipeline takes fully-decided configuration only. Every
    default, every parse, and every cross-option check happens here.

    HOW: Fills missing formats from the environment defaults, builds one
    Framing per side, parses the radix name, and asks the format registry
    whether the from/to pair is usable.

    RULES:
    - None means "use the default", never "disabled"
    - Delimiters use the <digits><b|d|h|o>? grammar (see parse_delimiter)
    - Format ids are normalized to lowercase registry keys

    Returns:
        A frozen RunConfig ready for pipeline.run().
    """
    source_codec, target_codec = resolve_pair(
        from_format or DEFAULT_FROM_FORMAT,
        to_format or DEFAULT_TO_FORMAT,
    )
    size = default_queue_size() if queue_size is None else queue_size
    if size < 1:
        raise ConfigurationError("Queue size must be at least 1, got {}".format(size))

    return RunConfig(
        from_format=source_codec.name,
        to_format=target_codec.name,
        input_framing=_resolve_framing("input", sized_input, delimited_input),
        output_framing=_resolve_framing("output", sized_output, delimited_output),
        radix=Radix.parse(radix) if radix is not None else None,
        queue_size=size,
    )
