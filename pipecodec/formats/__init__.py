"""Format codec registry — pluggable decode/encode hub.

WHY: The pipeline, the CLI, and library callers all need a single lookup
from a format id to the code that reads or writes it. A central dict
makes adding a format trivial: write the codec module, import it here,
add one line.

HOW: FORMATS maps lowercase ids to Codec records. decode(), encode(), and
transcode() dispatch through it. resolve_pair() validates a from/to pair
up front so an unusable combination fails before any I/O.

RULES:
- Ids are lowercase; lookups are case-insensitive
- A codec without decode (or encode) is valid, just not for that side
- Unknown ids raise UnknownFormatError, a ConfigurationError
"""

from __future__ import annotations

from pipecodec.core.value import Value
from pipecodec.errors import ConfigurationError, UnknownFormatError
from pipecodec.formats import (
    bincode_codec,
    cbor_codec,
    hjson_codec,
    json_codec,
    msgpack_codec,
    pickle_codec,
    toml_codec,
    url_codec,
    yaml_codec,
)
from pipecodec.formats.base import Codec

FORMATS: dict[str, Codec] = {
    "bincode": bincode_codec.CODEC,
    "cbor": cbor_codec.CODEC,
    "hjson": hjson_codec.CODEC,
    "json": json_codec.CODEC,
    "msgpack": msgpack_codec.CODEC,
    "pickle": pickle_codec.CODEC,
    "toml": toml_codec.CODEC,
    "url": url_codec.CODEC,
    "yaml": yaml_codec.CODEC,
}


def register(codec: Codec) -> None:
    """Add a codec to the registry, replacing any codec with the same name."""
    FORMATS[codec.name.lower()] = codec


def decodable_formats() -> list[str]:
    return sorted(name for name, codec in FORMATS.items() if codec.can_decode)


def encodable_formats() -> list[str]:
    return sorted(name for name, codec in FORMATS.items() if codec.can_encode)


def get_codec(format_id: str) -> Codec:
    """Look up a codec by id, ignoring case."""
    codec = FORMATS.get(format_id.strip().lower())
    if codec is None:
        raise UnknownFormatError(format_id, sorted(FORMATS))
    return codec


def resolve_pair(from_format: str, to_format: str) -> tuple[Codec, Codec]:
    """Validate a from/to pair and return both codecs.

    WHY: A run must not read a single byte if its input cannot be decoded
    or its output cannot be encoded.

    RULES:
    - The from codec must support decode, the to codec must support encode
    - Violations raise ConfigurationError naming the usable formats
    """
    source = get_codec(from_format)
    target = get_codec(to_format)
    if not source.can_decode:
        raise ConfigurationError(
            "{} cannot be used as an input format. Decodable formats: {}".format(
                source.label, ", ".join(decodable_formats())
            )
        )
    if not target.can_encode:
        raise ConfigurationError(
            "{} cannot be used as an output format. Encodable formats: {}".format(
                target.label, ", ".join(encodable_formats())
            )
        )
    return source, target


def decode(data: bytes, format_id: str) -> Value:
    source = get_codec(format_id)
    if not source.can_decode:
        raise ConfigurationError("{} does not support decoding".format(source.label))
    return source.decode(data)


def encode(value: Value, format_id: str) -> bytes:
    target = get_codec(format_id)
    if not target.can_encode:
        raise ConfigurationError("{} does not support encoding".format(target.label))
    return target.encode(value)


def transcode(data: bytes, from_format: str, to_format: str) -> bytes:
    """Decode ``data`` as one format and encode it as another."""
    source, target = resolve_pair(from_format, to_format)
    return target.encode(source.decode(data))
