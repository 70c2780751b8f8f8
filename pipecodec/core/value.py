"""Format-neutral Value model that every codec decodes into and encodes from.

WHY: Converting between N formats pairwise needs N×M converters. Routing
every message through one intermediate tree needs only one decoder and
one encoder per format. Owning that tree (instead of borrowing one
library's native types) lets the package enforce its own invariants:
integers and floats never blur together, booleans never pass as integers,
map keys are always unique strings.

HOW: Seven frozen dataclasses form a tagged union:
  Null     — absence of a value
  Bool     — true/false
  Integer  — signed 64-bit, range-checked on construction
  Float    — IEEE-754 double
  String   — unicode text
  Array    — ordered tuple of Values
  Map      — str -> Value, insertion ordered
from_native() builds the tree from the plain Python objects a format
library returns, to_native() turns it back into plain objects for the
library that encodes.

RULES:
- Only these seven shapes ever leave a decode step
- bool is checked before int (bool is an int subclass in Python)
- Map keys must be str; duplicates collapse, last write wins
- Anything else goes through the caller's ``coerce`` hook or is rejected
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Union

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ValueModelError(ValueError):
    """Raised when native data has no Value counterpart."""


@dataclass(frozen=True)
class Null:
    """The absence of a value (JSON null, YAML ~, msgpack nil)."""


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Integer:
    """A signed 64-bit integer."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueModelError("Integer requires an int, got {}".format(
                type(self.value).__name__
            ))
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise ValueModelError(
                "Integer {} is outside the signed 64-bit range".format(self.value)
            )


@dataclass(frozen=True)
class Float:
    value: float


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Array:
    items: tuple["Value", ...] = ()


@dataclass(frozen=True)
class Map:
    """Mapping from string keys to Values.

    Equality compares entries in order-insensitive fashion (like dict),
    while iteration follows insertion order so pretty printers keep the
    source layout.
    """

    entries: dict[str, "Value"] = field(default_factory=dict)

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple[str, "Value"]]) -> "Map":
        """Build a Map from key/value pairs; a repeated key keeps its last value."""
        entries: dict[str, Value] = {}
        for key, item in pairs:
            if not isinstance(key, str):
                raise ValueModelError(
                    "Map keys must be strings, got {}".format(type(key).__name__)
                )
            entries[key] = item
        return cls(entries)

    def __hash__(self) -> int:
        return hash(frozenset(self.entries.items()))


Value = Union[Null, Bool, Integer, Float, String, Array, Map]

Coerce = Callable[[Any], Any]


def from_native(obj: Any, coerce: Optional[Coerce] = None) -> Value:
    """Convert plain Python data into a Value tree.

    WHY: Format libraries hand back dicts, lists, and scalars. This is the
    single gate where their output is checked against the Value invariants.

    HOW: Recursive type dispatch. Types outside the model are offered to
    ``coerce``, which returns a replacement native object (for example a
    datetime rendered as an ISO-8601 string) or raises ValueModelError.

    RULES:
    - None -> Null, bool -> Bool, int -> Integer, float -> Float, str -> String
    - list and tuple -> Array, dict -> Map (str keys only)
    - Unsupported types without a coerce hook raise ValueModelError

    Args:
        obj: Native object produced by a format library.
        coerce: Optional canonicalization hook for format-specific types.

    Returns:
        The equivalent Value.
    """
    if obj is None:
        return Null()
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, int):
        return Integer(obj)
    if isinstance(obj, float):
        return Float(obj)
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, (list, tuple)):
        return Array(tuple(from_native(item, coerce) for item in obj))
    if isinstance(obj, dict):
        return Map.from_pairs(
            (key, from_native(item, coerce)) for key, item in obj.items()
        )
    if coerce is not None:
        replacement = coerce(obj)
        if replacement is not obj:
            return from_native(replacement, coerce)
    raise ValueModelError("Unsupported value type: {}".format(type(obj).__name__))


def to_native(value: Value) -> Any:
    """Convert a Value tree into plain Python data for a format library."""
    if isinstance(value, Null):
        return None
    if isinstance(value, (Bool, Integer, Float, String)):
        return value.value
    if isinstance(value, Array):
        return [to_native(item) for item in value.items]
    if isinstance(value, Map):
        return {key: to_native(item) for key, item in value.entries.items()}
    raise ValueModelError("Not a Value: {!r}".format(value))


def type_name(value: Value) -> str:
    """Short lowercase variant name, used in error messages."""
    return type(value).__name__.lower()
