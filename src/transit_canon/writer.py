"""
Transit-JSON writer.

Encodes Python values as Transit over JSON:

- Maps are arrays headed by the "^ " marker: ["^ ", k1, v1, k2, v2]
- Maps with composite keys become ["~#cmap", [k1, v1, k2, v2]]
- Sets, tuples and ratios are tagged arrays: ["~#set", [...]]
- Scalars JSON cannot express are "~"-prefixed strings ("~:kw", "~n42")
- A scalar at top level is quoted: ["~#'", 42]

Map entries and set elements are written in iteration order; this module
makes no ordering promises. Every nested value is written through
``self.marshal`` so subclasses can take over any value at any depth.

The write cache ("^0" back-references) is never used: a value always
encodes to the same text regardless of what was written before it.
"""

import base64
import io
import json
import math
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from fractions import Fraction
from typing import Any, Iterable
from uuid import UUID

from .errors import EncodingError
from .values import BigInt, Keyword, Symbol, TaggedValue


ESC = "~"
SUB = "^"
RES = "`"
TAG = "~#"
MAP_AS_ARRAY = "^ "
QUOTE = "'"

# Integers outside this range are written as "~i" strings
JSON_MAX_INT = 2**53 - 1
JSON_MIN_INT = -(2**53 - 1)

# Kinds that have a string representation and so may appear as plain map keys
STRINGABLE_TYPES = (
    type(None), bool, int, float, str, Keyword, Symbol,
    Decimal, bytes, bytearray, UUID, datetime,
)

# Leaf kinds the writer can encode (containers handled separately)
SCALAR_TYPES = STRINGABLE_TYPES + (Fraction,)


def is_stringable_key(key: Any) -> bool:
    return isinstance(key, STRINGABLE_TYPES)


def is_scalar(value: Any) -> bool:
    return isinstance(value, SCALAR_TYPES)


def _escape(text: str) -> str:
    if text and text[0] in (ESC, SUB, RES):
        return ESC + text
    return text


def _iso_utc(value: datetime) -> str:
    # Naive datetimes are taken to be UTC; microseconds are always written
    if value.tzinfo is None or value.utcoffset() is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="microseconds") + "Z"


class Emitter:
    """
    Recursive Transit-JSON emitter writing to a text stream.
    """

    def __init__(self, out: io.TextIOBase) -> None:
        self.out = out
        # One flag per open array: True until its first element is written
        self._started = [True]

    # ------------------------------------------------------------------
    # JSON layer
    # ------------------------------------------------------------------

    def write_sep(self) -> None:
        if self._started[-1]:
            self._started[-1] = False
        else:
            self.out.write(",")

    def emit_array_start(self) -> None:
        self.write_sep()
        self.out.write("[")
        self._started.append(True)

    def emit_array_end(self) -> None:
        self._started.pop()
        self.out.write("]")

    def emit_object(self, obj: Any) -> None:
        """Write a JSON scalar at the current position."""
        self.write_sep()
        if obj is None:
            self.out.write("null")
        elif isinstance(obj, bool):
            self.out.write("true" if obj else "false")
        elif isinstance(obj, int):
            self.out.write(str(int(obj)))
        elif isinstance(obj, float):
            self.out.write(repr(float(obj)))
        elif isinstance(obj, str):
            self.out.write(json.dumps(obj, ensure_ascii=False))
        else:
            raise EncodingError(
                f"Not a JSON scalar: {type(obj).__name__}",
                {"type": type(obj).__name__},
            )

    # ------------------------------------------------------------------
    # Transit layer
    # ------------------------------------------------------------------

    def emit_string(self, prefix: str, tag: str, text: str, as_map_key: bool = False) -> None:
        self.emit_object(prefix + tag + text)

    def emit_nil(self, as_map_key: bool) -> None:
        if as_map_key:
            self.emit_string(ESC, "_", "")
        else:
            self.emit_object(None)

    def emit_boolean(self, value: bool, as_map_key: bool) -> None:
        if as_map_key:
            self.emit_string(ESC, "?", "t" if value else "f")
        else:
            self.emit_object(value)

    def emit_int(self, value: int, as_map_key: bool) -> None:
        if as_map_key or not JSON_MIN_INT <= value <= JSON_MAX_INT:
            self.emit_string(ESC, "i", str(int(value)))
        else:
            self.emit_object(int(value))

    def emit_double(self, value: float, as_map_key: bool) -> None:
        if math.isnan(value):
            self.emit_string(ESC, "z", "NaN")
        elif math.isinf(value):
            self.emit_string(ESC, "z", "INF" if value > 0 else "-INF")
        elif as_map_key:
            self.emit_string(ESC, "d", repr(float(value)))
        else:
            self.emit_object(float(value))

    def emit_array(self, items: Iterable[Any]) -> None:
        self.emit_array_start()
        for item in items:
            self.marshal(item)
        self.emit_array_end()

    def emit_map(self, pairs: Iterable[tuple[Any, Any]]) -> None:
        self.emit_array_start()
        self.emit_object(MAP_AS_ARRAY)
        for key, value in pairs:
            self.marshal(key, True)
            self.marshal(value)
        self.emit_array_end()

    def emit_cmap(self, pairs: Iterable[tuple[Any, Any]]) -> None:
        flat: list[Any] = []
        for key, value in pairs:
            flat.append(key)
            flat.append(value)
        self.emit_tagged("cmap", flat)

    def emit_tagged(self, tag: str, rep: Any) -> None:
        self.emit_array_start()
        self.emit_string(TAG, tag, "")
        self.marshal(rep)
        self.emit_array_end()

    def dispatch_map(self, m: Mapping) -> None:
        pairs = list(m.items())
        if all(is_stringable_key(k) for k, _ in pairs):
            self.emit_map(pairs)
        else:
            self.emit_cmap(pairs)

    def marshal(self, obj: Any, as_map_key: bool = False) -> None:
        """Write one value. Composite values recurse through this method."""
        if obj is None:
            self.emit_nil(as_map_key)
        elif isinstance(obj, bool):
            self.emit_boolean(obj, as_map_key)
        elif isinstance(obj, BigInt):
            self.emit_string(ESC, "n", str(int(obj)), as_map_key)
        elif isinstance(obj, int):
            self.emit_int(obj, as_map_key)
        elif isinstance(obj, float):
            self.emit_double(obj, as_map_key)
        elif isinstance(obj, str):
            self.emit_string("", "", _escape(obj), as_map_key)
        elif isinstance(obj, Keyword):
            self.emit_string(ESC, ":", str(obj), as_map_key)
        elif isinstance(obj, Symbol):
            self.emit_string(ESC, "$", str(obj), as_map_key)
        elif isinstance(obj, Decimal):
            self.emit_string(ESC, "f", str(obj), as_map_key)
        elif isinstance(obj, (bytes, bytearray)):
            self.emit_string(ESC, "b", base64.b64encode(bytes(obj)).decode("ascii"), as_map_key)
        elif isinstance(obj, UUID):
            self.emit_string(ESC, "u", str(obj), as_map_key)
        elif isinstance(obj, datetime):
            self.emit_string(ESC, "t", _iso_utc(obj), as_map_key)
        elif as_map_key:
            raise EncodingError(
                f"Cannot be used as a map key: {type(obj).__name__}",
                {"type": type(obj).__name__},
            )
        elif isinstance(obj, Fraction):
            self.emit_tagged("ratio", [BigInt(obj.numerator), BigInt(obj.denominator)])
        elif isinstance(obj, TaggedValue):
            self.emit_tagged(obj.tag, obj.rep)
        elif isinstance(obj, (set, frozenset)):
            self.emit_tagged("set", list(obj))
        elif isinstance(obj, tuple):
            self.emit_tagged("list", list(obj))
        elif isinstance(obj, list):
            self.emit_array(obj)
        elif isinstance(obj, Mapping):
            self.dispatch_map(obj)
        else:
            raise EncodingError(
                f"Don't know how to encode: {type(obj).__name__}",
                {"type": type(obj).__name__},
            )

    def marshal_top(self, obj: Any) -> None:
        """Write a complete document; scalars are wrapped in a quote tag."""
        if is_stringable_key(obj):
            self.emit_tagged(QUOTE, obj)
        else:
            self.marshal(obj)


def dumps(value: Any) -> str:
    """
    Encode a value to Transit-JSON text in iteration order.
    """
    with io.StringIO() as buf:
        Emitter(buf).marshal_top(value)
        return buf.getvalue()
