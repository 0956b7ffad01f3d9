"""
Canonical ordering of heterogeneous values.

Map keys and set elements are ordered with a decorate-sort-undecorate
pass: each element's sort key is computed once, the decorated elements
are sorted by key alone, and each element's encoded fragment is realized
at most once afterwards. A comparator that re-encoded both operands on
every comparison would cost O(n log n) encodings instead of O(n).

Ordering rules:
1. Fast path: if every element is of the same natively ordered kind
   (keyword, string, integer, symbol, non-NaN float), use native order.
2. Fallback: a string key made of a kind prefix and a textual rendering.
   Prefixes give a fixed cross-kind order:

       null (0) < keyword (1) < string (2) < integer (3) < symbol (4) < other (9)

   Keywords and symbols render as "ns/name", strings as themselves,
   integers as decimal digits. Everything else renders as its own
   canonical encoding, so nested containers order by final encoded form.
3. Equal fallback keys are broken by encoded fragment. Distinct values
   that share a fragment have no canonical order and are rejected.
   Integers of different widths with the same magnitude are the same
   value and intentionally compare equal.
"""

import logging
import math
from enum import IntEnum
from itertools import groupby
from operator import attrgetter
from typing import Any, Callable, Iterable

from .errors import EncodingError, ErrorCode
from .values import Keyword, Symbol

logger = logging.getLogger(__name__)

Encoder = Callable[[Any], str]


class Kind(IntEnum):
    """Closed set of value kinds the comparator distinguishes."""
    NULL = 0
    KEYWORD = 1
    STRING = 2
    INTEGER = 3
    SYMBOL = 4
    FLOAT = 5
    OTHER = 9


NATIVE_KINDS = frozenset({Kind.KEYWORD, Kind.STRING, Kind.INTEGER, Kind.SYMBOL, Kind.FLOAT})

_PREFIXES = {
    Kind.NULL: "0",
    Kind.KEYWORD: "1",
    Kind.STRING: "2",
    Kind.INTEGER: "3",
    Kind.SYMBOL: "4",
}
_OTHER_PREFIX = "9"


def kind_of(value: Any) -> Kind:
    if value is None:
        return Kind.NULL
    if isinstance(value, bool):
        return Kind.OTHER
    if isinstance(value, Keyword):
        return Kind.KEYWORD
    if isinstance(value, str):
        return Kind.STRING
    if isinstance(value, int):
        return Kind.INTEGER
    if isinstance(value, Symbol):
        return Kind.SYMBOL
    if isinstance(value, float) and not math.isnan(value):
        return Kind.FLOAT
    return Kind.OTHER


def sort_key(value: Any, encode: Encoder) -> str:
    """
    String sort key for ``value``.

    Args:
        value: A normalized value
        encode: Produces the canonical encoding of a value; only called
            for kinds without a cheaper rendering
    """
    kind = kind_of(value)
    if kind == Kind.NULL:
        return _PREFIXES[kind]
    if kind in (Kind.KEYWORD, Kind.SYMBOL, Kind.STRING):
        return _PREFIXES[kind] + str(value)
    if kind == Kind.INTEGER:
        return _PREFIXES[kind] + str(int(value))
    return _OTHER_PREFIX + encode(value)


def compare(a: Any, b: Any, encode: Encoder) -> int:
    """
    Total order over two normalized values: -1, 0 or 1.
    """
    kind = kind_of(a)
    if kind in NATIVE_KINDS and kind_of(b) == kind:
        return (a > b) - (a < b)
    ka, kb = sort_key(a, encode), sort_key(b, encode)
    if ka == kb:
        ka, kb = encode(a), encode(b)
    return (ka > kb) - (ka < kb)


class Decorated:
    """
    An element paired with its sort key for the length of one sort.

    The encoded fragment is computed on first use and cached; when the
    sort key already required it, emission reuses that same text.
    """

    __slots__ = ("value", "key", "_encode", "_fragment")

    def __init__(self, value: Any, encode: Encoder) -> None:
        self.value = value
        self.key: str | None = None
        self._encode = encode
        self._fragment: str | None = None

    @property
    def fragment(self) -> str:
        if self._fragment is None:
            self._fragment = self._encode(self.value)
        return self._fragment

    def _encoded(self, _value: Any) -> str:
        return self.fragment

    def decorate(self) -> "Decorated":
        self.key = sort_key(self.value, self._encoded)
        return self

    def __repr__(self) -> str:
        return f"Decorated({self.value!r}, key={self.key!r})"


def _common_native_kind(values: list[Any]) -> Kind | None:
    kinds = {kind_of(v) for v in values}
    if len(kinds) == 1:
        (kind,) = kinds
        if kind in NATIVE_KINDS:
            return kind
    return None


def _break_ties(decorated: list[Decorated]) -> list[Decorated]:
    """
    Order runs of equal sort keys by fragment.

    Map keys and set elements are distinct by construction, so two of
    them sharing a fragment would be written identically and come out in
    iteration order.

    Raises:
        EncodingError: If two elements of a run encode to the same text
    """
    ordered: list[Decorated] = []
    for _, run in groupby(decorated, key=attrgetter("key")):
        group = list(run)
        if len(group) > 1:
            group.sort(key=attrgetter("fragment"))
            for left, right in zip(group, group[1:]):
                if left.fragment == right.fragment:
                    raise EncodingError(
                        "Distinct elements share a canonical encoding",
                        {"fragment": left.fragment},
                        code=ErrorCode.DUPLICATE_KEY,
                    )
        ordered.extend(group)
    return ordered


def canonical_order(values: Iterable[Any], encode: Encoder) -> list[Decorated]:
    """
    Put elements into canonical order.

    Returns decorated elements; read ``.value`` for the element or
    ``.fragment`` for its encoding (realized lazily, at most once).
    """
    items = [Decorated(v, encode) for v in values]
    if len(items) < 2:
        return items

    if _common_native_kind([d.value for d in items]) is not None:
        try:
            return sorted(items, key=attrgetter("value"))
        except TypeError:
            logger.debug("native ordering failed, using string sort keys")

    for d in items:
        d.decorate()
    items.sort(key=attrgetter("key"))
    return _break_ties(items)
