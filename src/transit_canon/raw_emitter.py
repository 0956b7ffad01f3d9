"""
Canonical Transit emitter with raw fragment emission.

``CanonicalEmitter`` subclasses the base ``Emitter`` and overrides
``marshal``. The base class writes every nested value through
``self.marshal`` (array items, map keys and values, tagged
representations), so the override is in effect at every depth, including
values reached while the override itself is running. Values the override
does not handle go to ``super().marshal``, which dispatches on the value
and never comes back to the same value.

Maps and sets are put in canonical order before they are written. Their
keys and elements are encoded once to get (or after getting) their sort
order, and the encoded text is then handed back to the writer as a
``RawJson`` fragment, which ``emit_raw`` copies verbatim.
"""

import io
from collections.abc import Mapping
from functools import partial
from typing import Any

from .comparators import canonical_order
from .writer import Emitter, is_stringable_key


class RawJson:
    """
    Pre-encoded, syntactically complete Transit-JSON text.

    Written verbatim; the emitter never parses or validates it.
    """

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def __repr__(self) -> str:
        return f"RawJson({self.text!r})"


def raw_json(text: str) -> RawJson:
    return RawJson(text)


class CanonicalEmitter(Emitter):
    """
    Emitter writing maps and sets in canonical order.

    One instance serves one encoding; fragments are produced by fresh
    instances so no writer state is shared between them.
    """

    def marshal(self, obj: Any, as_map_key: bool = False) -> None:
        if isinstance(obj, RawJson):
            self.emit_raw(obj)
        elif isinstance(obj, Mapping) and not as_map_key:
            self.emit_canonical_map(obj)
        elif isinstance(obj, (set, frozenset)) and not as_map_key:
            self.emit_canonical_set(obj)
        else:
            super().marshal(obj, as_map_key)

    def emit_raw(self, raw: RawJson) -> None:
        self.write_sep()
        self.out.write(raw.text)

    def encode_fragment(self, value: Any, as_map_key: bool = False) -> str:
        with io.StringIO() as buf:
            self.__class__(buf).marshal(value, as_map_key)
            return buf.getvalue()

    def emit_canonical_map(self, m: Mapping) -> None:
        stringable = all(is_stringable_key(k) for k in m)
        encode = partial(self.encode_fragment, as_map_key=stringable)
        pairs = [(RawJson(d.fragment), m[d.value]) for d in canonical_order(m, encode)]
        if stringable:
            self.emit_map(pairs)
        else:
            self.emit_cmap(pairs)

    def emit_canonical_set(self, s: set | frozenset) -> None:
        ordered = canonical_order(s, self.encode_fragment)
        self.emit_tagged("set", [RawJson(d.fragment) for d in ordered])


def encode_canonical(value: Any) -> str:
    """
    Encode a normalized value to canonically ordered Transit-JSON text.
    """
    with io.StringIO() as buf:
        CanonicalEmitter(buf).marshal_top(value)
        return buf.getvalue()


def encode_fragment(value: Any, as_map_key: bool = False) -> str:
    """
    Canonical encoding of a single value, without top-level quoting.
    """
    with io.StringIO() as buf:
        CanonicalEmitter(buf).marshal(value, as_map_key)
        return buf.getvalue()
