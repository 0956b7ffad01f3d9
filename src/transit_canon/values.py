"""
Value kinds that have no direct Python builtin counterpart.

- Keyword / Symbol: optionally namespaced symbolic atoms (``~:`` and ``~$``)
- BigInt: integer explicitly tagged as arbitrary precision (``~n``)
- TaggedValue: any tag the writer or reader has no dedicated type for
- WithMeta: annotation carrier; annotations never reach the wire
"""

from dataclasses import dataclass, field
from functools import total_ordering
from typing import Any, Mapping


@total_ordering
@dataclass(frozen=True)
class _Named:
    name: str
    namespace: str | None = None

    def __post_init__(self) -> None:
        # str() must parse back to an equal value
        if self.namespace is None:
            namespace, sep, name = self.name.partition("/")
            if sep and namespace and name:
                raise ValueError(
                    f"Name {self.name!r} reads as namespaced; "
                    f"pass namespace={namespace!r} instead"
                )
        elif not self.namespace or "/" in self.namespace or not self.name:
            raise ValueError(
                f"Invalid namespace/name: {self.namespace!r}/{self.name!r}"
            )

    def __str__(self) -> str:
        if self.namespace is None:
            return self.name
        return f"{self.namespace}/{self.name}"

    def __lt__(self, other: Any) -> bool:
        # Un-namespaced atoms sort first, then by namespace, then by name.
        if other.__class__ is not self.__class__:
            return NotImplemented
        return self._order() < other._order()

    def _order(self) -> tuple[bool, str, str]:
        return (self.namespace is not None, self.namespace or "", self.name)

    @classmethod
    def parse(cls, text: str):
        """Parse ``"name"`` or ``"ns/name"``. A bare ``"/"`` is a name."""
        namespace, sep, name = text.partition("/")
        if sep and namespace and name:
            return cls(name, namespace)
        return cls(text)


class Keyword(_Named):
    """Keyword-like symbolic atom, e.g. ``:status`` or ``:http/status``."""

    def __repr__(self) -> str:
        return f"Keyword({str(self)!r})"


class Symbol(_Named):
    """General symbolic atom, e.g. ``inc`` or ``clojure.core/inc``."""

    def __repr__(self) -> str:
        return f"Symbol({str(self)!r})"


def kw(text: str) -> Keyword:
    return Keyword.parse(text)


def sym(text: str) -> Symbol:
    return Symbol.parse(text)


class BigInt(int):
    """
    Integer written with the arbitrary-precision ``n`` tag.

    The tag keeps integers textually distinct from floats through JSON
    canonicalization, which would otherwise print ``1.0`` as ``1``.
    """
    __slots__ = ()

    def __repr__(self) -> str:
        return f"BigInt({int(self)})"


@dataclass(frozen=True)
class TaggedValue:
    """A value carried under an extension tag: ``["~#tag", rep]``."""
    tag: str
    rep: Any


@dataclass(frozen=True)
class WithMeta:
    """
    A value with out-of-band annotations attached.

    Annotations do not take part in equality or hashing, and the
    normalizer strips them before encoding.
    """
    value: Any
    meta: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)


def with_meta(value: Any, **meta: Any) -> WithMeta:
    return WithMeta(value, meta)
