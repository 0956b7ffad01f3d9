"""
Value normalization ahead of canonical encoding.

Transformations:
- WithMeta annotations are stripped at every depth
- Every integral scalar, whatever its width or library of origin, becomes
  a BigInt so it keeps its "~n" tag through JSON canonicalization
  (which would otherwise print the float 1.0 and the integer 1 alike)
- Reals that are not Python floats (numpy float32 and friends) are
  widened to float, and -0.0 becomes 0.0; Decimal and Fraction pass through
- Datetimes are converted to UTC; naive datetimes are taken to be UTC
- Containers are rebuilt: lists, tuples, frozensets, dicts

Input values are never mutated.
"""

import numbers
import operator
from collections.abc import Mapping
from datetime import datetime, timezone
from decimal import Decimal
from fractions import Fraction
from typing import Any

from .errors import (
    CanonicalityIssue,
    CanonicalityResult,
    CyclicReferenceError,
    EncodingError,
    ErrorCode,
    TransitCanonError,
)
from .raw_emitter import encode_fragment
from .values import BigInt, Keyword, Symbol, TaggedValue, WithMeta
from .writer import is_scalar, is_stringable_key

_CONTAINER_TYPES = (list, tuple, set, frozenset, Mapping, TaggedValue)


def normalize_number(n: Any) -> Any:
    """
    Rewrite a numeric scalar into the form the writer tags unambiguously.
    """
    if isinstance(n, (bool, BigInt)):
        return n
    if isinstance(n, numbers.Integral):
        return BigInt(operator.index(n))
    if isinstance(n, (Decimal, Fraction)):
        return n
    if isinstance(n, numbers.Real):
        n = float(n)
        # -0.0 equals 0.0, so both encode as 0.0
        return n if n else 0.0
    return n


def normalize_datetime(dt: datetime) -> datetime:
    """Same instant as an aware UTC datetime."""
    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def normalize(value: Any) -> Any:
    """
    Recursively normalize a value for canonical serialization.

    Raises:
        CyclicReferenceError: If a container contains itself
        EncodingError: If two map keys become equal once normalized
    """
    return _normalize(value, set())


def _normalize(x: Any, path: set[int]) -> Any:
    while isinstance(x, WithMeta):
        x = x.value

    if x is None or isinstance(x, (str, Keyword, Symbol)):
        return x
    if isinstance(x, (numbers.Number, Decimal)):
        return normalize_number(x)
    if isinstance(x, datetime):
        return normalize_datetime(x)
    if not isinstance(x, _CONTAINER_TYPES):
        return x

    ident = id(x)
    if ident in path:
        raise CyclicReferenceError(
            "Circular reference detected",
            {"type": type(x).__name__},
        )
    path.add(ident)
    try:
        if isinstance(x, Mapping):
            result = {}
            for k, v in x.items():
                nk = _normalize(k, path)
                if nk in result:
                    raise EncodingError(
                        "Duplicate map key after normalization",
                        {"key": repr(nk)},
                        code=ErrorCode.DUPLICATE_KEY,
                    )
                result[nk] = _normalize(v, path)
            return result
        if isinstance(x, TaggedValue):
            return TaggedValue(x.tag, _normalize(x.rep, path))
        if isinstance(x, (set, frozenset)):
            return frozenset(_normalize(e, path) for e in x)
        if isinstance(x, tuple):
            return tuple(_normalize(e, path) for e in x)
        return [_normalize(e, path) for e in x]
    finally:
        path.discard(ident)


def _is_encodable_leaf(x: Any) -> bool:
    return is_scalar(x) or isinstance(x, numbers.Real)


def canonicality_report(value: Any) -> CanonicalityResult:
    """
    Walk a value and collect every reason it cannot be canonicalized.

    Detects:
    - containers that reappear on their own ancestor path (cycles);
      shared, acyclic sub-structures are fine
    - leaf kinds the writer cannot encode, which would leave the
      enclosing map or set without a well-defined order
    - map keys that collide once normalized
    - distinct map keys or set elements that encode to the same text

    Never raises.
    """
    issues: list[CanonicalityIssue] = []
    _walk(value, set(), "$", issues)
    return CanonicalityResult(valid=len(issues) == 0, issues=issues)


def _walk(x: Any, path: set[int], where: str, issues: list[CanonicalityIssue]) -> None:
    while isinstance(x, WithMeta):
        x = x.value

    if not isinstance(x, _CONTAINER_TYPES):
        if not _is_encodable_leaf(x):
            issues.append(CanonicalityIssue(
                code=ErrorCode.UNSUPPORTED_TYPE,
                message=f"Unsupported value type: {type(x).__name__}",
                details={"path": where, "type": type(x).__name__},
            ))
        return

    ident = id(x)
    if ident in path:
        issues.append(CanonicalityIssue(
            code=ErrorCode.CYCLIC_REFERENCE,
            message="Circular reference detected",
            details={"path": where, "type": type(x).__name__},
        ))
        return

    path.add(ident)
    try:
        if isinstance(x, Mapping):
            seen: set[Any] = set()
            keys: list[Any] = []
            for i, (k, v) in enumerate(x.items()):
                _walk(k, path, f"{where}<key {i}>", issues)
                _walk(v, path, f"{where}[{k!r}]", issues)
                try:
                    nk = normalize(k)
                except (CyclicReferenceError, EncodingError):
                    continue
                if nk in seen:
                    issues.append(CanonicalityIssue(
                        code=ErrorCode.DUPLICATE_KEY,
                        message="Duplicate map key after normalization",
                        details={"path": where, "key": repr(nk)},
                    ))
                    continue
                seen.add(nk)
                keys.append(nk)
            _check_encodings(keys, all(is_stringable_key(k) for k in keys), where, issues)
        elif isinstance(x, TaggedValue):
            _walk(x.rep, path, f"{where}<{x.tag}>", issues)
        elif isinstance(x, (set, frozenset)):
            # Elements equal once normalized merge into one; not an issue
            members: set[Any] = set()
            for i, e in enumerate(x):
                _walk(e, path, f"{where}[{i}]", issues)
                try:
                    members.add(normalize(e))
                except (CyclicReferenceError, EncodingError):
                    continue
            _check_encodings(list(members), False, where, issues)
        else:
            for i, e in enumerate(x):
                _walk(e, path, f"{where}[{i}]", issues)
    finally:
        path.discard(ident)


def _check_encodings(
    normalized: list[Any],
    as_map_key: bool,
    where: str,
    issues: list[CanonicalityIssue],
) -> None:
    # Distinct entries must encode distinctly or their order is undefined
    fragments: set[str] = set()
    for value in normalized:
        try:
            fragment = encode_fragment(value, as_map_key)
        except TransitCanonError:
            # Reported where the offending child was walked
            continue
        if fragment in fragments:
            issues.append(CanonicalityIssue(
                code=ErrorCode.DUPLICATE_KEY,
                message="Distinct elements share a canonical encoding",
                details={"path": where, "fragment": fragment},
            ))
        fragments.add(fragment)
