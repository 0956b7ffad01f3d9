"""
Canonical serialization: the public pipeline.

    serialize:   [strict precheck] -> normalize -> canonical Transit encode
                 -> RFC 8785 pass -> [zstd]
    deserialize: [zstd detect + decompress] -> Transit decode

Known type changes through a round trip (intended, not errors):
- every integer returns as BigInt, whatever its original width
- annotations (WithMeta) are gone
- sets return as frozenset, tuples as tuples, mappings as dict
"""

import logging
from typing import Any

from . import comparators
from .canonical import canonicalize_json_bytes
from .compress import compress as zstd_compress
from .compress import decompress as zstd_decompress
from .compress import is_compressed
from .errors import CanonicalityResult, DecodingError
from .normalize import canonicality_report, normalize
from .options import DEFAULT_OPTIONS, CanonOptions
from .raw_emitter import encode_canonical, encode_fragment
from .reader import loads

logger = logging.getLogger(__name__)


def serialize(value: Any, options: CanonOptions | None = None, **overrides: Any) -> bytes:
    """
    Serialize a value to canonical bytes.

    Args:
        value: Value to serialize; never mutated
        options: Options for this call (default: compress at level 3, not strict)
        **overrides: Individual option fields, e.g. ``compress=False``

    Returns:
        Canonical bytes, zstd-framed when compression is on

    Raises:
        CyclicReferenceError: If the value contains itself
        CanonicalizationError: In strict mode, if the value cannot be canonicalized
        EncodingError: If the value holds a kind the writer cannot encode
    """
    opts = (options or DEFAULT_OPTIONS).with_overrides(**overrides)

    if opts.strict:
        report = canonicality_report(value)
        if not report.valid:
            logger.debug("strict serialize rejected value: %s", report.to_dict())
            raise report.to_exception()

    text = encode_canonical(normalize(value))
    canonical = canonicalize_json_bytes(text.encode("utf-8"))

    if opts.compress:
        return zstd_compress(canonical, opts.compression_level)
    return canonical


def serialize_uncompressed(value: Any) -> bytes:
    """Equivalent to ``serialize(value, compress=False)``."""
    return serialize(value, compress=False)


def deserialize(data: bytes) -> Any:
    """
    Deserialize canonical bytes, compressed or not.

    Raises:
        InvalidFrameError: If the input looks compressed but the frame is bad
        DecodingError: If the payload is not Transit-JSON
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise DecodingError(
            f"Expected bytes, got {type(data).__name__}",
            {"type": type(data).__name__},
        )
    data = bytes(data)
    if is_compressed(data):
        data = zstd_decompress(data)
    return loads(data, float_numbers=True)


def check(value: Any) -> CanonicalityResult:
    """Every reason ``value`` cannot be canonicalized (empty when it can)."""
    return canonicality_report(value)


def is_canonical(value: Any) -> bool:
    """
    True if ``value`` has a deterministic serialization.

    Returns False for cyclic values, values holding kinds the writer
    cannot encode, and maps whose keys collide once normalized. Never raises.
    """
    return canonicality_report(value).valid


def canonical_bytes_equal(a: Any, b: Any) -> bool:
    """True if both values produce identical canonical bytes."""
    return serialize(a) == serialize(b)


def sort_key(value: Any) -> str:
    """The string sort key the canonical ordering would give ``value``."""
    return comparators.sort_key(normalize(value), encode_fragment)


def canonical_compare(a: Any, b: Any) -> int:
    """
    Compare two values under the canonical total order: -1, 0 or 1.
    """
    return comparators.compare(normalize(a), normalize(b), encode_fragment)
