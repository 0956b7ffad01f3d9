"""
transit-canon: deterministic serialization of structured values.

The same logical value, built in any order and from any equivalent
container types, always serializes to identical bytes: canonically
ordered Transit-JSON, passed through RFC 8785, optionally zstd-framed.
Use it to hash, sign, or compare values by their bytes.
"""

import logging

from .canonical import canonical_json, canonicalize_json_bytes
from .compress import MAGIC, compress, compressed_size, decompress, is_compressed
from .core import (
    canonical_bytes_equal,
    canonical_compare,
    check,
    deserialize,
    is_canonical,
    serialize,
    serialize_uncompressed,
    sort_key,
)
from .errors import (
    CanonicalityIssue,
    CanonicalityResult,
    CanonicalizationError,
    CyclicReferenceError,
    DecodingError,
    EncodingError,
    ErrorCode,
    InvalidFrameError,
    TransitCanonError,
)
from .normalize import normalize
from .options import CanonOptions
from .sign import content_hash, sign_ed25519, sign_hmac, verify_ed25519, verify_hmac
from .values import BigInt, Keyword, Symbol, TaggedValue, WithMeta, kw, sym, with_meta

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    # Serialization
    "serialize",
    "serialize_uncompressed",
    "deserialize",
    "is_canonical",
    "check",
    "canonical_bytes_equal",
    "sort_key",
    "canonical_compare",
    "normalize",
    "CanonOptions",
    # JSON canonicalization
    "canonical_json",
    "canonicalize_json_bytes",
    # Compression
    "MAGIC",
    "compress",
    "decompress",
    "is_compressed",
    "compressed_size",
    # Hashing and signing
    "content_hash",
    "sign_hmac",
    "verify_hmac",
    "sign_ed25519",
    "verify_ed25519",
    # Values
    "BigInt",
    "Keyword",
    "Symbol",
    "TaggedValue",
    "WithMeta",
    "kw",
    "sym",
    "with_meta",
    # Errors
    "ErrorCode",
    "TransitCanonError",
    "CanonicalizationError",
    "CyclicReferenceError",
    "EncodingError",
    "DecodingError",
    "InvalidFrameError",
    "CanonicalityIssue",
    "CanonicalityResult",
]
