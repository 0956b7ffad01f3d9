"""
Canonical JSON text per RFC 8785 (JCS).

Applied to the Transit-JSON document as a final byte transform so that
number formatting, string escaping and whitespace are fixed no matter how
the document was written.

Rules:
- Object keys sorted by UTF-16 code units
- No whitespace between tokens
- Numbers: shortest round-trip digits per ECMAScript Number::toString
- Strings: minimal escaping (control chars, backslash, double-quote)
- null, true, false as literals
- NaN and Infinity are rejected
"""

import json
import math
from typing import Any

from .errors import DecodingError, EncodingError


def canonical_json(value: Any) -> str:
    """
    Serialize a JSON value to canonical JSON per RFC 8785.

    Args:
        value: A value made of dict, list, str, int, float, bool and None

    Returns:
        Canonical JSON string with sorted keys and no whitespace
    """
    return _serialize_value(value)


def canonicalize_json_bytes(data: bytes) -> bytes:
    """
    Re-serialize UTF-8 JSON bytes in RFC 8785 form. Idempotent.

    Raises:
        DecodingError: If the input is not JSON
        EncodingError: If it holds numbers JCS cannot represent
    """
    try:
        tree = json.loads(data, parse_constant=_reject_constant)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DecodingError(f"Invalid JSON: {exc}") from exc
    except ValueError as exc:
        raise EncodingError(str(exc)) from exc
    return canonical_json(tree).encode("utf-8")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"Non-finite number not allowed: {name}")


def _serialize_value(value: Any) -> str:
    """Internal: serialize any value to canonical JSON."""
    if value is None:
        return "null"

    if isinstance(value, bool):
        # Must check bool before int (bool is subclass of int in Python)
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return _serialize_number(value)

    if isinstance(value, str):
        return _serialize_string(value)

    if isinstance(value, (list, tuple)):
        return _serialize_array(value)

    if isinstance(value, dict):
        return _serialize_object(value)

    raise EncodingError(
        f"Not a JSON value: {type(value).__name__}",
        {"type": type(value).__name__},
    )


def _serialize_number(num: float | int) -> str:
    """
    Serialize number per RFC 8785 / ECMAScript Number::toString.

    JSON numbers are IEEE 754 doubles, so integers are converted first.
    """
    try:
        num = float(num)
    except OverflowError as exc:
        raise EncodingError("Integer out of double range", {"digits": len(str(num))}) from exc

    if math.isnan(num) or math.isinf(num):
        raise EncodingError(f"Non-finite number not allowed: {num!r}")

    if num == 0:
        # Covers -0.0 as well
        return "0"

    sign = "-" if num < 0 else ""
    digits, n = _shortest_digits(abs(num))
    k = len(digits)

    if k <= n <= 21:
        text = digits + "0" * (n - k)
    elif 0 < n <= 21:
        text = digits[:n] + "." + digits[n:]
    elif -6 < n <= 0:
        text = "0." + "0" * (-n) + digits
    else:
        exp = n - 1
        exp_text = ("+" if exp >= 0 else "-") + str(abs(exp))
        mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
        text = mantissa + "e" + exp_text

    return sign + text


def _shortest_digits(num: float) -> tuple[str, int]:
    """
    Shortest round-trip decimal digits of a positive finite double.

    Returns (digits, n) such that num == 0.digits * 10**n, with no
    leading or trailing zeros in digits. Python's repr already yields
    the shortest round-trip digit string.
    """
    mantissa, _, exponent = repr(num).partition("e")
    int_part, _, frac_part = mantissa.partition(".")
    digits = int_part + frac_part
    n = len(int_part) + int(exponent or 0)

    stripped = digits.lstrip("0")
    n -= len(digits) - len(stripped)
    return stripped.rstrip("0"), n


def _serialize_string(text: str) -> str:
    """
    Serialize string with proper JSON escaping.

    json.dumps escapes exactly what RFC 8785 requires: double-quote,
    backslash, the short forms \\b \\f \\n \\r \\t, and other control
    characters as lowercase \\u00XX.
    """
    return json.dumps(text, ensure_ascii=False)


def _serialize_array(arr: list | tuple) -> str:
    """Serialize array with no whitespace."""
    items = [_serialize_value(item) for item in arr]
    return "[" + ",".join(items) + "]"


def _serialize_object(obj: dict) -> str:
    """
    Serialize object with keys sorted per RFC 8785.

    Keys compare as arrays of UTF-16 code units, which is byte order of
    their UTF-16BE encoding.
    """
    sorted_keys = sorted(obj.keys(), key=lambda k: k.encode("utf-16-be", "surrogatepass"))
    pairs = [_serialize_string(key) + ":" + _serialize_value(obj[key]) for key in sorted_keys]
    return "{" + ",".join(pairs) + "}"
