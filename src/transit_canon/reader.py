"""
Transit-JSON reader.

Inverse of ``writer``: parses the JSON text with the standard library and
decodes Transit tags into Python values.

Read-side type choices:
- "~n" integers return as BigInt, "~i" integers and bare JSON integers as int
- sets return as frozenset, "list"-tagged arrays as tuple
- maps return as dict; a key that decodes to an unhashable value is an error
- tags without a dedicated type return as TaggedValue
"""

import base64
import binascii
import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any
from uuid import UUID

from .errors import DecodingError
from .values import BigInt, Keyword, Symbol, TaggedValue
from .writer import ESC, MAP_AS_ARRAY, QUOTE, RES, SUB, TAG

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _decode_string(text: str) -> Any:
    if not text:
        return text
    head = text[0]
    if head == SUB:
        raise DecodingError(
            "Cache references are not supported",
            {"value": text},
        )
    if head != ESC or len(text) < 2:
        return text

    tag, body = text[1], text[2:]
    try:
        if tag in (ESC, SUB, RES):
            return text[1:]
        if tag == "_":
            return None
        if tag == "?":
            return body == "t"
        if tag == "i":
            return int(body)
        if tag == "n":
            return BigInt(int(body))
        if tag == "d":
            return float(body)
        if tag == "f":
            return Decimal(body)
        if tag == "z":
            return {"NaN": float("nan"), "INF": float("inf"), "-INF": float("-inf")}[body]
        if tag == ":":
            return Keyword.parse(body)
        if tag == "$":
            return Symbol.parse(body)
        if tag == "b":
            return base64.b64decode(body, validate=True)
        if tag == "u":
            return UUID(body)
        if tag == "m":
            return _EPOCH + timedelta(milliseconds=int(body))
        if tag == "t":
            return datetime.fromisoformat(body.replace("Z", "+00:00"))
    except (ValueError, KeyError, InvalidOperation, binascii.Error) as exc:
        raise DecodingError(
            f"Invalid ~{tag} value: {body!r}",
            {"value": text},
        ) from exc
    if tag == "#":
        return TaggedValue(body, None)
    return TaggedValue(tag, body)


def _hashable_key(key: Any) -> Any:
    try:
        hash(key)
    except TypeError as exc:
        raise DecodingError(
            f"Map key is not hashable: {type(key).__name__}",
            {"type": type(key).__name__},
        ) from exc
    return key


def _pairs_to_dict(flat: list[Any]) -> dict[Any, Any]:
    if len(flat) % 2:
        raise DecodingError("Map has an odd number of entries", {"length": len(flat)})
    result: dict[Any, Any] = {}
    for i in range(0, len(flat), 2):
        result[_hashable_key(flat[i])] = flat[i + 1]
    return result


def _apply_tag(tag: str, rep: Any) -> Any:
    if tag == QUOTE:
        return rep
    if tag == "set":
        try:
            return frozenset(rep)
        except TypeError as exc:
            raise DecodingError("Set element is not hashable", {"tag": tag}) from exc
    if tag == "list":
        return tuple(rep)
    if tag == "cmap":
        if not isinstance(rep, list):
            raise DecodingError("cmap representation must be an array", {"tag": tag})
        return _pairs_to_dict(rep)
    if tag == "ratio":
        if not (isinstance(rep, list) and len(rep) == 2):
            raise DecodingError("ratio representation must be a pair", {"tag": tag})
        try:
            return Fraction(int(rep[0]), int(rep[1]))
        except (TypeError, ValueError, ZeroDivisionError) as exc:
            raise DecodingError("Invalid ratio", {"rep": repr(rep)}) from exc
    return TaggedValue(tag, rep)


def _decode(node: Any) -> Any:
    if isinstance(node, str):
        return _decode_string(node)
    if isinstance(node, list):
        if not node:
            return []
        head = node[0]
        if head == MAP_AS_ARRAY:
            return _pairs_to_dict([_decode(x) for x in node[1:]])
        if isinstance(head, str) and head.startswith(TAG) and len(node) == 2:
            return _apply_tag(head[len(TAG):], _decode(node[1]))
        return [_decode(x) for x in node]
    if isinstance(node, dict):
        if len(node) == 1:
            (key, rep), = node.items()
            if key.startswith(TAG):
                return _apply_tag(key[len(TAG):], _decode(rep))
        return {_hashable_key(_decode(k)): _decode(v) for k, v in node.items()}
    return node


def loads(data: str | bytes, float_numbers: bool = False) -> Any:
    """
    Decode Transit-JSON text or UTF-8 bytes.

    Args:
        data: Transit-JSON document
        float_numbers: Read every bare JSON number as float. Canonical
            output tags all integers, so a bare number there is a float
            that JSON canonicalization may have printed without a point.

    Raises:
        DecodingError: If the input is not valid Transit-JSON
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodingError("Input is not valid UTF-8", {"reason": str(exc)}) from exc

    try:
        if float_numbers:
            tree = json.loads(data, parse_int=float)
        else:
            tree = json.loads(data)
    except json.JSONDecodeError as exc:
        raise DecodingError(f"Invalid JSON: {exc.msg}", {"position": exc.pos}) from exc

    return _decode(tree)
