"""Canonical JSON codec for box contents.

Encoding is deterministic: keys are sorted, separators are compact and the
output is UTF-8. NaN and Infinity are rejected since they are not JSON.
"""

import json
import math
from typing import Any, Dict, Optional

from .exceptions import DecodeError, EncodeError
from .models import ValueType


def value_type(value: Any) -> ValueType:
    """Return the type tag of ``value`` or raise ``EncodeError``."""
    # bool first, it is a subclass of int
    if value is None:
        return ValueType.NULL
    if isinstance(value, bool):
        return ValueType.BOOLEAN
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise EncodeError(f"Non-finite number can't be stored: {value!r}")
        return ValueType.NUMBER
    if isinstance(value, str):
        return ValueType.STRING
    if isinstance(value, (list, tuple)):
        return ValueType.SEQUENCE
    if isinstance(value, dict):
        return ValueType.MAPPING
    raise EncodeError(f"Unsupported value type: {type(value).__name__}")


def validate(value: Any, _seen: Optional[set] = None) -> Any:
    """Check that ``value`` survives an encode/decode round trip.

    Walks sequences and mappings. Mapping keys must be strings and numbers
    must be finite. Returns a normalized copy with tuples turned into lists,
    which is how they come back from disk. Raises ``EncodeError`` otherwise.
    """
    kind = value_type(value)
    if kind not in (ValueType.SEQUENCE, ValueType.MAPPING):
        return value

    seen = set() if _seen is None else _seen
    if id(value) in seen:
        raise EncodeError("Circular reference can't be stored")
    seen.add(id(value))
    try:
        if kind is ValueType.SEQUENCE:
            return [validate(item, seen) for item in value]
        out = {}
        for k, item in value.items():
            if not isinstance(k, str):
                raise EncodeError(
                    f"Mapping keys must be strings, got {type(k).__name__}: {k!r}"
                )
            out[k] = validate(item, seen)
        return out
    finally:
        seen.discard(id(value))


def is_number(value: Any) -> bool:
    try:
        return value_type(value) is ValueType.NUMBER
    except EncodeError:
        return False


def encode(mapping: Dict[str, Any]) -> bytes:
    """Serialize ``mapping`` to canonical JSON bytes."""
    if not isinstance(mapping, dict):
        raise EncodeError(f"Expected a mapping, got {type(mapping).__name__}")
    # json.dumps would quietly turn non-str keys into strings
    validate(mapping)
    try:
        text = json.dumps(
            mapping,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as e:
        raise EncodeError(f"Mapping is not JSON-representable: {e}") from e
    return text.encode("utf-8")


def decode(data: bytes) -> Dict[str, Any]:
    """Parse bytes produced by :func:`encode` back into a dict."""
    try:
        obj = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"Malformed payload: {e}") from e
    if not isinstance(obj, dict):
        raise DecodeError(f"Payload is a {type(obj).__name__}, expected an object")
    return obj
