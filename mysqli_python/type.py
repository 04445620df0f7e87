"""
Copyright (c) The mysqli-python developers.
Licensed under the MIT license.
This module contains the result type selector and the coercion functions used
by the typed accessors of rows and results.

Field values are int, float, str, bool, bytes (binary columns) or None. The
coercions follow loose scalar conversion rules:

    int     floats truncate toward zero, strings use their leading numeric
            prefix ("42abc" -> 42, "abc" -> 0)
    float   strings use their leading numeric literal, 0.0 if there is none
    str     None -> "", True -> "1", False -> "", 1.0 -> "1"
    bool    False only for 0, 0.0, "", "0" and None
"""

import math
import re
from enum import Enum
from typing import Optional, Union

FieldValue = Union[int, float, str, bool, bytes, None]

# Optional leading whitespace, sign, digits with optional fraction, optional exponent
_NUMERIC_PREFIX = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


class ResultType(Enum):
    """
    Selects how the fields of a fetched row are keyed.

    ASSOC   by column name
    NUM     by ordinal position, starting at 0
    BOTH    by ordinal position and by column name
    """

    ASSOC = "assoc"
    NUM = "num"
    BOTH = "both"


def _as_text(value: Union[str, bytes]) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


def _numeric_prefix(text: str) -> Optional[str]:
    match = _NUMERIC_PREFIX.match(text)
    return match.group(1) if match else None


def _float_to_int(value: float) -> int:
    if not math.isfinite(value):
        return 0
    return int(value)


def to_int(value: FieldValue) -> int:
    """Coerce a field value to int."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _float_to_int(value)

    prefix = _numeric_prefix(_as_text(value))
    if prefix is None:
        return 0
    if any(c in prefix for c in ".eE"):
        return _float_to_int(float(prefix))
    return int(prefix)


def to_float(value: FieldValue) -> float:
    """Coerce a field value to float."""
    if value is None:
        return 0.0
    if isinstance(value, (bool, int, float)):
        return float(value)

    prefix = _numeric_prefix(_as_text(value))
    if prefix is None:
        return 0.0
    return float(prefix)


def to_str(value: FieldValue) -> str:
    """Coerce a field value to str."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else ""
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, (bytes, bytearray)):
        return _as_text(value)
    return str(value)


def to_bool(value: FieldValue) -> bool:
    """
    Coerce a field value to bool.
    Only the string "0" is false among non-empty strings, so "0.0" is true.
    """
    if value is None:
        return False
    if isinstance(value, (bytes, bytearray)):
        return value not in (b"", b"0")
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def to_nullable_int(value: FieldValue) -> Optional[int]:
    return None if value is None else to_int(value)


def to_nullable_float(value: FieldValue) -> Optional[float]:
    return None if value is None else to_float(value)


def to_nullable_str(value: FieldValue) -> Optional[str]:
    return None if value is None else to_str(value)


def to_nullable_bool(value: FieldValue) -> Optional[bool]:
    return None if value is None else to_bool(value)
