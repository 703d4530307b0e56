# edgex_bridge/model/values.py
from __future__ import annotations

import math
import re
import struct
from typing import Tuple, Union

ScalarValue = Union[int, float, str]

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_INT_RE = re.compile(r"[+-]?[0-9]+")
_DEC_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_FLOAT_RE = re.compile(r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+")
_SPECIAL_FLOATS = {"inf", "+inf", "-inf", "infinity", "+infinity", "-infinity", "nan"}

BOOL_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True", "0", "f", "F", "FALSE", "false", "False"})


def parse_int(text: str) -> int:
    """Parse a signed 64-bit decimal integer. No whitespace, no underscores."""
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer literal '{text}'")
    value = int(text)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ValueError(f"integer '{text}' out of int64 range")
    return value


def parse_float32(text: str) -> float:
    """
    Parse a float and round it to 32-bit precision.

    Accepts decimal and hex-float notation as well as inf/infinity/nan in any
    case. Values that overflow a 32-bit float are rejected.
    """
    if _DEC_FLOAT_RE.fullmatch(text):
        value = float(text)
    elif _HEX_FLOAT_RE.fullmatch(text):
        value = float.fromhex(text)
    elif text.lower() in _SPECIAL_FLOATS:
        return float(text)
    else:
        raise ValueError(f"invalid float literal '{text}'")

    if math.isinf(value):
        raise ValueError(f"float '{text}' out of float32 range")
    try:
        return struct.unpack("<f", struct.pack("<f", value))[0]
    except OverflowError:
        raise ValueError(f"float '{text}' out of float32 range") from None


def parse_bool(text: str) -> bool:
    if text not in BOOL_LITERALS:
        raise ValueError(f"invalid boolean literal '{text}'")
    return text in ("1", "t", "T", "TRUE", "true", "True")


def classify_value(text: str) -> Tuple[ScalarValue, str]:
    """
    Convert a reading's textual value into a typed scalar plus its kind.

    First match wins: integer, then 32-bit float, then boolean, then plain text.
    Booleans are returned as the input text, not as bool.
    """
    try:
        return parse_int(text), "integer"
    except ValueError:
        pass

    try:
        return parse_float32(text), "float"
    except ValueError:
        pass

    try:
        parse_bool(text)
    except ValueError:
        return text, "string"
    return text, "bool"


def infer_value(text: str) -> ScalarValue:
    return classify_value(text)[0]
