"""Value model: native Python types that travel over XML-RPC.

Each wire type maps to exactly one Python type, in both directions:

    base64            <-> bytes
    string            <-> str
    i4 / int          <-> int (32-bit signed; bool excluded)
    dateTime.iso8601  <-> datetime.datetime (second precision, naive)
    double            <-> float
    boolean           <-> bool
    array             <-> list
    struct            <-> dict (str keys)

``None`` is the Null variant. It is rendered as no element at all, so it
does not survive a round-trip inside arrays or structs.
"""

from __future__ import annotations

import base64
import binascii
import math
from datetime import datetime
from typing import Any, Union, get_origin

from boxcar.protocol import tokens
from boxcar.utils.exceptions import DeserializationError, SerializationError

Value = Union[None, bool, int, float, str, datetime, bytes, list, dict]

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

_WIRE_NAMES: dict[type, str] = {
    bool: tokens.BOOLEAN,
    int: tokens.INT,
    float: tokens.DOUBLE,
    str: tokens.STRING,
    datetime: tokens.DATETIME,
    bytes: tokens.BASE64,
    bytearray: tokens.BASE64,
    list: tokens.ARRAY,
    tuple: tokens.ARRAY,
    dict: tokens.STRUCT,
}


def wire_type_of(value: Any) -> str | None:
    """Return the wire element name for a value, or None if it has none."""
    if value is None:
        return None
    # bool before int: bool is an int subclass
    for py_type, name in _WIRE_NAMES.items():
        if isinstance(value, py_type):
            return name
    return None


def wire_type_name(annotation: Any) -> str:
    """Wire type name used in method signatures for a Python annotation."""
    if annotation is None or annotation is type(None):
        return "nil"
    origin = get_origin(annotation)
    if origin is not None:
        return wire_type_name(origin) if isinstance(origin, type) else "any"
    if isinstance(annotation, type):
        for py_type, name in _WIRE_NAMES.items():
            if issubclass(annotation, py_type):
                return name
    return "any"


def format_datetime(value: datetime) -> str:
    # strftime does not zero-pad years below 1000 on every platform
    return (
        f"{value.year:04d}{value.month:02d}{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
    )


def parse_datetime(text: str) -> datetime:
    return datetime.strptime(text.strip(), tokens.ISO_DATETIME)


def format_double(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise SerializationError(f"double value {value!r} has no wire form")
    return repr(float(value))


def encode_scalar(value: Any) -> tuple[str, str] | None:
    """Return (element name, text) for a scalar value, None for non-scalars."""
    kind = wire_type_of(value)
    if kind == tokens.BOOLEAN:
        return kind, "1" if value else "0"
    if kind == tokens.INT:
        if not INT32_MIN <= value <= INT32_MAX:
            raise SerializationError(f"integer {value} is outside the i4 range")
        return kind, str(int(value))
    if kind == tokens.DOUBLE:
        return kind, format_double(value)
    if kind == tokens.STRING:
        return kind, value
    if kind == tokens.DATETIME:
        return kind, format_datetime(value)
    if kind == tokens.BASE64:
        return kind, base64.b64encode(bytes(value)).decode("ascii")
    return None


def decode_scalar(tag: str, text: str | None) -> Value:
    """Convert the buffered text of a leaf type element into a value."""
    raw = text or ""
    try:
        if tag == tokens.STRING:
            return raw
        if tag in (tokens.INT, tokens.ALT_INT):
            number = int(raw.strip())
            if not INT32_MIN <= number <= INT32_MAX:
                raise ValueError(f"{number} is outside the i4 range")
            return number
        if tag == tokens.DOUBLE:
            return float(raw.strip())
        if tag == tokens.BOOLEAN:
            flag = raw.strip()
            if flag not in ("0", "1"):
                raise ValueError(f"boolean must be '0' or '1', got {flag!r}")
            return flag == "1"
        if tag == tokens.BASE64:
            compact = "".join(raw.split())
            return base64.b64decode(compact, validate=True)
        if tag == tokens.DATETIME:
            return parse_datetime(raw)
    except (ValueError, binascii.Error) as e:
        raise DeserializationError(f"cannot convert <{tag}> text {raw!r}: {e}") from e
    raise DeserializationError(f"unknown scalar type <{tag}>")
