"""
SDS type codes and the value coercion table.

Each type code maps to exactly one CoercionRule, which carries both the column
dtype the code produces and the decode function for a single JSON value. The
null policy lives on the rule: non-nullable codes decode null to the type's zero
value, nullable codes decode it to None.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING

import numpy as np

from .errors import DecodeError

if TYPE_CHECKING:
    from .frame import Column

logger = logging.getLogger(__name__)

# Zero value for non-nullable DateTime columns
ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?(Z|[+-]\d{2}:\d{2})$"
)


class SdsTypeCode(str, Enum):
    """Type codes a stream property can carry."""
    BOOLEAN = "Boolean"
    NULLABLE_BOOLEAN = "NullableBoolean"
    INT16 = "Int16"
    NULLABLE_INT16 = "NullableInt16"
    UINT16 = "UInt16"
    NULLABLE_UINT16 = "NullableUInt16"
    INT32 = "Int32"
    NULLABLE_INT32 = "NullableInt32"
    UINT32 = "UInt32"
    NULLABLE_UINT32 = "NullableUInt32"
    INT64 = "Int64"
    NULLABLE_INT64 = "NullableInt64"
    UINT64 = "UInt64"
    NULLABLE_UINT64 = "NullableUInt64"
    SINGLE = "Single"
    NULLABLE_SINGLE = "NullableSingle"
    DOUBLE = "Double"
    NULLABLE_DOUBLE = "NullableDouble"
    DATE_TIME = "DateTime"
    NULLABLE_DATE_TIME = "NullableDateTime"
    STRING = "String"
    NULLABLE_STRING = "NullableString"


def parse_rfc3339(value: str) -> datetime:
    """
    Parse an RFC3339 timestamp and normalize it to UTC.

    Fractional seconds are accepted and truncated to microseconds.

    Raises:
        ValueError: value is not a valid RFC3339 timestamp
    """
    match = _RFC3339.match(value)
    if not match:
        raise ValueError(f"Not an RFC3339 timestamp: {value!r}")

    year, month, day, hour, minute, second, fraction, offset = match.groups()
    microsecond = int((fraction or "0")[:6].ljust(6, "0"))

    if offset == "Z":
        tz = timezone.utc
    else:
        sign = 1 if offset[0] == "+" else -1
        delta = timedelta(hours=int(offset[1:3]), minutes=int(offset[4:6]))
        tz = timezone(sign * delta)

    try:
        parsed = datetime(
            int(year), int(month), int(day),
            int(hour), int(minute), int(second), microsecond,
            tzinfo=tz,
        )
        return parsed.astimezone(timezone.utc)
    except OverflowError as e:
        raise ValueError(f"Timestamp out of range: {value!r}") from e


def _number(raw: Any) -> int | float:
    if isinstance(raw, bool):
        return int(raw)
    if isinstance(raw, (int, float)):
        return raw
    if isinstance(raw, str):
        # The platform writes non-finite doubles as "NaN", "Infinity", "-Infinity"
        try:
            return float(raw)
        except ValueError:
            pass
    raise DecodeError(f"Expected a number, got {raw!r}")


def _integer(bits: int, signed: bool) -> Callable[[Any, bool], int]:
    """Truncate toward zero, then wrap to the given width."""
    modulus = 1 << bits

    def convert(raw: Any, strict: bool) -> int:
        number = _number(raw)
        try:
            value = int(number)
        except (ValueError, OverflowError) as e:
            raise DecodeError(f"Cannot narrow {raw!r} to a {bits}-bit integer") from e
        value &= modulus - 1
        if signed and value >= modulus >> 1:
            value -= modulus
        return value

    return convert


def _single(raw: Any, strict: bool) -> float:
    return float(np.float32(_number(raw)))


def _double(raw: Any, strict: bool) -> float:
    return float(_number(raw))


def _boolean(raw: Any, strict: bool) -> bool:
    if strict:
        if not isinstance(raw, bool):
            raise DecodeError(f"Expected a boolean, got {raw!r}")
        return raw
    # Any present value reads as true
    return True


def _date_time(raw: Any, strict: bool) -> datetime:
    try:
        if not isinstance(raw, str):
            raise ValueError(f"Expected a timestamp string, got {raw!r}")
        return parse_rfc3339(raw)
    except ValueError as e:
        if strict:
            raise DecodeError(str(e)) from e
        logger.debug(f"Defaulting unparseable timestamp {raw!r} to zero time")
        return ZERO_TIME


def _string(raw: Any, strict: bool) -> str:
    # Non-string JSON values keep their JSON text
    return raw if isinstance(raw, str) else json.dumps(raw)


@dataclass(frozen=True)
class CoercionRule:
    """Column dtype and single-value decoder for one type code."""
    dtype: str
    nullable: bool
    convert: Callable[[Any, bool], Any]
    zero: Any = None

    def decode(self, raw: Any, strict: bool = False) -> Any:
        if raw is None:
            return None if self.nullable else self.zero
        return self.convert(raw, strict)


_STRING_RULE = CoercionRule("string", True, _string)

COERCION_TABLE: dict[SdsTypeCode, CoercionRule] = {
    SdsTypeCode.BOOLEAN: CoercionRule("bool", False, _boolean, zero=False),
    SdsTypeCode.NULLABLE_BOOLEAN: CoercionRule("boolean", True, _boolean),
    SdsTypeCode.INT16: CoercionRule("int16", False, _integer(16, True), zero=0),
    SdsTypeCode.NULLABLE_INT16: CoercionRule("Int16", True, _integer(16, True)),
    SdsTypeCode.UINT16: CoercionRule("uint16", False, _integer(16, False), zero=0),
    SdsTypeCode.NULLABLE_UINT16: CoercionRule("UInt16", True, _integer(16, False)),
    SdsTypeCode.INT32: CoercionRule("int32", False, _integer(32, True), zero=0),
    SdsTypeCode.NULLABLE_INT32: CoercionRule("Int32", True, _integer(32, True)),
    SdsTypeCode.UINT32: CoercionRule("uint32", False, _integer(32, False), zero=0),
    SdsTypeCode.NULLABLE_UINT32: CoercionRule("UInt32", True, _integer(32, False)),
    SdsTypeCode.INT64: CoercionRule("int64", False, _integer(64, True), zero=0),
    SdsTypeCode.NULLABLE_INT64: CoercionRule("Int64", True, _integer(64, True)),
    SdsTypeCode.UINT64: CoercionRule("uint64", False, _integer(64, False), zero=0),
    SdsTypeCode.NULLABLE_UINT64: CoercionRule("UInt64", True, _integer(64, False)),
    SdsTypeCode.SINGLE: CoercionRule("float32", False, _single, zero=0.0),
    SdsTypeCode.NULLABLE_SINGLE: CoercionRule("Float32", True, _single),
    SdsTypeCode.DOUBLE: CoercionRule("float64", False, _double, zero=0.0),
    SdsTypeCode.NULLABLE_DOUBLE: CoercionRule("Float64", True, _double),
    SdsTypeCode.DATE_TIME: CoercionRule("datetime64[us, UTC]", False, _date_time, zero=ZERO_TIME),
    SdsTypeCode.NULLABLE_DATE_TIME: CoercionRule("datetime64[us, UTC]", True, _date_time),
    SdsTypeCode.STRING: _STRING_RULE,
    SdsTypeCode.NULLABLE_STRING: _STRING_RULE,
}

# Unrecognized codes are read as optional strings
DEFAULT_RULE = _STRING_RULE


def rule_for(code: str | SdsTypeCode) -> CoercionRule:
    """Look up the coercion rule for a type code, falling back to DEFAULT_RULE."""
    try:
        return COERCION_TABLE[SdsTypeCode(code)]
    except ValueError:
        logger.debug(f"Unrecognized type code {code!r}, reading as string")
        return DEFAULT_RULE


def empty_column(code: str | SdsTypeCode, name: str = "") -> Column:
    """Create a zero-length column typed for the given code."""
    from .frame import Column
    rule = rule_for(code)
    return Column(name=name, dtype=rule.dtype, nullable=rule.nullable)


def decode_value(code: str | SdsTypeCode, raw: Any, strict: bool = False) -> Any:
    """
    Decode one JSON value for a property of the given type code.

    Args:
        code: Property type code (unrecognized codes read as strings)
        raw: JSON-decoded value (None, number, bool or string)
        strict: Raise DecodeError on malformed booleans and timestamps
            instead of defaulting them

    Returns:
        The typed value, the type's zero value, or None for absent nullable values
    """
    return rule_for(code).decode(raw, strict)
