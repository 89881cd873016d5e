"""Supported custom column types and their conversions."""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

from sqlalchemy import JSON, BigInteger, Boolean, DateTime, Text
from sqlalchemy.types import TypeEngine

_TRUE_STRINGS = frozenset({"true", "yes", "y", "on", "1"})
_FALSE_STRINGS = frozenset({"false", "no", "n", "off", "0"})


def to_string(value: Any) -> str:
    """Convert scalars to text; structured values become compact JSON."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"))
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"cannot convert {type(value).__name__} to string")


def to_integer(value: Any) -> int:
    """Convert integral numbers and decimal strings to int."""
    if isinstance(value, bool):
        raise ValueError("refusing to convert a boolean to integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{value!r} is not integral")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError(f"cannot convert {type(value).__name__} to integer")


def to_boolean(value: Any) -> bool:
    """Convert booleans, 0/1 and the core's yes/no strings to bool."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"cannot convert {value!r} to boolean")


def to_timestamp(value: Any) -> datetime:
    """Convert RFC 3339 strings or epoch seconds to an aware datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip())
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    else:
        raise ValueError(f"cannot convert {type(value).__name__} to timestamp")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_json(value: Any) -> Any:
    """Pass JSON-compatible values through unchanged."""
    json.dumps(value)
    return value


class ColumnType(str, Enum):
    """Closed set of types a custom column can hold."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    JSON = "json"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered == "blob":
                return cls.JSON
            for member in cls:
                if member.value == lowered:
                    return member
        return None

    def sql_type(self) -> TypeEngine:
        """SQL column type used to store values of this type."""
        return _SQL_TYPES[self]()

    def coerce(self, value: Any) -> Any:
        """Convert a non-null value; raises ValueError when impossible."""
        try:
            return _CONVERTERS[self](value)
        except (TypeError, OverflowError) as e:
            raise ValueError(str(e)) from e


_SQL_TYPES: dict[ColumnType, Callable[[], TypeEngine]] = {
    ColumnType.STRING: Text,
    ColumnType.INTEGER: BigInteger,
    ColumnType.BOOLEAN: Boolean,
    ColumnType.TIMESTAMP: lambda: DateTime(timezone=True),
    ColumnType.JSON: lambda: JSON(none_as_null=True),
}

_CONVERTERS: dict[ColumnType, Callable[[Any], Any]] = {
    ColumnType.STRING: to_string,
    ColumnType.INTEGER: to_integer,
    ColumnType.BOOLEAN: to_boolean,
    ColumnType.TIMESTAMP: to_timestamp,
    ColumnType.JSON: to_json,
}
