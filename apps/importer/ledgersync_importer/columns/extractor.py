"""Evaluate custom column paths against feed payloads.

Paths are dotted key lookups with optional list indexes, for example
``amount``, ``reference_data.invoice.number`` or ``$.inputs[0].asset_id``.
A path that does not resolve yields NULL. A value that resolves but cannot be
converted to the column type raises ColumnCoercionError.
"""

import re
from typing import Any, Mapping, Optional

from ledgersync_importer.columns.types import ColumnType
from ledgersync_importer.errors import ColumnCoercionError

_SEGMENT = re.compile(r"([^.\[\]]+)|\[(\d+)\]")


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


def parse_path(path: str) -> tuple[str | int, ...]:
    """Split a path expression into key and index segments."""
    expression = path.strip()
    if expression.startswith("$"):
        expression = expression[1:].lstrip(".")
    segments: list[str | int] = []
    position = 0
    while position < len(expression):
        if expression[position] == ".":
            position += 1
            continue
        match = _SEGMENT.match(expression, position)
        if match is None:
            raise ValueError(f"invalid path expression {path!r}")
        key, index = match.groups()
        segments.append(int(index) if index is not None else key)
        position = match.end()
    if not segments:
        raise ValueError(f"empty path expression {path!r}")
    return tuple(segments)


def resolve_path(path: str, entity: Any) -> Any:
    """Return the value at path, or MISSING when any segment is absent."""
    current = entity
    for segment in parse_path(path):
        if isinstance(segment, int):
            if not isinstance(current, list) or segment >= len(current):
                return MISSING
            current = current[segment]
        else:
            if not isinstance(current, Mapping) or segment not in current:
                return MISSING
            current = current[segment]
    return current


def extract(
    path: str,
    entity: Any,
    column_type: ColumnType,
    column_name: Optional[str] = None,
    transaction_id: Optional[str] = None,
) -> Any:
    """Evaluate path against entity and coerce the result to column_type."""
    value = resolve_path(path, entity)
    if value is MISSING or value is None:
        return None
    try:
        return column_type.coerce(value)
    except ValueError as e:
        label = column_name or path
        raise ColumnCoercionError(
            f"Cannot store {value!r} from path {path!r} in {column_type.value} column {label}: {e}",
            transaction_id=transaction_id,
        ) from e
