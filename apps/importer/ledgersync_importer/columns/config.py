"""Custom column configuration.

The configuration file is a JSON document listing, per entity kind, the
columns appended after the fixed columns of that entity's table::

    {
        "transaction_columns": [
            {"name": "invoice", "path": "reference_data.invoice", "type": "string"}
        ],
        "input_columns": [],
        "output_columns": [
            {"name": "amount_copy", "path": "amount", "type": "integer"}
        ]
    }
"""

import json
import re
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ledgersync_importer.columns.extractor import parse_path
from ledgersync_importer.columns.types import ColumnType
from ledgersync_importer.errors import ConfigError

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]{0,62}$")


class CustomColumn(BaseModel):
    """A derived column: where to read the value and how to store it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    path: str
    type: ColumnType = ColumnType.STRING

    @field_validator("name")
    @classmethod
    def _valid_identifier(cls, value: str) -> str:
        if not _IDENTIFIER.match(value):
            raise ValueError(f"{value!r} is not a valid column name")
        return value.lower()

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value):
        # Accepts "blob" and mixed case.
        if isinstance(value, str):
            return ColumnType(value)
        return value

    @field_validator("path")
    @classmethod
    def _valid_path(cls, value: str) -> str:
        parse_path(value)
        return value


class ColumnConfig(BaseModel):
    """Custom columns for each entity kind, in table order."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    transaction_columns: list[CustomColumn] = Field(default_factory=list)
    input_columns: list[CustomColumn] = Field(default_factory=list)
    output_columns: list[CustomColumn] = Field(default_factory=list)

    @field_validator("transaction_columns", "input_columns", "output_columns")
    @classmethod
    def _unique_names(cls, columns: list[CustomColumn]) -> list[CustomColumn]:
        seen: set[str] = set()
        for column in columns:
            if column.name in seen:
                raise ValueError(f"duplicate custom column {column.name!r}")
            seen.add(column.name)
        return columns


def load_column_config(path: Optional[str]) -> ColumnConfig:
    """Load custom columns from a JSON file; no path means no custom columns."""
    if not path:
        return ColumnConfig()
    config_path = Path(path)
    try:
        payload = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read custom column config at {config_path}: {e}") from e
    try:
        return ColumnConfig.model_validate(payload)
    except ValidationError as e:
        raise ConfigError(f"Invalid custom column config at {config_path}: {e}") from e
