"""Custom column configuration and extraction."""

from ledgersync_importer.columns.config import ColumnConfig, CustomColumn, load_column_config
from ledgersync_importer.columns.extractor import MISSING, extract, resolve_path
from ledgersync_importer.columns.types import ColumnType

__all__ = [
    "ColumnConfig",
    "ColumnType",
    "CustomColumn",
    "MISSING",
    "extract",
    "load_column_config",
    "resolve_path",
]
