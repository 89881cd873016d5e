"""Table definitions for imported transactions.

Each table is its fixed columns followed by the configured custom columns,
in configuration order. Rows are built by column name, never by position.
"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    String,
    Table,
    Text,
    false,
)
from sqlalchemy.engine import Engine

from ledgersync_importer.columns import ColumnConfig, CustomColumn
from ledgersync_importer.errors import ConfigError

TRANSACTIONS_TABLE = "transactions"
INPUTS_TABLE = "transaction_inputs"
OUTPUTS_TABLE = "transaction_outputs"
TRANSACTIONS_PKEY = "transactions_pkey"


def _json() -> JSON:
    # Python None is stored as SQL NULL, not the JSON literal null.
    return JSON(none_as_null=True)


def _transaction_columns() -> list:
    return [
        Column("id", String(255), nullable=False),
        Column("block_height", BigInteger, nullable=False),
        Column("timestamp", DateTime(timezone=True), nullable=False),
        Column("position", Integer, nullable=False),
        Column("is_local", Boolean, nullable=False, default=False),
        Column("reference_data", _json(), nullable=True),
        Column("raw_payload", _json(), nullable=False),
    ]


def _asset_and_account_columns() -> list:
    return [
        Column("asset_id", String(255), nullable=True),
        Column("asset_alias", String(255), nullable=True),
        Column("asset_definition", _json(), nullable=True),
        Column("asset_tags", _json(), nullable=True),
        Column("asset_is_local", Boolean, nullable=False, default=False),
        Column("amount", BigInteger, nullable=False),
        Column("account_id", String(255), nullable=True),
        Column("account_alias", String(255), nullable=True),
        Column("account_tags", _json(), nullable=True),
    ]


def _input_columns() -> list:
    return [
        Column("transaction_id", String(255), ForeignKey(f"{TRANSACTIONS_TABLE}.id"), nullable=False),
        Column("index", Integer, nullable=False),
        Column("type", String(64), nullable=True),
        *_asset_and_account_columns(),
        Column("issuance_program", Text, nullable=True),
        Column("reference_data", _json(), nullable=True),
        Column("is_local", Boolean, nullable=False, default=False),
        Column("spent_output_id", String(255), nullable=True),
    ]


def _output_columns() -> list:
    return [
        Column("transaction_id", String(255), ForeignKey(f"{TRANSACTIONS_TABLE}.id"), nullable=False),
        Column("index", Integer, nullable=False),
        Column("output_id", String(255), nullable=True, index=True),
        Column("type", String(64), nullable=True),
        Column("purpose", String(64), nullable=True),
        *_asset_and_account_columns(),
        Column("control_program", Text, nullable=True),
        Column("reference_data", _json(), nullable=True),
        Column("is_local", Boolean, nullable=False, default=False),
        Column("spent", Boolean, nullable=False, default=False, server_default=false()),
    ]


def _custom_columns(table_name: str, fixed: list, custom: list[CustomColumn]) -> list:
    """Build custom columns, rejecting names that shadow fixed columns."""
    fixed_names = {column.name for column in fixed}
    columns = []
    for custom_column in custom:
        if custom_column.name in fixed_names:
            raise ConfigError(
                f"Custom column {custom_column.name!r} collides with a fixed column of {table_name}"
            )
        columns.append(Column(custom_column.name, custom_column.type.sql_type(), nullable=True))
    return columns


@dataclass(frozen=True)
class TransactionTables:
    """The three import tables and the column config they were built from."""

    metadata: MetaData
    transactions: Table
    inputs: Table
    outputs: Table
    column_config: ColumnConfig

    def create_all(self, engine: Engine) -> None:
        """Create any missing tables."""
        self.metadata.create_all(engine)


def build_tables(
    column_config: Optional[ColumnConfig] = None,
    metadata: Optional[MetaData] = None,
) -> TransactionTables:
    """Build table definitions with custom columns appended."""
    column_config = column_config or ColumnConfig()
    metadata = metadata or MetaData()

    tx_fixed = _transaction_columns()
    transactions = Table(
        TRANSACTIONS_TABLE,
        metadata,
        *tx_fixed,
        *_custom_columns(TRANSACTIONS_TABLE, tx_fixed, column_config.transaction_columns),
        PrimaryKeyConstraint("id", name=TRANSACTIONS_PKEY),
    )

    input_fixed = _input_columns()
    inputs = Table(
        INPUTS_TABLE,
        metadata,
        *input_fixed,
        *_custom_columns(INPUTS_TABLE, input_fixed, column_config.input_columns),
        PrimaryKeyConstraint("transaction_id", "index", name=f"{INPUTS_TABLE}_pkey"),
    )

    output_fixed = _output_columns()
    outputs = Table(
        OUTPUTS_TABLE,
        metadata,
        *output_fixed,
        *_custom_columns(OUTPUTS_TABLE, output_fixed, column_config.output_columns),
        PrimaryKeyConstraint("transaction_id", "index", name=f"{OUTPUTS_TABLE}_pkey"),
    )

    return TransactionTables(
        metadata=metadata,
        transactions=transactions,
        inputs=inputs,
        outputs=outputs,
        column_config=column_config,
    )
