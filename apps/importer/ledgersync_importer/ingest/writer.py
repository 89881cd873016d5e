"""Per-transaction atomic writes of feed transactions."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

from sqlalchemy import insert, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ledgersync_importer.columns import CustomColumn, extract
from ledgersync_importer.db.schema import TransactionTables
from ledgersync_importer.errors import WriteError
from ledgersync_importer.ingest.duplicates import is_duplicate
from ledgersync_importer.ingest.models import Transaction, decode_transaction
from ledgersync_importer.utils import metrics

logger = logging.getLogger(__name__)


class WriteOutcome(str, Enum):
    """Result of writing one transaction."""

    INSERTED = "inserted"
    DUPLICATE = "duplicate"


@dataclass(frozen=True)
class PageResult:
    """Outcome of writing every transaction of a page."""

    inserted: int = 0
    duplicates: int = 0
    last_block_height: Optional[int] = None


@dataclass
class _TransactionRows:
    transaction: dict[str, Any]
    inputs: list[dict[str, Any]] = field(default_factory=list)
    outputs: list[dict[str, Any]] = field(default_factory=list)
    spent_output_ids: list[str] = field(default_factory=list)


class BatchWriter:
    """Writes each transaction, its inputs and its outputs as one unit of work."""

    def __init__(self, session_factory: sessionmaker, tables: TransactionTables):
        """Initialize writer."""
        self.session_factory = session_factory
        self.tables = tables
        self.column_config = tables.column_config

    def write_page(self, items: list[dict], log_extra: Optional[dict] = None) -> PageResult:
        """Write a page of feed items in order.

        Each transaction commits on its own. The first failure that is not a
        duplicate stops the page and raises WriteError; transactions committed
        before it stay committed.
        """
        log_extra = log_extra or {}
        inserted = 0
        duplicates = 0
        last_block_height = None
        started = time.monotonic()

        db = self.session_factory()
        try:
            for item in items:
                outcome, transaction = self.write_transaction(db, item, log_extra)
                if outcome is WriteOutcome.DUPLICATE:
                    duplicates += 1
                else:
                    inserted += 1
                last_block_height = transaction.block_height
        finally:
            db.close()
            metrics.page_write_duration.observe(time.monotonic() - started)

        return PageResult(
            inserted=inserted,
            duplicates=duplicates,
            last_block_height=last_block_height,
        )

    def write_transaction(
        self,
        db: Session,
        item: dict,
        log_extra: Optional[dict] = None,
    ) -> tuple[WriteOutcome, Transaction]:
        """Insert one transaction atomically, or recognise it as already imported."""
        transaction = decode_transaction(item)
        extra = {**(log_extra or {}), "transaction_id": transaction.id}
        logger.debug(f"Importing transaction {transaction.id}", extra=extra)

        rows = self._build_rows(transaction, item)

        try:
            self._execute(db, rows, extra)
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if is_duplicate(e):
                # Already committed by an earlier attempt whose page was never acknowledged.
                logger.info(
                    f"Transaction {transaction.id} already imported; ignoring",
                    extra=extra,
                )
                metrics.transactions_written.labels(outcome=WriteOutcome.DUPLICATE.value).inc()
                return WriteOutcome.DUPLICATE, transaction
            raise WriteError(
                f"Failed to import transaction {transaction.id}: {e.orig}",
                transaction_id=transaction.id,
            ) from e
        except SQLAlchemyError as e:
            db.rollback()
            raise WriteError(
                f"Failed to import transaction {transaction.id}: {e}",
                transaction_id=transaction.id,
            ) from e

        metrics.transactions_written.labels(outcome=WriteOutcome.INSERTED.value).inc()
        return WriteOutcome.INSERTED, transaction

    def _execute(self, db: Session, rows: _TransactionRows, extra: dict) -> None:
        """Issue every statement for one transaction inside the open unit of work."""
        db.execute(insert(self.tables.transactions), rows.transaction)
        if rows.inputs:
            db.execute(insert(self.tables.inputs), rows.inputs)
        if rows.outputs:
            db.execute(insert(self.tables.outputs), rows.outputs)

        outputs = self.tables.outputs
        for output_id in rows.spent_output_ids:
            result = db.execute(
                update(outputs).where(outputs.c.output_id == output_id).values(spent=True)
            )
            if result.rowcount == 0:
                logger.warning(
                    f"Spent output {output_id} has not been imported; nothing to mark",
                    extra=extra,
                )
                metrics.unmatched_spent_outputs.inc()

    def _build_rows(self, transaction: Transaction, item: Mapping) -> _TransactionRows:
        """Compute every row before touching the database."""
        config = self.column_config
        raw_inputs = item.get("inputs") or []
        raw_outputs = item.get("outputs") or []

        tx_row = {
            "id": transaction.id,
            "block_height": transaction.block_height,
            "timestamp": transaction.timestamp,
            "position": transaction.position,
            "is_local": transaction.is_local,
            "reference_data": transaction.reference_data,
            "raw_payload": dict(item),
        }
        tx_row.update(self._custom_values(config.transaction_columns, item, transaction.id))
        rows = _TransactionRows(transaction=tx_row)

        for index, tx_input in enumerate(transaction.inputs):
            row = {
                "transaction_id": transaction.id,
                "index": index,
                "type": tx_input.type,
                "asset_id": tx_input.asset_id,
                "asset_alias": tx_input.asset_alias,
                "asset_definition": tx_input.asset_definition,
                "asset_tags": tx_input.asset_tags,
                "asset_is_local": tx_input.asset_is_local,
                "amount": tx_input.amount,
                "account_id": tx_input.account_id,
                "account_alias": tx_input.account_alias,
                "account_tags": tx_input.account_tags,
                "issuance_program": tx_input.issuance_program,
                "reference_data": tx_input.reference_data,
                "is_local": tx_input.is_local,
                "spent_output_id": tx_input.spent_output_id,
            }
            row.update(self._custom_values(config.input_columns, raw_inputs[index], transaction.id))
            rows.inputs.append(row)
            if tx_input.spent_output_id:
                rows.spent_output_ids.append(tx_input.spent_output_id)

        for index, tx_output in enumerate(transaction.outputs):
            row = {
                "transaction_id": transaction.id,
                "index": index,
                "output_id": tx_output.id,
                "type": tx_output.type,
                "purpose": tx_output.purpose,
                "asset_id": tx_output.asset_id,
                "asset_alias": tx_output.asset_alias,
                "asset_definition": tx_output.asset_definition,
                "asset_tags": tx_output.asset_tags,
                "asset_is_local": tx_output.asset_is_local,
                "amount": tx_output.amount,
                "account_id": tx_output.account_id,
                "account_alias": tx_output.account_alias,
                "account_tags": tx_output.account_tags,
                "control_program": tx_output.control_program,
                "reference_data": tx_output.reference_data,
                "is_local": tx_output.is_local,
                "spent": False,
            }
            row.update(self._custom_values(config.output_columns, raw_outputs[index], transaction.id))
            rows.outputs.append(row)

        return rows

    @staticmethod
    def _custom_values(
        columns: list[CustomColumn], entity: Any, transaction_id: str
    ) -> dict[str, Any]:
        return {
            column.name: extract(
                column.path,
                entity,
                column.type,
                column_name=column.name,
                transaction_id=transaction_id,
            )
            for column in columns
        }
