"""Recognise re-inserts of an already imported transaction."""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from ledgersync_importer.db.schema import TRANSACTIONS_PKEY, TRANSACTIONS_TABLE

UNIQUE_VIOLATION = "23505"


def _postgres_constraint(orig) -> Optional[str]:
    diag = getattr(orig, "diag", None)
    return getattr(diag, "constraint_name", None)


def _sqlstate(orig) -> Optional[str]:
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate.
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def is_duplicate(error: Exception) -> bool:
    """Return True only for a uniqueness violation on transactions.id.

    Uniqueness violations on any other table or column are genuine errors.
    """
    if not isinstance(error, IntegrityError):
        return False
    orig = error.orig

    sqlstate = _sqlstate(orig)
    if sqlstate is not None:
        if sqlstate != UNIQUE_VIOLATION:
            return False
        constraint = _postgres_constraint(orig)
        if constraint is not None:
            return constraint == TRANSACTIONS_PKEY
        return f'"{TRANSACTIONS_PKEY}"' in str(orig)

    # SQLite: "UNIQUE constraint failed: transactions.id"
    message = str(orig)
    if "UNIQUE constraint failed" not in message:
        return False
    failed_columns = message.split("UNIQUE constraint failed:", 1)[1].strip()
    return [part.strip() for part in failed_columns.split(",")] == [f"{TRANSACTIONS_TABLE}.id"]
