"""Importer error taxonomy."""

from typing import Optional


class ImporterError(Exception):
    """Base class for importer failures."""


class ConfigError(ImporterError):
    """Invalid importer configuration. Aborts startup."""


class SetupError(ImporterError):
    """The feed could not be created or loaded. Aborts startup."""


class FetchError(ImporterError):
    """Querying the feed failed. The page is requested again."""


class TransientFetchError(FetchError):
    """The long poll timed out with no matching transactions."""


class AcknowledgeError(ImporterError):
    """The feed cursor update was rejected or failed."""


class WriteError(ImporterError):
    """A transaction could not be committed. The page is retried."""

    def __init__(self, message: str, transaction_id: Optional[str] = None):
        self.transaction_id = transaction_id
        super().__init__(message)


class MalformedTransactionError(WriteError):
    """A feed item does not decode into a transaction."""


class ColumnCoercionError(WriteError):
    """A custom column value cannot be converted to its configured type."""
