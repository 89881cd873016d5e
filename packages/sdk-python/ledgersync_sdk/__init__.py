"""Ledger core transaction feed SDK."""

__version__ = "0.1.0"

from ledgersync_sdk.client import FeedClient
from ledgersync_sdk.errors import (
    ALREADY_EXISTS,
    REQUEST_TIMED_OUT,
    APIError,
    TransportError,
    FeedClientError,
)
from ledgersync_sdk.types import Feed, TransactionPage

__all__ = [
    "FeedClient",
    "Feed",
    "TransactionPage",
    "FeedClientError",
    "APIError",
    "TransportError",
    "ALREADY_EXISTS",
    "REQUEST_TIMED_OUT",
]
