"""Tests for feed setup, page fetching and cursor acknowledgment."""

import pytest

from ledgersync_sdk import REQUEST_TIMED_OUT, APIError, TransportError

from ledgersync_importer.errors import (
    AcknowledgeError,
    FetchError,
    SetupError,
    TransientFetchError,
)
from tests.factories import make_transaction


def test_connect_creates_missing_feed(cursor_manager, feed_service):
    feed = cursor_manager.connect("importer", "asset_alias='gold'")

    assert feed.alias == "importer"
    assert feed.filter == "asset_alias='gold'"
    assert feed.after == ""
    assert feed_service.feeds["importer"] == feed


def test_connect_reuses_existing_feed(cursor_manager, feed_service):
    """Test an existing alias is loaded with its stored cursor."""
    original = cursor_manager.connect("importer")
    feed_service.force_cursor(original.id, "42")

    feed = cursor_manager.connect("importer")

    assert feed.id == original.id
    assert feed.after == "42"


@pytest.mark.parametrize(
    "error",
    [
        APIError("CH003", "Invalid filter", status_code=400),
        TransportError("connection refused"),
    ],
)
def test_connect_fails_on_other_create_errors(cursor_manager, feed_service, error):
    feed_service.create_error = error

    with pytest.raises(SetupError):
        cursor_manager.connect("importer")


def test_next_page_queries_after_cursor(cursor_manager, feed_service):
    feed_service.transactions = [make_transaction(f"tx-{n}") for n in range(3)]
    feed_service.page_size = 2
    feed = cursor_manager.connect("importer", "is_local='yes'")

    page = cursor_manager.next_page(feed)

    assert [item["id"] for item in page.items] == ["tx-0", "tx-1"]
    assert page.next_after == "2"
    assert feed_service.list_calls[-1] == {
        "filter": "is_local='yes'",
        "after": "",
        "timeout_ms": 1000,
    }


def test_next_page_timeout_is_transient(cursor_manager):
    feed = cursor_manager.connect("importer")

    with pytest.raises(TransientFetchError):
        cursor_manager.next_page(feed)


@pytest.mark.parametrize(
    "error",
    [
        APIError("CH000", "Internal error", status_code=500),
        TransportError("connection reset"),
    ],
)
def test_next_page_other_errors(cursor_manager, feed_service, error):
    feed = cursor_manager.connect("importer")
    feed_service.list_errors.append(error)

    with pytest.raises(FetchError) as exc_info:
        cursor_manager.next_page(feed)

    assert not isinstance(exc_info.value, TransientFetchError)


def test_transient_error_is_a_fetch_error():
    assert issubclass(TransientFetchError, FetchError)
    assert REQUEST_TIMED_OUT == "CH001"


def test_acknowledge_advances_cursor(cursor_manager, feed_service):
    feed = cursor_manager.connect("importer")

    updated = cursor_manager.acknowledge(feed, "5")

    assert updated.after == "5"
    assert feed.after == ""
    assert feed_service.get_feed("importer").after == "5"


def test_acknowledge_with_stale_cursor_is_rejected(cursor_manager, feed_service):
    """Test the optimistic update fails when another writer moved the cursor."""
    feed = cursor_manager.connect("importer")
    feed_service.force_cursor(feed.id, "9")

    with pytest.raises(AcknowledgeError):
        cursor_manager.acknowledge(feed, "5")

    assert feed.after == ""
    assert feed_service.get_feed("importer").after == "9"


def test_acknowledge_refuses_to_rewind(cursor_manager, feed_service):
    """Test an empty cursor is never sent to the core."""
    feed = cursor_manager.acknowledge(cursor_manager.connect("importer"), "5")

    with pytest.raises(AcknowledgeError):
        cursor_manager.acknowledge(feed, "")

    assert feed_service.get_feed("importer").after == "5"
