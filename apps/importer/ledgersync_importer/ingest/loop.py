"""The import loop: fetch, write, acknowledge, repeat."""

import logging
from typing import Callable, Optional

from ledgersync_sdk import Feed

from ledgersync_importer.errors import AcknowledgeError, FetchError, TransientFetchError, WriteError
from ledgersync_importer.feed.cursor import FeedCursorManager
from ledgersync_importer.ingest.writer import BatchWriter
from ledgersync_importer.utils import metrics

logger = logging.getLogger(__name__)


class ImportLoop:
    """Single consumer that replicates a transaction feed into the database.

    Every failure leaves the cursor where it was, so the next iteration
    requests the same page again and already committed transactions are
    recognised as duplicates.
    """

    def __init__(self, cursor_manager: FeedCursorManager, writer: BatchWriter):
        """Initialize import loop."""
        self.cursor_manager = cursor_manager
        self.writer = writer

    def step(self, feed: Feed) -> Feed:
        """Run one fetch/write/acknowledge iteration and return the resulting feed."""
        log_extra = {
            "feed_id": feed.id,
            "feed_filter": feed.filter,
            "feed_after": feed.after,
        }

        try:
            page = self.cursor_manager.next_page(feed)
        except TransientFetchError:
            # Nothing was committed upstream while we waited.
            metrics.fetch_errors.labels(kind="timeout").inc()
            return feed
        except FetchError as e:
            logger.error(f"Feed query failed: {e}", exc_info=True, extra=log_extra)
            metrics.fetch_errors.labels(kind="error").inc()
            return feed

        try:
            result = self.writer.write_page(page.items, log_extra=log_extra)
        except WriteError as e:
            # Skip the ack so this page is fetched and written again.
            logger.error(
                f"Failed to write page: {e}",
                exc_info=True,
                extra={**log_extra, "transaction_id": e.transaction_id},
            )
            metrics.write_failures.inc()
            return feed

        try:
            updated = self.cursor_manager.acknowledge(feed, page.next_after)
        except AcknowledgeError as e:
            logger.error(f"Failed to acknowledge page: {e}", exc_info=True, extra=log_extra)
            metrics.acknowledge_failures.inc()
            return feed

        metrics.pages_acknowledged.inc()
        if result.last_block_height is not None:
            metrics.last_block_height.set(result.last_block_height)
        logger.info(
            f"Imported {result.inserted} transactions ({result.duplicates} already present); "
            f"cursor advanced to {updated.after!r}"
            + ("; caught up with the feed" if page.last_page else ""),
            extra={**log_extra, "feed_after": updated.after, "last_page": page.last_page},
        )
        return updated

    def run_forever(self, feed: Feed, should_stop: Optional[Callable[[], bool]] = None) -> Feed:
        """Repeat step() until should_stop returns True. Blocks indefinitely by default."""
        while should_stop is None or not should_stop():
            feed = self.step(feed)
        return feed
