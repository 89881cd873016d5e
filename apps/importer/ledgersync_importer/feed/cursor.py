"""Feed creation, page fetching and cursor acknowledgment."""

import logging

from ledgersync_sdk import (
    ALREADY_EXISTS,
    REQUEST_TIMED_OUT,
    APIError,
    Feed,
    FeedClient,
    FeedClientError,
    TransactionPage,
)

from ledgersync_importer.errors import (
    AcknowledgeError,
    FetchError,
    SetupError,
    TransientFetchError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 60 * 1000


class FeedCursorManager:
    """Owns the feed a single importer consumes.

    Feeds are immutable values. The cursor only moves when acknowledge()
    returns the updated feed, and the caller threads that value forward.
    """

    def __init__(self, client: FeedClient, timeout_ms: int = DEFAULT_TIMEOUT_MS):
        """Initialize cursor manager."""
        self.client = client
        self.timeout_ms = timeout_ms

    def connect(self, alias: str, filter: str = "") -> Feed:
        """Create the feed if it does not exist yet, then load it by alias."""
        try:
            self.client.create_feed(alias, filter)
        except APIError as e:
            if e.code != ALREADY_EXISTS:
                logger.error(f"Failed to create transaction feed {alias}: {e}")
                raise SetupError(f"Failed to create transaction feed {alias}: {e}") from e
            logger.info(f"Transaction feed {alias} already exists")
        except FeedClientError as e:
            logger.error(f"Failed to create transaction feed {alias}: {e}")
            raise SetupError(f"Failed to create transaction feed {alias}: {e}") from e

        try:
            feed = self.client.get_feed(alias)
        except FeedClientError as e:
            logger.error(f"Failed to load transaction feed {alias}: {e}")
            raise SetupError(f"Failed to load transaction feed {alias}: {e}") from e

        logger.info(
            f"Using transaction feed {feed.id} starting at cursor {feed.after!r}",
            extra={"feed_id": feed.id, "feed_filter": feed.filter, "feed_after": feed.after},
        )
        return feed

    def next_page(self, feed: Feed) -> TransactionPage:
        """Long-poll for transactions strictly after the feed cursor, oldest first."""
        try:
            return self.client.list_transactions(
                filter=feed.filter,
                after=feed.after,
                timeout_ms=self.timeout_ms,
                ascending_with_long_poll=True,
            )
        except APIError as e:
            if e.code == REQUEST_TIMED_OUT:
                raise TransientFetchError("No new transactions before the long poll timed out") from e
            raise FetchError(f"Failed to query transaction feed {feed.id}: {e}") from e
        except FeedClientError as e:
            raise FetchError(f"Failed to query transaction feed {feed.id}: {e}") from e

    def acknowledge(self, feed: Feed, after: str) -> Feed:
        """Advance the cursor from feed.after to after.

        The core rejects the update unless its stored cursor still equals
        feed.after. On failure the caller keeps using feed unchanged.
        An empty after would rewind the feed to its start and is refused.
        """
        if not after:
            raise AcknowledgeError(
                f"Refusing to rewind feed {feed.id} from {feed.after!r} to the start"
            )
        try:
            updated = self.client.update_feed(feed.id, previous_after=feed.after, after=after)
        except FeedClientError as e:
            raise AcknowledgeError(
                f"Failed to advance feed {feed.id} from {feed.after!r} to {after!r}: {e}"
            ) from e
        return updated
