"""Feed value types."""

from dataclasses import dataclass, field
from typing import Any

from ledgersync_sdk.errors import APIError


def _optional_str(data: dict, key: str, kind: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise APIError(None, f"malformed {kind}: {key!r} is not a string")
    return value


@dataclass(frozen=True)
class Feed:
    """A named, filtered transaction feed and its cursor."""

    id: str
    alias: str
    filter: str = ""
    after: str = ""

    @classmethod
    def from_json(cls, data: dict) -> "Feed":
        """Decode a feed object returned by the core.

        Raises APIError when the object has no id or a field has the wrong type.
        """
        if not isinstance(data, dict):
            raise APIError(None, "malformed transaction feed: expected an object")
        feed_id = data.get("id")
        if not isinstance(feed_id, str) or not feed_id:
            raise APIError(None, "malformed transaction feed: missing id")
        return cls(
            id=feed_id,
            alias=_optional_str(data, "alias", "transaction feed"),
            filter=_optional_str(data, "filter", "transaction feed"),
            after=_optional_str(data, "after", "transaction feed"),
        )


@dataclass(frozen=True)
class TransactionPage:
    """One page of transactions plus the cursor for the next page."""

    items: list[dict[str, Any]] = field(default_factory=list)
    next_after: str = ""
    last_page: bool = False

    @classmethod
    def from_json(cls, data: dict) -> "TransactionPage":
        """Decode a list-transactions response.

        Every page must carry next.after. An empty cursor would point back at
        the start of the feed, so it is rejected as a malformed response.
        """
        if not isinstance(data, dict):
            raise APIError(None, "malformed transaction page: expected an object")
        items = data.get("items") or []
        if not isinstance(items, list) or not all(isinstance(item, dict) for item in items):
            raise APIError(None, "malformed transaction page: items must be a list of objects")
        next_query = data.get("next")
        if not isinstance(next_query, dict):
            raise APIError(None, "malformed transaction page: missing next query")
        next_after = next_query.get("after")
        if not isinstance(next_after, str) or not next_after:
            raise APIError(None, "malformed transaction page: missing next.after cursor")
        return cls(
            items=list(items),
            next_after=next_after,
            last_page=bool(data.get("last_page", False)),
        )
