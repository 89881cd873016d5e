"""Ledger core transaction feed client."""

import uuid
from typing import Optional

import requests

from ledgersync_sdk.errors import APIError, TransportError
from ledgersync_sdk.types import Feed, TransactionPage


class FeedClient:
    """Client for the ledger core transaction feed endpoints."""

    def __init__(
        self,
        base_url: str = "http://localhost:1999",
        access_token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """Initialize client.

        access_token is a ``user:secret`` pair sent as HTTP basic auth.
        """
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.session.headers.update(
            {"Content-Type": "application/json", "Accept": "application/json"}
        )
        if access_token:
            user, _, secret = access_token.partition(":")
            self.session.auth = (user, secret)

    def _request(self, path: str, body: dict, timeout: Optional[float] = None) -> dict:
        """POST a request body and decode the JSON response."""
        url = f"{self.base_url}/{path}"
        try:
            response = self.session.post(url, json=body, timeout=timeout)
        except requests.RequestException as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        if response.status_code >= 400:
            raise APIError.from_response(response.status_code, data)
        if not isinstance(data, dict):
            raise APIError(None, f"malformed response from {path}", status_code=response.status_code)
        return data

    def create_feed(self, alias: str, filter: str = "", client_token: Optional[str] = None) -> Feed:
        """Create a transaction feed."""
        body = {
            "alias": alias,
            "filter": filter,
            "client_token": client_token or str(uuid.uuid4()),
        }
        return Feed.from_json(self._request("create-transaction-feed", body))

    def get_feed(self, alias: str) -> Feed:
        """Get a transaction feed by alias."""
        return Feed.from_json(self._request("get-transaction-feed", {"alias": alias}))

    def update_feed(self, feed_id: str, previous_after: str, after: str) -> Feed:
        """Advance a feed cursor.

        The core only applies the update when the feed's stored cursor still
        equals previous_after.
        """
        body = {"id": feed_id, "previous_after": previous_after, "after": after}
        return Feed.from_json(self._request("update-transaction-feed", body))

    def list_transactions(
        self,
        filter: str = "",
        after: str = "",
        timeout_ms: int = 60_000,
        ascending_with_long_poll: bool = True,
    ) -> TransactionPage:
        """Query one page of transactions strictly after the cursor."""
        body = {
            "filter": filter,
            "after": after,
            "timeout": timeout_ms,
            "ascending_with_long_poll": ascending_with_long_poll,
        }
        # Allow the server to answer the long poll before the socket gives up.
        http_timeout = timeout_ms / 1000 + 10
        return TransactionPage.from_json(
            self._request("list-transactions", body, timeout=http_timeout)
        )
