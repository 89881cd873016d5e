"""Feed client errors."""

from typing import Optional

# Error codes returned by the ledger core.
REQUEST_TIMED_OUT = "CH001"
ALREADY_EXISTS = "CH050"


class FeedClientError(Exception):
    """Base class for feed client failures."""


class TransportError(FeedClientError):
    """The ledger core could not be reached."""


class APIError(FeedClientError):
    """Error response returned by the ledger core."""

    def __init__(
        self,
        code: Optional[str],
        message: str,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        temporary: bool = False,
    ):
        """Initialize API error."""
        self.code = code
        self.message = message
        self.detail = detail
        self.status_code = status_code
        self.temporary = temporary
        text = f"{code}: {message}" if code else message
        if detail:
            text = f"{text} ({detail})"
        super().__init__(text)

    @classmethod
    def from_response(cls, status_code: int, body) -> "APIError":
        """Build an error from a decoded error response body."""
        if isinstance(body, list):
            # Batch endpoints wrap the error in a single-element list.
            body = body[0] if body else {}
        if not isinstance(body, dict):
            return cls(None, f"unexpected response (HTTP {status_code})", status_code=status_code)
        return cls(
            code=body.get("code"),
            message=body.get("message") or f"HTTP {status_code}",
            detail=body.get("detail"),
            status_code=status_code,
            temporary=bool(body.get("temporary", False)),
        )
