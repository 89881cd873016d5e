"""Feed transaction models."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ledgersync_importer.errors import MalformedTransactionError


class _FeedModel(BaseModel):
    """Lenient base: unknown fields are kept, "yes"/"no" parse as booleans."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class TransactionInput(_FeedModel):
    """Input of a transaction."""

    type: Optional[str] = None
    asset_id: Optional[str] = None
    asset_alias: Optional[str] = None
    asset_definition: Optional[Any] = None
    asset_tags: Optional[Any] = None
    asset_is_local: bool = False
    amount: int = 0
    account_id: Optional[str] = None
    account_alias: Optional[str] = None
    account_tags: Optional[Any] = None
    issuance_program: Optional[str] = None
    reference_data: Optional[Any] = None
    is_local: bool = False
    spent_output_id: Optional[str] = None


class TransactionOutput(_FeedModel):
    """Output of a transaction."""

    id: Optional[str] = None
    type: Optional[str] = None
    purpose: Optional[str] = None
    asset_id: Optional[str] = None
    asset_alias: Optional[str] = None
    asset_definition: Optional[Any] = None
    asset_tags: Optional[Any] = None
    asset_is_local: bool = False
    amount: int = 0
    account_id: Optional[str] = None
    account_alias: Optional[str] = None
    account_tags: Optional[Any] = None
    control_program: Optional[str] = None
    reference_data: Optional[Any] = None
    is_local: bool = False


class Transaction(_FeedModel):
    """A ledger transaction as delivered by the feed."""

    id: str = Field(..., min_length=1)
    timestamp: datetime
    block_height: int
    position: int
    is_local: bool = False
    reference_data: Optional[Any] = None
    inputs: list[TransactionInput] = Field(default_factory=list)
    outputs: list[TransactionOutput] = Field(default_factory=list)


def decode_transaction(item: dict) -> Transaction:
    """Validate a raw feed item."""
    try:
        return Transaction.model_validate(item)
    except ValidationError as e:
        transaction_id = item.get("id") if isinstance(item, dict) else None
        raise MalformedTransactionError(
            f"Feed item is not a valid transaction: {e}",
            transaction_id=transaction_id,
        ) from e
