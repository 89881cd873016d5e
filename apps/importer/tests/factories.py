"""Builders for feed transaction payloads."""

from typing import Optional


def make_output(
    output_id: str,
    amount: int = 100,
    asset_alias: str = "gold",
    account_alias: str = "alice",
    **fields,
) -> dict:
    """Build a raw output item."""
    output = {
        "id": output_id,
        "type": "control",
        "purpose": "receive",
        "asset_id": f"asset-{asset_alias}",
        "asset_alias": asset_alias,
        "asset_definition": {"name": asset_alias},
        "asset_tags": {},
        "asset_is_local": "yes",
        "amount": amount,
        "account_id": f"acc-{account_alias}",
        "account_alias": account_alias,
        "account_tags": {"region": "eu"},
        "control_program": "766baa20",
        "reference_data": {},
        "is_local": "yes",
    }
    output.update(fields)
    return output


def make_input(
    amount: int = 100,
    spent_output_id: Optional[str] = None,
    asset_alias: str = "gold",
    account_alias: str = "alice",
    **fields,
) -> dict:
    """Build a raw input item; without spent_output_id it is an issuance."""
    tx_input = {
        "type": "spend" if spent_output_id else "issue",
        "asset_id": f"asset-{asset_alias}",
        "asset_alias": asset_alias,
        "asset_definition": {"name": asset_alias},
        "asset_tags": {},
        "asset_is_local": "yes",
        "amount": amount,
        "account_id": f"acc-{account_alias}",
        "account_alias": account_alias,
        "account_tags": {},
        "issuance_program": None if spent_output_id else "ae2054a7",
        "reference_data": {},
        "is_local": "yes",
    }
    if spent_output_id:
        tx_input["spent_output_id"] = spent_output_id
    tx_input.update(fields)
    return tx_input


def make_transaction(
    tx_id: str,
    block_height: int = 1,
    position: int = 0,
    inputs: Optional[list[dict]] = None,
    outputs: Optional[list[dict]] = None,
    **fields,
) -> dict:
    """Build a raw transaction item as the feed delivers it."""
    transaction = {
        "id": tx_id,
        "timestamp": "2017-03-14T18:22:05.123Z",
        "block_id": f"block-{block_height}",
        "block_height": block_height,
        "position": position,
        "is_local": "yes",
        "reference_data": {"memo": tx_id},
        "inputs": inputs if inputs is not None else [make_input()],
        "outputs": outputs if outputs is not None else [make_output(f"{tx_id}-out-0")],
    }
    transaction.update(fields)
    return transaction
