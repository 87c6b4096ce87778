"""Transaction id derivation for inbound events."""

from __future__ import annotations

import uuid
from typing import Any, Callable, Optional, Sequence

from .extraction import AMOUNT_FIELDS, EVENT_TYPE_FIELDS, FEE_PAYMENT, first_value

IdStrategy = Callable[[dict[str, Any]], Optional[str]]


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _explicit_id(payload: dict[str, Any]) -> Optional[str]:
    value = payload.get("transaction_id")
    return str(value) if _present(value) else None


def _fee_payment_id(payload: dict[str, Any]) -> Optional[str]:
    if first_value(payload, EVENT_TYPE_FIELDS) != FEE_PAYMENT:
        return None
    issued_at = payload.get("iat")
    amount = first_value(payload, AMOUNT_FIELDS)
    if not _present(issued_at) or not _present(amount):
        return None
    return f"fee-{issued_at}-{amount}"


def _reference_id(payload: dict[str, Any]) -> Optional[str]:
    value = payload.get("ref_id")
    return str(value) if _present(value) else None


ID_STRATEGIES: Sequence[IdStrategy] = (_explicit_id, _fee_payment_id, _reference_id)


def derive_transaction_id(payload: dict[str, Any], strategies: Sequence[IdStrategy] = ID_STRATEGIES) -> str:
    """Return a stable id for the event, or a random ``unknown-`` id when nothing identifies it.

    Redelivery of a payload that ends up with a random id is recorded again.
    """
    for strategy in strategies:
        transaction_id = strategy(payload)
        if transaction_id is not None:
            return transaction_id
    return f"unknown-{uuid.uuid4().hex}"


def is_synthetic(transaction_id: str) -> bool:
    return transaction_id.startswith("unknown-")
