"""Build live-stream events from balance store results."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from wallet_monitor.schemas import BalanceStreamEvent, TransactionInfo

from .models import FinancialTransaction, SnapshotResult, to_major_units


def snapshot_update_event(result: SnapshotResult) -> BalanceStreamEvent:
    change = result.change_minor_units
    return BalanceStreamEvent(
        type="update",
        balance=result.snapshot.balance,
        balance_minor_units=result.snapshot.balance_minor_units,
        change=to_major_units(change),
        change_minor_units=change,
        checked_at=result.snapshot.checked_at,
    )


def transaction_update_event(
    transaction: FinancialTransaction,
    checked_at: datetime,
    change_minor_units: Optional[int] = None,
) -> BalanceStreamEvent:
    """A webhook transaction carries the movement, not the new total, so balance fields are zero."""
    signed_amount = change_minor_units
    if signed_amount is None:
        signed_amount = transaction.amount_minor_units
        if transaction.direction == "outgoing":
            signed_amount = -(transaction.amount_minor_units + transaction.fee_minor_units)
    return BalanceStreamEvent(
        type="update",
        balance=0,
        balance_minor_units=0,
        change=to_major_units(signed_amount),
        change_minor_units=signed_amount,
        checked_at=checked_at,
        transaction=TransactionInfo(
            transaction_id=transaction.transaction_id,
            amount=to_major_units(transaction.amount_minor_units),
            fee=to_major_units(transaction.fee_minor_units),
            amount_minor_units=transaction.amount_minor_units,
            fee_minor_units=transaction.fee_minor_units,
            type=transaction.direction,
        ),
    )
