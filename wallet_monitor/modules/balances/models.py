"""Domain models for balance snapshots, ledger transactions and history."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Optional, Union

MINOR_UNITS_PER_MAJOR = 100


class SnapshotSource(str, Enum):
    MANUAL_CHECK = "manual_check"
    REALTIME_WORKER = "realtime_worker"
    CRON_CHECK = "cron_check"
    WEBHOOK = "webhook"


class Direction(str, Enum):
    INCOMING = "incoming"
    OUTGOING = "outgoing"


def to_major_units(minor_units: int) -> float:
    major = (Decimal(minor_units) / MINOR_UNITS_PER_MAJOR).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(major)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; everything stored is UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(slots=True)
class BalanceSnapshot:
    id: int
    account_id: str
    balance_minor_units: int
    mobile_no: Optional[str]
    source: str
    wallet_updated_at: Optional[datetime]
    checked_at: datetime

    @property
    def balance(self) -> float:
        return to_major_units(self.balance_minor_units)


@dataclass(slots=True)
class FinancialTransaction:
    id: str
    transaction_id: str
    account_id: str
    amount_minor_units: int
    fee_minor_units: int
    direction: str
    status: str
    timestamp: datetime
    sender_mobile: Optional[str] = None
    sender_name: Optional[str] = None
    recipient_mobile: Optional[str] = None
    recipient_name: Optional[str] = None
    raw_payload: Optional[dict[str, Any]] = None


@dataclass(slots=True)
class NewTransaction:
    transaction_id: str
    account_id: str
    amount_minor_units: int
    fee_minor_units: int
    direction: Direction
    status: str = "SUCCESS"
    timestamp: Optional[datetime] = None
    sender_mobile: Optional[str] = None
    sender_name: Optional[str] = None
    recipient_mobile: Optional[str] = None
    recipient_name: Optional[str] = None
    raw_payload: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SnapshotResult:
    changed: bool
    snapshot: BalanceSnapshot
    previous_minor_units: Optional[int] = None

    @property
    def change_minor_units(self) -> int:
        if self.previous_minor_units is None:
            return 0
        return self.snapshot.balance_minor_units - self.previous_minor_units


@dataclass(slots=True)
class TransactionRecordResult:
    created: bool
    transaction: FinancialTransaction


@dataclass(slots=True)
class TransactionEntry:
    transaction: FinancialTransaction
    kind: str = "transaction"

    def ordering_key(self) -> tuple[datetime, int, str]:
        return (as_utc(self.transaction.timestamp), 1, self.transaction.id)


@dataclass(slots=True)
class SnapshotEntry:
    snapshot: BalanceSnapshot
    kind: str = "snapshot"

    def ordering_key(self) -> tuple[datetime, int, str]:
        return (as_utc(self.snapshot.checked_at), 0, f"{self.snapshot.id:020d}")


HistoryEntry = Union[TransactionEntry, SnapshotEntry]


@dataclass(slots=True)
class HistoryPage:
    entries: list[HistoryEntry]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return (self.total + self.page_size - 1) // self.page_size
