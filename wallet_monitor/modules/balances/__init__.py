"""Balance store exports"""

from . import change_detector
from .locks import AccountLocks
from .models import (
    BalanceSnapshot,
    Direction,
    FinancialTransaction,
    HistoryEntry,
    HistoryPage,
    NewTransaction,
    SnapshotEntry,
    SnapshotResult,
    SnapshotSource,
    TransactionEntry,
    TransactionRecordResult,
    to_major_units,
)
from .service import BalanceService

__all__ = [
    "AccountLocks",
    "BalanceService",
    "BalanceSnapshot",
    "Direction",
    "FinancialTransaction",
    "HistoryEntry",
    "HistoryPage",
    "NewTransaction",
    "SnapshotEntry",
    "SnapshotResult",
    "SnapshotSource",
    "TransactionEntry",
    "TransactionRecordResult",
    "change_detector",
    "to_major_units",
]
