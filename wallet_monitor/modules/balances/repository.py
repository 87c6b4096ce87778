"""Repository protocol for balance snapshots and ledger transactions."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol, Sequence

from wallet_monitor.db.models import BalanceSnapshot as SnapshotModel, FinancialTransaction as TransactionModel

from .models import NewTransaction


class BalanceRepository(Protocol):
    async def get_latest_snapshot(self, account_id: str) -> SnapshotModel | None:
        ...

    async def add_snapshot(
        self,
        *,
        account_id: str,
        balance_minor_units: int,
        mobile_no: str | None,
        source: str,
        wallet_updated_at: datetime | None,
        checked_at: datetime,
    ) -> SnapshotModel:
        ...

    async def get_transaction(self, transaction_id: str) -> TransactionModel | None:
        ...

    async def add_transaction(self, payload: NewTransaction) -> TransactionModel:
        ...

    async def count_snapshots(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None
    ) -> int:
        ...

    async def count_transactions(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None
    ) -> int:
        ...

    async def list_snapshots(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None, limit: int
    ) -> Sequence[SnapshotModel]:
        ...

    async def list_transactions(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None, limit: int
    ) -> Sequence[TransactionModel]:
        ...

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...
