"""Balance store: durable snapshots, idempotent transactions and history."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.db.models import (
    BalanceSnapshot as SnapshotModel,
    FinancialTransaction as TransactionModel,
    utcnow,
)

from . import change_detector
from .locks import AccountLocks
from .models import (
    BalanceSnapshot,
    FinancialTransaction,
    HistoryEntry,
    HistoryPage,
    NewTransaction,
    SnapshotEntry,
    SnapshotResult,
    SnapshotSource,
    TransactionEntry,
    TransactionRecordResult,
    as_utc,
)
from .repository import BalanceRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BalanceService:
    repository: BalanceRepository
    locks: AccountLocks = field(default_factory=AccountLocks)

    @classmethod
    def with_session(cls, session: AsyncSession, locks: Optional[AccountLocks] = None) -> "BalanceService":
        from wallet_monitor.infrastructure.database.repositories.balance_repository import SqlBalanceRepository

        return cls(SqlBalanceRepository(session), locks if locks is not None else AccountLocks())

    async def record_transaction(self, payload: NewTransaction) -> TransactionRecordResult:
        """Insert a ledger transaction at most once per ``transaction_id``.

        A duplicate is reported with ``created=False`` and the stored row; it is
        never raised, because webhook senders treat errors as a request to retry.
        """
        existing = await self.repository.get_transaction(payload.transaction_id)
        if existing is not None:
            logger.info("Transaction %s already recorded, skipping", payload.transaction_id)
            return TransactionRecordResult(created=False, transaction=self._to_transaction(existing))

        try:
            model = await self.repository.add_transaction(payload)
        except IntegrityError:
            # A concurrent delivery inserted the same id between our check and flush.
            await self.repository.rollback()
            existing = await self.repository.get_transaction(payload.transaction_id)
            if existing is None:
                raise
            logger.info("Transaction %s recorded concurrently, skipping", payload.transaction_id)
            return TransactionRecordResult(created=False, transaction=self._to_transaction(existing))

        return TransactionRecordResult(created=True, transaction=self._to_transaction(model))

    async def record_snapshot_if_changed(
        self,
        account_id: str,
        balance_minor_units: int,
        mobile_no: Optional[str],
        source: SnapshotSource | str,
        *,
        wallet_updated_at: Optional[datetime] = None,
    ) -> SnapshotResult:
        """Append a snapshot when the balance differs from the latest stored one.

        The read, the comparison, the insert and the commit all happen while the
        account lock is held, so the next writer always reads this row.
        """
        source_value = source.value if isinstance(source, SnapshotSource) else str(source)
        async with self.locks.hold(account_id):
            previous = await self.repository.get_latest_snapshot(account_id)
            last_known = previous.balance_minor_units if previous is not None else None

            if not change_detector.has_changed(last_known, balance_minor_units):
                return SnapshotResult(
                    changed=False,
                    snapshot=self._to_snapshot(previous),
                    previous_minor_units=last_known,
                )

            checked_at = utcnow()
            if previous is not None:
                previous_at = as_utc(previous.checked_at)
                if checked_at <= previous_at:
                    checked_at = previous_at + timedelta(microseconds=1)

            model = await self.repository.add_snapshot(
                account_id=account_id,
                balance_minor_units=balance_minor_units,
                mobile_no=mobile_no,
                source=source_value,
                wallet_updated_at=wallet_updated_at or checked_at,
                checked_at=checked_at,
            )
            await self.repository.commit()

        logger.debug(
            "Snapshot recorded for %s: %s -> %s (%s)",
            account_id,
            last_known,
            balance_minor_units,
            source_value,
        )
        return SnapshotResult(changed=True, snapshot=self._to_snapshot(model), previous_minor_units=last_known)

    async def get_latest_balance(self, account_id: str) -> BalanceSnapshot | None:
        model = await self.repository.get_latest_snapshot(account_id)
        if model is None:
            return None
        return self._to_snapshot(model)

    async def latest_balances_for(self, account_ids: Iterable[str]) -> dict[str, int]:
        balances: dict[str, int] = {}
        for account_id in account_ids:
            model = await self.repository.get_latest_snapshot(account_id)
            if model is not None:
                balances[account_id] = model.balance_minor_units
        return balances

    async def get_history(
        self,
        account_id: str,
        *,
        from_time: Optional[datetime] = None,
        to_time: Optional[datetime] = None,
        page: int = 1,
        page_size: int = 20,
    ) -> HistoryPage:
        """Merge transactions and snapshots into one page, newest first."""
        page = max(page, 1)
        page_size = max(page_size, 1)
        from_time = as_utc(from_time)
        to_time = as_utc(to_time)

        total = await self.repository.count_transactions(account_id, from_time, to_time)
        total += await self.repository.count_snapshots(account_id, from_time, to_time)

        # The newest N merged rows are always among the newest N rows of each table.
        window = page * page_size
        transactions = await self.repository.list_transactions(account_id, from_time, to_time, window)
        snapshots = await self.repository.list_snapshots(account_id, from_time, to_time, window)

        entries: list[HistoryEntry] = [TransactionEntry(self._to_transaction(row)) for row in transactions]
        entries.extend(SnapshotEntry(self._to_snapshot(row)) for row in snapshots)
        entries.sort(key=lambda entry: entry.ordering_key(), reverse=True)

        offset = (page - 1) * page_size
        return HistoryPage(
            entries=entries[offset:offset + page_size],
            total=total,
            page=page,
            page_size=page_size,
        )

    @staticmethod
    def _to_snapshot(model: SnapshotModel) -> BalanceSnapshot:
        return BalanceSnapshot(
            id=int(model.id),
            account_id=model.account_id,
            balance_minor_units=model.balance_minor_units,
            mobile_no=model.mobile_no,
            source=model.source,
            wallet_updated_at=as_utc(model.wallet_updated_at),
            checked_at=as_utc(model.checked_at),
        )

    @staticmethod
    def _to_transaction(model: TransactionModel) -> FinancialTransaction:
        payload = None
        if model.raw_payload:
            try:
                payload = json.loads(model.raw_payload)
            except json.JSONDecodeError:
                payload = None
        return FinancialTransaction(
            id=model.id,
            transaction_id=model.transaction_id,
            account_id=model.account_id,
            amount_minor_units=model.amount_minor_units,
            fee_minor_units=model.fee_minor_units,
            direction=model.direction,
            status=model.status,
            timestamp=as_utc(model.timestamp),
            sender_mobile=model.sender_mobile,
            sender_name=model.sender_name,
            recipient_mobile=model.recipient_mobile,
            recipient_name=model.recipient_name,
            raw_payload=payload,
        )
