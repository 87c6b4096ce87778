"""SQLAlchemy implementation for balance snapshots and transactions"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Sequence

from sqlalchemy import desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.db.models import BalanceSnapshot, FinancialTransaction, utcnow
from wallet_monitor.modules.balances.models import NewTransaction


class SqlBalanceRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_latest_snapshot(self, account_id: str) -> BalanceSnapshot | None:
        stmt = (
            select(BalanceSnapshot)
            .where(BalanceSnapshot.account_id == account_id)
            .order_by(desc(BalanceSnapshot.checked_at), desc(BalanceSnapshot.id))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_snapshot(
        self,
        *,
        account_id: str,
        balance_minor_units: int,
        mobile_no: str | None,
        source: str,
        wallet_updated_at: datetime | None,
        checked_at: datetime,
    ) -> BalanceSnapshot:
        snapshot = BalanceSnapshot(
            account_id=account_id,
            balance_minor_units=balance_minor_units,
            mobile_no=mobile_no,
            source=source,
            wallet_updated_at=wallet_updated_at,
            checked_at=checked_at,
        )
        self.session.add(snapshot)
        await self.session.flush()
        return snapshot

    async def get_transaction(self, transaction_id: str) -> FinancialTransaction | None:
        stmt = select(FinancialTransaction).where(FinancialTransaction.transaction_id == transaction_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def add_transaction(self, payload: NewTransaction) -> FinancialTransaction:
        tx = FinancialTransaction(
            transaction_id=payload.transaction_id,
            account_id=payload.account_id,
            amount_minor_units=payload.amount_minor_units,
            fee_minor_units=payload.fee_minor_units,
            direction=payload.direction.value,
            status=payload.status,
            sender_mobile=payload.sender_mobile,
            sender_name=payload.sender_name,
            recipient_mobile=payload.recipient_mobile,
            recipient_name=payload.recipient_name,
            raw_payload=json.dumps(payload.raw_payload, ensure_ascii=False, default=str),
            timestamp=payload.timestamp or utcnow(),
        )
        self.session.add(tx)
        await self.session.flush()
        return tx

    async def count_snapshots(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None
    ) -> int:
        stmt = select(func.count()).select_from(BalanceSnapshot).where(BalanceSnapshot.account_id == account_id)
        if from_time is not None:
            stmt = stmt.where(BalanceSnapshot.checked_at >= from_time)
        if to_time is not None:
            stmt = stmt.where(BalanceSnapshot.checked_at <= to_time)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def count_transactions(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(FinancialTransaction)
            .where(FinancialTransaction.account_id == account_id)
        )
        if from_time is not None:
            stmt = stmt.where(FinancialTransaction.timestamp >= from_time)
        if to_time is not None:
            stmt = stmt.where(FinancialTransaction.timestamp <= to_time)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_snapshots(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None, limit: int
    ) -> Sequence[BalanceSnapshot]:
        stmt = select(BalanceSnapshot).where(BalanceSnapshot.account_id == account_id)
        if from_time is not None:
            stmt = stmt.where(BalanceSnapshot.checked_at >= from_time)
        if to_time is not None:
            stmt = stmt.where(BalanceSnapshot.checked_at <= to_time)
        stmt = stmt.order_by(desc(BalanceSnapshot.checked_at), desc(BalanceSnapshot.id)).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def list_transactions(
        self, account_id: str, from_time: datetime | None, to_time: datetime | None, limit: int
    ) -> Sequence[FinancialTransaction]:
        stmt = select(FinancialTransaction).where(FinancialTransaction.account_id == account_id)
        if from_time is not None:
            stmt = stmt.where(FinancialTransaction.timestamp >= from_time)
        if to_time is not None:
            stmt = stmt.where(FinancialTransaction.timestamp <= to_time)
        stmt = stmt.order_by(desc(FinancialTransaction.timestamp), desc(FinancialTransaction.id)).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
