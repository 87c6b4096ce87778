"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.db.models import Account as AccountModel, Network as NetworkModel
from wallet_monitor.modules.accounts.models import Account, Network


class SqlAccountRepository:
    """Account and network lookups backed by SQLAlchemy models."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_network_by_prefix(self, prefix: str) -> Network | None:
        stmt = select(NetworkModel).where(NetworkModel.prefix == prefix)
        result = await self._session.execute(stmt)
        return self._to_network(result.scalar_one_or_none())

    async def list_networks(self, *, realtime_only: bool = False) -> Sequence[Network]:
        stmt = select(NetworkModel).where(NetworkModel.is_active.is_(True))
        if realtime_only:
            stmt = stmt.where(NetworkModel.realtime_enabled.is_(True))
        stmt = stmt.order_by(NetworkModel.prefix)
        result = await self._session.execute(stmt)
        return [self._to_network(model) for model in result.scalars().all()]

    async def get_account(self, account_id: str) -> Account | None:
        stmt = select(AccountModel).where(AccountModel.id == account_id)
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalar_one_or_none())

    async def list_active_accounts(self, network_id: str | None = None) -> Sequence[Account]:
        stmt = (
            select(AccountModel)
            .join(NetworkModel, AccountModel.network_id == NetworkModel.id)
            .where(AccountModel.is_active.is_(True), NetworkModel.is_active.is_(True))
        )
        if network_id is not None:
            stmt = stmt.where(AccountModel.network_id == network_id)
        stmt = stmt.order_by(AccountModel.created_at, AccountModel.id)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def list_network_accounts(self, network_id: str, *, limit: int | None = None) -> Sequence[Account]:
        stmt = (
            select(AccountModel)
            .where(AccountModel.network_id == network_id)
            .order_by(AccountModel.created_at, AccountModel.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._session.execute(stmt)
        return [self._to_domain(model) for model in result.scalars().all()]

    async def find_by_phone(self, network_id: str, phone_number: str) -> Account | None:
        stmt = (
            select(AccountModel)
            .where(
                AccountModel.network_id == network_id,
                AccountModel.phone_number.contains(phone_number),
            )
            .order_by(AccountModel.created_at, AccountModel.id)
            .limit(1)
        )
        result = await self._session.execute(stmt)
        return self._to_domain(result.scalars().first())

    @staticmethod
    def _to_network(model: NetworkModel | None) -> Network | None:
        if model is None:
            return None
        return Network(
            id=str(model.id),
            name=model.name,
            prefix=model.prefix,
            is_active=bool(model.is_active),
            realtime_enabled=bool(model.realtime_enabled),
            check_interval_ms=model.check_interval_ms,
            webhook_enabled=bool(model.webhook_enabled),
            telegram_enabled=bool(model.telegram_enabled),
            telegram_bot_token=model.telegram_bot_token,
            telegram_chat_id=model.telegram_chat_id,
            notify_money_in=bool(model.notify_money_in),
            notify_money_out=bool(model.notify_money_out),
            notify_min_amount=model.notify_min_amount or 0,
        )

    @staticmethod
    def _to_domain(model: AccountModel | None) -> Account | None:
        if model is None:
            return None
        return Account(
            id=str(model.id),
            network_id=model.network_id,
            name=model.name,
            wallet_endpoint_url=model.wallet_endpoint_url,
            wallet_bearer_token=model.wallet_bearer_token,
            phone_number=model.phone_number,
            is_active=bool(model.is_active),
            created_at=model.created_at,
        )
