"""Domain services for network and account lookups."""

from __future__ import annotations

import re
from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from .exceptions import AccountNotFoundError, NetworkNotFoundError
from .models import Account, Network
from .repository import AccountRepository

_NON_DIGITS = re.compile(r"\D+")


def normalize_phone(value: object) -> str | None:
    if value is None:
        return None
    digits = _NON_DIGITS.sub("", str(value))
    return digits or None


class AccountService:
    """Encapsulates account lookups shared by the reconciliation paths."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        from wallet_monitor.infrastructure.database.repositories.account_repository import SqlAccountRepository

        return cls(SqlAccountRepository(session))

    async def require_network(self, prefix: str) -> Network:
        network = await self._repository.get_network_by_prefix(prefix)
        if network is None:
            raise NetworkNotFoundError(prefix)
        return network

    async def list_networks(self, *, realtime_only: bool = False) -> Sequence[Network]:
        return await self._repository.list_networks(realtime_only=realtime_only)

    async def get_account(self, account_id: str) -> Account | None:
        return await self._repository.get_account(account_id)

    async def require_account(self, account_id: str, network: Network | None = None) -> Account:
        account = await self._repository.get_account(account_id)
        if account is None or (network is not None and account.network_id != network.id):
            raise AccountNotFoundError(account_id)
        return account

    async def list_active_accounts(self, network_id: str | None = None) -> Sequence[Account]:
        return await self._repository.list_active_accounts(network_id)

    async def find_by_phone(self, network_id: str, phone_number: object) -> Account | None:
        digits = normalize_phone(phone_number)
        if digits is None:
            return None
        return await self._repository.find_by_phone(network_id, digits)

    async def sole_account(self, network_id: str) -> Account | None:
        """Return the network's only account, or ``None`` when it has zero or several."""
        accounts = await self._repository.list_network_accounts(network_id, limit=2)
        if len(accounts) == 1:
            return accounts[0]
        return None
