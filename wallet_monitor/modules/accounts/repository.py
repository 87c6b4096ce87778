"""Repository protocol for networks and accounts."""

from __future__ import annotations

from typing import Protocol, Sequence

from .models import Account, Network


class AccountRepository(Protocol):
    """Read-only persistence interface used by the reconciliation core."""

    async def get_network_by_prefix(self, prefix: str) -> Network | None:
        ...

    async def list_networks(self, *, realtime_only: bool = False) -> Sequence[Network]:
        ...

    async def get_account(self, account_id: str) -> Account | None:
        ...

    async def list_active_accounts(self, network_id: str | None = None) -> Sequence[Account]:
        ...

    async def list_network_accounts(self, network_id: str, *, limit: int | None = None) -> Sequence[Account]:
        ...

    async def find_by_phone(self, network_id: str, phone_number: str) -> Account | None:
        ...
