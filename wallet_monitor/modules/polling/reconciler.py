"""Fetch, compare, record and broadcast one account's balance."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Set

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wallet_monitor.infrastructure.wallet import WalletApiUnreachableError, WalletBalance, WalletClient
from wallet_monitor.interfaces.sse.hub import BroadcastHub
from wallet_monitor.modules.accounts.models import Account, Network
from wallet_monitor.modules.balances import change_detector
from wallet_monitor.modules.balances.events import snapshot_update_event
from wallet_monitor.modules.balances.locks import AccountLocks
from wallet_monitor.modules.balances.models import SnapshotSource
from wallet_monitor.modules.balances.service import BalanceService
from wallet_monitor.modules.notifications.telegram import TelegramNotifier

from .models import AccountCheckOutcome, CheckState

logger = logging.getLogger(__name__)


class BalanceReconciler:
    """The fetch -> detect -> store -> broadcast sequence shared by every pull path.

    ``last_known`` is a process-local hint used to skip the store for balances
    this process has already seen; the store's own comparison under the
    account lock stays authoritative.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hub: BroadcastHub,
        client: WalletClient,
        locks: AccountLocks,
        *,
        fetch_timeout: float = 10.0,
        notifier: Optional[TelegramNotifier] = None,
    ) -> None:
        self._session_factory = session_factory
        self._hub = hub
        self._client = client
        self._locks = locks
        self._fetch_timeout = fetch_timeout
        self._notifier = notifier
        self._background: Set[asyncio.Task] = set()
        self.last_known: Dict[str, int] = {}

    async def fetch(self, account: Account) -> WalletBalance:
        try:
            return await asyncio.wait_for(self._client.fetch_balance(account), timeout=self._fetch_timeout)
        except asyncio.TimeoutError as exc:
            raise WalletApiUnreachableError(f"no response within {self._fetch_timeout:g}s") from exc

    async def check(
        self,
        account: Account,
        source: SnapshotSource,
        *,
        network: Optional[Network] = None,
        use_hint: bool = False,
    ) -> AccountCheckOutcome:
        """Run one check; wallet and persistence errors propagate to the caller."""
        observed = await self.fetch(account)

        if use_hint and not change_detector.has_changed(
            self.last_known.get(account.id), observed.balance_minor_units
        ):
            return AccountCheckOutcome(
                account=account,
                state=CheckState.UNCHANGED,
                balance_minor_units=observed.balance_minor_units,
                mobile_no=observed.mobile_no,
            )

        return await self.apply(account, observed, source, network=network)

    async def apply(
        self,
        account: Account,
        observed: WalletBalance,
        source: SnapshotSource,
        *,
        network: Optional[Network] = None,
    ) -> AccountCheckOutcome:
        async with self._session_factory() as session:
            service = BalanceService.with_session(session, self._locks)
            result = await service.record_snapshot_if_changed(
                account.id,
                observed.balance_minor_units,
                observed.mobile_no,
                source,
            )

        self.last_known[account.id] = observed.balance_minor_units
        outcome = AccountCheckOutcome(
            account=account,
            state=CheckState.CHANGED if result.changed else CheckState.UNCHANGED,
            balance_minor_units=result.snapshot.balance_minor_units,
            mobile_no=result.snapshot.mobile_no,
            checked_at=result.snapshot.checked_at,
            change_minor_units=result.change_minor_units if result.changed else 0,
        )
        if not result.changed:
            return outcome

        logger.info(
            "%s: balance changed %s -> %s (%+d) via %s",
            account.name,
            result.previous_minor_units,
            observed.balance_minor_units,
            outcome.change_minor_units,
            source.value,
        )
        await self._hub.publish(account.id, snapshot_update_event(result))

        if (
            self._notifier is not None
            and network is not None
            and result.previous_minor_units is not None
            and source is not SnapshotSource.MANUAL_CHECK
        ):
            self._spawn(
                self._notifier.notify_balance_change(
                    network, account, outcome.change_minor_units, observed.balance_minor_units
                )
            )
        return outcome

    def remember(self, balances: Dict[str, int]) -> None:
        self.last_known.update(balances)

    async def drain(self) -> None:
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)

    def _spawn(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)
