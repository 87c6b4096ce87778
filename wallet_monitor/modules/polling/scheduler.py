"""Periodic balance polling for every active account."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wallet_monitor.core.config import PollerSettings
from wallet_monitor.infrastructure.wallet import WalletApiError
from wallet_monitor.modules.accounts.models import Account, Network
from wallet_monitor.modules.accounts.service import AccountService
from wallet_monitor.modules.balances.models import SnapshotSource
from wallet_monitor.modules.balances.service import BalanceService

from .models import AccountCheckOutcome, CheckState, TickReport
from .reconciler import BalanceReconciler

logger = logging.getLogger(__name__)


class PollScheduler:
    """Runs one polling loop per realtime-enabled network.

    Each tick checks the network's active accounts in batches of
    ``settings.batch_size`` concurrent fetches. A failing account is reported
    as ``failed`` for that tick and stays eligible for the next one.
    """

    def __init__(
        self,
        reconciler: BalanceReconciler,
        session_factory: async_sessionmaker[AsyncSession],
        settings: PollerSettings,
    ) -> None:
        self._reconciler = reconciler
        self._session_factory = session_factory
        self._settings = settings
        self._tasks: Dict[str, asyncio.Task] = {}
        self._intervals: Dict[str, float] = {}
        self._refresh_task: Optional[asyncio.Task] = None
        self.states: Dict[str, CheckState] = {}

    async def seed_cache(self) -> int:
        """Load the newest stored balance of every active account into the hint cache."""
        async with self._session_factory() as session:
            accounts = await AccountService.with_session(session).list_active_accounts()
            balances = await BalanceService.with_session(session).latest_balances_for(
                account.id for account in accounts
            )
        self._reconciler.remember(balances)
        logger.info("Initialized %d balances from storage", len(balances))
        return len(balances)

    async def run_tick(
        self,
        network_id: Optional[str] = None,
        *,
        source: SnapshotSource = SnapshotSource.REALTIME_WORKER,
        use_hint: bool = True,
    ) -> TickReport:
        started = time.perf_counter()
        async with self._session_factory() as session:
            account_service = AccountService.with_session(session)
            accounts = await account_service.list_active_accounts(network_id)
            networks = {network.id: network for network in await account_service.list_networks()}

        report = TickReport()
        batch_size = self._settings.batch_size
        for start in range(0, len(accounts), batch_size):
            batch = accounts[start:start + batch_size]
            outcomes = await asyncio.gather(
                *(
                    self._check_account(account, networks.get(account.network_id), source, use_hint)
                    for account in batch
                )
            )
            for outcome in outcomes:
                report.add(outcome)

        report.duration_ms = int((time.perf_counter() - started) * 1000)
        logger.debug(
            "Tick%s: %d/%d success, %d changed, %d failed, %dms",
            f" [{network_id}]" if network_id else "",
            report.succeeded,
            report.total,
            report.changed,
            report.failed,
            report.duration_ms,
        )
        return report

    async def _check_account(
        self,
        account: Account,
        network: Optional[Network],
        source: SnapshotSource,
        use_hint: bool,
    ) -> AccountCheckOutcome:
        self.states[account.id] = CheckState.FETCHING
        try:
            outcome = await self._reconciler.check(account, source, network=network, use_hint=use_hint)
        except WalletApiError as exc:
            logger.warning("Check failed for %s: %s", account.name, exc)
            outcome = AccountCheckOutcome(account=account, state=CheckState.FAILED, error=exc.code)
        except Exception as exc:  # pylint: disable=broad-except
            logger.exception("Unexpected error checking %s", account.name)
            outcome = AccountCheckOutcome(account=account, state=CheckState.FAILED, error=type(exc).__name__)
        self.states[account.id] = outcome.state
        return outcome

    async def start(self) -> None:
        logger.info("Starting balance poller...")
        await self.seed_cache()
        await self.refresh()
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def refresh(self) -> None:
        """Reconcile running loops with the current realtime-enabled networks."""
        async with self._session_factory() as session:
            networks = await AccountService.with_session(session).list_networks(realtime_only=True)
        self._sync_loops(networks)

    def _sync_loops(self, networks: Sequence[Network]) -> None:
        wanted = {network.id: network for network in networks}
        for network_id in list(self._tasks):
            interval = wanted[network_id].interval_seconds(self._settings.interval_seconds) if network_id in wanted else None
            if interval is None or interval != self._intervals.get(network_id):
                self._tasks.pop(network_id).cancel()
                self._intervals.pop(network_id, None)

        for network_id, network in wanted.items():
            if network_id in self._tasks:
                continue
            interval = network.interval_seconds(self._settings.interval_seconds)
            self._intervals[network_id] = interval
            self._tasks[network_id] = asyncio.create_task(self._network_loop(network, interval))
            logger.info("Started poller for %s (every %.1fs)", network.prefix, interval)

    async def _network_loop(self, network: Network, interval: float) -> None:
        try:
            while True:
                try:
                    await self.run_tick(network.id)
                except Exception:  # pylint: disable=broad-except
                    logger.exception("Error checking network %s", network.prefix)
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logger.debug("Poller for %s cancelled", network.prefix)
            raise

    async def _refresh_loop(self) -> None:
        while True:
            await asyncio.sleep(self._settings.refresh_seconds)
            try:
                await self.refresh()
            except Exception:  # pylint: disable=broad-except
                logger.exception("Error refreshing network pollers")

    async def stop(self) -> None:
        tasks = list(self._tasks.values())
        if self._refresh_task is not None:
            tasks.append(self._refresh_task)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._intervals.clear()
        self._refresh_task = None
        await self._reconciler.drain()
        logger.info("Balance pollers stopped")

    def is_running(self) -> bool:
        return bool(self._tasks)

    @property
    def network_ids(self) -> list[str]:
        return list(self._tasks)
