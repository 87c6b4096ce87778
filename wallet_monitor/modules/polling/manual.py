"""On-demand balance check for a single account."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from wallet_monitor.modules.accounts.service import AccountService
from wallet_monitor.modules.balances.models import SnapshotSource

from .models import AccountCheckOutcome
from .reconciler import BalanceReconciler

logger = logging.getLogger(__name__)


class ManualCheckService:
    """Runs the shared check sequence for one account with source ``manual_check``.

    Unlike a poll tick, failures are not folded into an outcome: the
    ``WalletApiError`` subclass or ``AccountNotFoundError`` reaches the caller
    so it can answer with a specific error code.
    """

    def __init__(
        self,
        reconciler: BalanceReconciler,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._reconciler = reconciler
        self._session_factory = session_factory

    async def check(self, prefix: str, account_id: str) -> AccountCheckOutcome:
        async with self._session_factory() as session:
            accounts = AccountService.with_session(session)
            network = await accounts.require_network(prefix)
            account = await accounts.require_account(account_id, network)

        logger.info("Manual balance check for %s (%s)", account.name, network.prefix)
        return await self._reconciler.check(account, SnapshotSource.MANUAL_CHECK, network=network)
