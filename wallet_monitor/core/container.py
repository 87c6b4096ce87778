"""Simple dependency container for wiring core services."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from wallet_monitor.core.config import Settings, get_settings
from wallet_monitor.infrastructure.database.session import create_session_factory, get_engine
from wallet_monitor.infrastructure.wallet import WalletApiClient, WalletClient
from wallet_monitor.interfaces.sse.hub import BroadcastHub, LatestLoader
from wallet_monitor.modules.balances.locks import AccountLocks
from wallet_monitor.modules.balances.models import BalanceSnapshot
from wallet_monitor.modules.balances.service import BalanceService
from wallet_monitor.modules.notifications.telegram import TelegramNotifier
from wallet_monitor.modules.polling import BalanceReconciler, ManualCheckService, PollScheduler
from wallet_monitor.modules.webhooks import WebhookIngestor


@dataclass(slots=True)
class ApplicationContainer:
    """Owns the process-wide collaborators: one hub, one lock table, one scheduler."""

    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    locks: AccountLocks
    hub: BroadcastHub
    reconciler: BalanceReconciler
    scheduler: PollScheduler
    manual_checks: ManualCheckService
    webhooks: WebhookIngestor

    async def startup(self) -> None:
        self.hub.start()
        if self.settings.poller.enabled:
            await self.scheduler.start()

    async def shutdown(self) -> None:
        await self.scheduler.stop()
        await self.hub.stop()


def _latest_loader(session_factory: async_sessionmaker[AsyncSession]) -> LatestLoader:
    async def load(account_id: str) -> Optional[BalanceSnapshot]:
        async with session_factory() as session:
            return await BalanceService.with_session(session).get_latest_balance(account_id)

    return load


def build_container(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[AsyncEngine] = None,
    wallet_client: Optional[WalletClient] = None,
    notifier: Optional[TelegramNotifier] = None,
) -> ApplicationContainer:
    settings = settings or get_settings()
    engine = engine or get_engine()
    session_factory = create_session_factory(engine)
    locks = AccountLocks()

    hub = BroadcastHub(
        _latest_loader(session_factory),
        heartbeat_interval=settings.broadcast.heartbeat_interval,
        stale_grace=settings.broadcast.stale_grace,
        queue_size=settings.broadcast.queue_size,
    )
    reconciler = BalanceReconciler(
        session_factory,
        hub,
        wallet_client or WalletApiClient(timeout=settings.poller.fetch_timeout),
        locks,
        fetch_timeout=settings.poller.fetch_timeout,
        notifier=notifier or TelegramNotifier(settings.telegram),
    )
    return ApplicationContainer(
        settings=settings,
        engine=engine,
        session_factory=session_factory,
        locks=locks,
        hub=hub,
        reconciler=reconciler,
        scheduler=PollScheduler(reconciler, session_factory, settings.poller),
        manual_checks=ManualCheckService(reconciler, session_factory),
        webhooks=WebhookIngestor(session_factory, hub, log_payloads=settings.webhook.log_payloads),
    )


@lru_cache()
def get_container() -> ApplicationContainer:
    return build_container(get_settings())


__all__ = ["ApplicationContainer", "build_container", "get_container"]
