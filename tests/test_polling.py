import asyncio
from unittest.mock import AsyncMock

import pytest

from wallet_monitor.core.config import PollerSettings
from wallet_monitor.db import models as orm
from wallet_monitor.infrastructure.wallet import WalletApiStatusError, WalletApiUnreachableError
from wallet_monitor.interfaces.sse import BroadcastHub
from wallet_monitor.modules.accounts import AccountNotFoundError
from wallet_monitor.modules.balances import AccountLocks, SnapshotSource
from wallet_monitor.modules.polling import (
    BalanceReconciler,
    CheckState,
    ManualCheckService,
    PollScheduler,
)


class RecordingChannel:
    def __init__(self):
        self.frames = []

    async def send(self, frame):
        self.frames.append(frame)

    def close(self):
        pass


@pytest.fixture
def network_id(seed):
    return seed.network("beta")


def _reconciler(session_factory, fake_wallet, hub=None, fetch_timeout=0.2, notifier=None):
    return BalanceReconciler(
        session_factory,
        hub or BroadcastHub(),
        fake_wallet,
        AccountLocks(),
        fetch_timeout=fetch_timeout,
        notifier=notifier,
    )


class TestRunTick:
    def test_slow_account_fails_alone(self, session_factory, seed, fake_wallet, network_id):
        account_ids = [seed.account(network_id, f"acc-{index}", f"08100000{index:02d}") for index in range(5)]
        for index, account_id in enumerate(account_ids):
            fake_wallet.set_balance(account_id, 1000 + index)
        fake_wallet.delays[account_ids[2]] = 2.0

        scheduler = PollScheduler(
            _reconciler(session_factory, fake_wallet),
            session_factory,
            PollerSettings(batch_size=5),
        )
        report = asyncio.run(scheduler.run_tick())

        assert report.total == 5
        assert report.succeeded == 4
        assert report.failed == 1
        assert report.changed == 4
        failed = [outcome for outcome in report.results if outcome.state is CheckState.FAILED]
        assert failed[0].account.id == account_ids[2]
        assert failed[0].error == "WALLET_API_UNREACHABLE"
        assert report.duration_ms < 2000
        assert seed.count(orm.BalanceSnapshot) == 4

    def test_wallet_errors_are_isolated(self, session_factory, seed, fake_wallet, network_id):
        healthy = seed.account(network_id, "healthy")
        broken = seed.account(network_id, "broken")
        fake_wallet.set_balance(healthy, 500)
        fake_wallet.errors[broken] = WalletApiStatusError(500)

        scheduler = PollScheduler(_reconciler(session_factory, fake_wallet), session_factory, PollerSettings())
        report = asyncio.run(scheduler.run_tick())

        assert (report.succeeded, report.failed) == (1, 1)
        assert scheduler.states[healthy] is CheckState.CHANGED
        assert scheduler.states[broken] is CheckState.FAILED

    def test_unexpected_errors_are_isolated(self, session_factory, seed, fake_wallet, network_id):
        healthy = seed.account(network_id, "healthy")
        broken = seed.account(network_id, "broken")
        fake_wallet.set_balance(healthy, 500)
        fake_wallet.errors[broken] = RuntimeError("boom")

        scheduler = PollScheduler(_reconciler(session_factory, fake_wallet), session_factory, PollerSettings())
        report = asyncio.run(scheduler.run_tick())

        assert (report.succeeded, report.failed) == (1, 1)
        assert [outcome.error for outcome in report.results if not outcome.success] == ["RuntimeError"]

    def test_batches_are_bounded(self, session_factory, seed, fake_wallet, network_id):
        account_ids = [seed.account(network_id, f"acc-{index}") for index in range(7)]
        in_flight = {"now": 0, "peak": 0}
        scripted_fetch = fake_wallet.fetch_balance

        async def counting_fetch(account):
            in_flight["now"] += 1
            in_flight["peak"] = max(in_flight["peak"], in_flight["now"])
            await asyncio.sleep(0.01)
            in_flight["now"] -= 1
            return await scripted_fetch(account)

        fake_wallet.fetch_balance = counting_fetch
        scheduler = PollScheduler(
            _reconciler(session_factory, fake_wallet),
            session_factory,
            PollerSettings(batch_size=3),
        )
        report = asyncio.run(scheduler.run_tick())

        assert report.total == len(account_ids)
        assert in_flight["peak"] == 3

    def test_unchanged_balance_skips_store_and_broadcast(self, session_factory, seed, fake_wallet, network_id):
        account_id = seed.account(network_id, "steady")
        fake_wallet.set_balance(account_id, 700)

        async def scenario():
            hub = BroadcastHub()
            channel = RecordingChannel()
            await hub.subscribe(account_id, channel)
            scheduler = PollScheduler(_reconciler(session_factory, fake_wallet, hub), session_factory, PollerSettings())
            first = await scheduler.run_tick()
            second = await scheduler.run_tick()
            return first, second, channel

        first, second, channel = asyncio.run(scenario())

        assert first.changed == 1
        assert second.changed == 0
        assert second.results[0].state is CheckState.UNCHANGED
        assert seed.count(orm.BalanceSnapshot) == 1
        assert len(channel.frames) == 2

    def test_inactive_accounts_are_skipped(self, session_factory, seed, fake_wallet, network_id):
        seed.account(network_id, "active")
        seed.account(network_id, "paused", is_active=False)
        idle_network = seed.network("gamma", is_active=False)
        seed.account(idle_network, "orphan")

        scheduler = PollScheduler(_reconciler(session_factory, fake_wallet), session_factory, PollerSettings())
        report = asyncio.run(scheduler.run_tick())

        assert [outcome.account.name for outcome in report.results] == ["active"]


class TestSeedCache:
    def test_stored_balances_prevent_duplicate_first_write(self, session_factory, seed, fake_wallet, network_id):
        account_id = seed.account(network_id, "restart")
        fake_wallet.set_balance(account_id, 900)

        async def scenario():
            await PollScheduler(_reconciler(session_factory, fake_wallet), session_factory, PollerSettings()).run_tick()
            restarted = PollScheduler(_reconciler(session_factory, fake_wallet), session_factory, PollerSettings())
            seeded = await restarted.seed_cache()
            return seeded, await restarted.run_tick()

        seeded, report = asyncio.run(scenario())

        assert seeded == 1
        assert report.changed == 0
        assert seed.count(orm.BalanceSnapshot) == 1


class TestSchedulerLifecycle:
    def test_start_runs_per_network_loops(self, session_factory, seed, fake_wallet):
        fast = seed.network("fast", check_interval_ms=10)
        seed.network("quiet", realtime_enabled=False)
        account_id = seed.account(fast, "fast-main")
        fake_wallet.set_balance(account_id, 100)

        async def scenario():
            scheduler = PollScheduler(
                _reconciler(session_factory, fake_wallet),
                session_factory,
                PollerSettings(interval_seconds=60),
            )
            await scheduler.start()
            running = scheduler.network_ids
            await asyncio.sleep(0.1)
            await scheduler.stop()
            return running, scheduler.is_running()

        running, still_running = asyncio.run(scenario())

        assert running == [fast]
        assert still_running is False
        assert fake_wallet.calls.count(account_id) >= 2


class TestManualCheck:
    def test_manual_check_records_with_manual_source(self, session_factory, seed, fake_wallet, network_id):
        account_id = seed.account(network_id, "manual")
        fake_wallet.set_balance(account_id, 4321)
        service = ManualCheckService(_reconciler(session_factory, fake_wallet), session_factory)

        first = asyncio.run(service.check("beta", account_id))
        second = asyncio.run(service.check("beta", account_id))

        assert first.changed is True
        assert first.balance == 43.21
        assert second.changed is False
        rows = seed.rows(orm.BalanceSnapshot)
        assert [row.source for row in rows] == [SnapshotSource.MANUAL_CHECK.value]

    def test_manual_check_propagates_wallet_errors(self, session_factory, seed, fake_wallet, network_id):
        account_id = seed.account(network_id, "down")
        fake_wallet.errors[account_id] = WalletApiUnreachableError("refused")
        service = ManualCheckService(_reconciler(session_factory, fake_wallet), session_factory)

        with pytest.raises(WalletApiUnreachableError):
            asyncio.run(service.check("beta", account_id))
        assert seed.count(orm.BalanceSnapshot) == 0

    def test_account_from_another_network_is_not_found(self, session_factory, seed, fake_wallet, network_id):
        other = seed.network("delta")
        foreign = seed.account(other, "foreign")
        service = ManualCheckService(_reconciler(session_factory, fake_wallet), session_factory)

        with pytest.raises(AccountNotFoundError):
            asyncio.run(service.check("beta", foreign))


class TestNotifications:
    def test_polled_change_notifies_after_first_observation(self, session_factory, seed, fake_wallet):
        network_id = seed.network(
            "notify",
            telegram_enabled=True,
            telegram_bot_token="bot-token",
            telegram_chat_id="chat-1",
        )
        account_id = seed.account(network_id, "notify-main")
        notifier = AsyncMock()
        notifier.notify_balance_change.return_value = True
        reconciler = _reconciler(session_factory, fake_wallet, notifier=notifier)
        scheduler = PollScheduler(reconciler, session_factory, PollerSettings())

        async def scenario():
            fake_wallet.set_balance(account_id, 1000)
            await scheduler.run_tick()
            fake_wallet.set_balance(account_id, 1500)
            await scheduler.run_tick()
            await reconciler.drain()

        asyncio.run(scenario())

        notifier.notify_balance_change.assert_awaited_once()
        args = notifier.notify_balance_change.await_args.args
        assert args[2:] == (500, 1500)


class TestSerialization:
    def test_concurrent_pull_paths_write_one_snapshot(self, container, seed, fake_wallet, network_id):
        account_id = seed.account(network_id, "shared")
        fake_wallet.set_balance(account_id, 900)

        async def scenario():
            return await asyncio.gather(
                container.scheduler.run_tick(source=SnapshotSource.CRON_CHECK, use_hint=False),
                container.manual_checks.check("beta", account_id),
                container.manual_checks.check("beta", account_id),
                container.scheduler.run_tick(use_hint=False),
            )

        cron_report, first_manual, second_manual, poll_report = asyncio.run(scenario())

        changed = cron_report.changed + poll_report.changed + first_manual.changed + second_manual.changed
        assert changed == 1
        assert cron_report.failed == poll_report.failed == 0
        assert seed.count(orm.BalanceSnapshot) == 1
