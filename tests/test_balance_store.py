import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from wallet_monitor.db import models as orm
from wallet_monitor.modules.balances import (
    AccountLocks,
    BalanceService,
    Direction,
    NewTransaction,
    SnapshotEntry,
    SnapshotSource,
    TransactionEntry,
)


@pytest.fixture
def account_id(seed):
    network_id = seed.network("alpha")
    return seed.account(network_id, "alpha-main", "0812345678")


def _transaction(account_id, transaction_id="tx-1", amount=5000, **overrides):
    fields = dict(
        transaction_id=transaction_id,
        account_id=account_id,
        amount_minor_units=amount,
        fee_minor_units=0,
        direction=Direction.INCOMING,
        raw_payload={"transaction_id": transaction_id, "amount": amount},
    )
    fields.update(overrides)
    return NewTransaction(**fields)


class TestRecordTransaction:
    def test_second_delivery_is_a_no_op(self, session_factory, seed, account_id):
        async def scenario():
            results = []
            for _ in range(2):
                async with session_factory() as session:
                    results.append(await BalanceService.with_session(session).record_transaction(_transaction(account_id)))
                    await session.commit()
            return results

        first, second = asyncio.run(scenario())

        assert first.created is True
        assert second.created is False
        assert second.transaction.transaction_id == "tx-1"
        assert seed.count(orm.FinancialTransaction) == 1

    def test_raw_payload_round_trips(self, session_factory, account_id):
        async def scenario():
            async with session_factory() as session:
                result = await BalanceService.with_session(session).record_transaction(
                    _transaction(account_id, raw_payload={"note": "ค่าอาหาร", "amount": 5000})
                )
                await session.commit()
                return result

        result = asyncio.run(scenario())
        assert result.transaction.raw_payload == {"note": "ค่าอาหาร", "amount": 5000}


class TestRecordSnapshotIfChanged:
    def test_only_changes_are_recorded(self, session_factory, seed, account_id):
        locks = AccountLocks()

        async def scenario():
            results = []
            for balance in [100, 100, 150, 150, 100]:
                async with session_factory() as session:
                    service = BalanceService.with_session(session, locks)
                    results.append(
                        await service.record_snapshot_if_changed(
                            account_id, balance, "0812345678", SnapshotSource.REALTIME_WORKER
                        )
                    )
            return results

        results = asyncio.run(scenario())

        assert [result.changed for result in results] == [True, False, True, False, True]
        assert seed.count(orm.BalanceSnapshot) == 3
        assert results[1].snapshot.balance_minor_units == 100
        assert results[2].change_minor_units == 50
        assert results[4].change_minor_units == -50

    def test_first_observation_is_recorded(self, session_factory, seed, account_id):
        async def scenario():
            async with session_factory() as session:
                return await BalanceService.with_session(session).record_snapshot_if_changed(
                    account_id, 0, None, SnapshotSource.MANUAL_CHECK
                )

        result = asyncio.run(scenario())

        assert result.changed is True
        assert result.previous_minor_units is None
        assert result.snapshot.source == "manual_check"
        assert seed.count(orm.BalanceSnapshot) == 1

    def test_service_keeps_the_shared_lock_table(self, session_factory):
        locks = AccountLocks()

        async def scenario():
            async with session_factory() as session:
                return BalanceService.with_session(session, locks)

        assert asyncio.run(scenario()).locks is locks

    def test_concurrent_writers_with_same_balance_write_once(self, session_factory, seed, account_id):
        locks = AccountLocks()

        async def write():
            async with session_factory() as session:
                return await BalanceService.with_session(session, locks).record_snapshot_if_changed(
                    account_id, 900, None, SnapshotSource.REALTIME_WORKER
                )

        async def scenario():
            return await asyncio.gather(*(write() for _ in range(4)))

        results = asyncio.run(scenario())

        assert sum(1 for result in results if result.changed) == 1
        assert seed.count(orm.BalanceSnapshot) == 1

    def test_snapshots_are_strictly_ordered(self, session_factory, seed, account_id):
        locks = AccountLocks()

        async def scenario():
            for balance in range(1, 6):
                async with session_factory() as session:
                    await BalanceService.with_session(session, locks).record_snapshot_if_changed(
                        account_id, balance, None, SnapshotSource.REALTIME_WORKER
                    )
            async with session_factory() as session:
                return await BalanceService.with_session(session).get_latest_balance(account_id)

        latest = asyncio.run(scenario())
        rows = sorted(seed.rows(orm.BalanceSnapshot), key=lambda row: row.id)

        assert latest.balance_minor_units == 5
        checked = [row.checked_at for row in rows]
        assert checked == sorted(checked)
        assert len(set(checked)) == len(checked)

    def test_latest_balance_is_none_before_first_observation(self, session_factory, account_id):
        async def scenario():
            async with session_factory() as session:
                return await BalanceService.with_session(session).get_latest_balance(account_id)

        assert asyncio.run(scenario()) is None


class TestHistory:
    def test_merges_transactions_and_snapshots_newest_first(self, session_factory, account_id):
        now = datetime.now(timezone.utc)

        async def scenario():
            async with session_factory() as session:
                service = BalanceService.with_session(session)
                await service.record_transaction(_transaction(account_id, "tx-old", timestamp=now - timedelta(hours=1)))
                await service.record_transaction(_transaction(account_id, "tx-new", timestamp=now + timedelta(hours=1)))
                await session.commit()
                await service.record_snapshot_if_changed(account_id, 2500, None, SnapshotSource.MANUAL_CHECK)

            async with session_factory() as session:
                service = BalanceService.with_session(session)
                first = await service.get_history(account_id, page=1, page_size=2)
                second = await service.get_history(account_id, page=2, page_size=2)
            return first, second

        first, second = asyncio.run(scenario())

        assert first.total == 3
        assert first.total_pages == 2
        assert isinstance(first.entries[0], TransactionEntry)
        assert first.entries[0].transaction.transaction_id == "tx-new"
        assert isinstance(first.entries[1], SnapshotEntry)
        assert len(second.entries) == 1
        assert second.entries[0].transaction.transaction_id == "tx-old"

    def test_time_range_filters_both_kinds(self, session_factory, account_id):
        now = datetime.now(timezone.utc)

        async def scenario():
            async with session_factory() as session:
                service = BalanceService.with_session(session)
                await service.record_transaction(_transaction(account_id, "tx-early", timestamp=now - timedelta(days=2)))
                await service.record_transaction(_transaction(account_id, "tx-late", timestamp=now - timedelta(hours=2)))
                await session.commit()
                await service.record_snapshot_if_changed(account_id, 10, None, SnapshotSource.CRON_CHECK)

            async with session_factory() as session:
                return await BalanceService.with_session(session).get_history(
                    account_id,
                    from_time=now - timedelta(days=1),
                    to_time=now - timedelta(hours=1),
                )

        page = asyncio.run(scenario())

        assert page.total == 1
        assert [entry.transaction.transaction_id for entry in page.entries] == ["tx-late"]
