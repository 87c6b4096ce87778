import asyncio
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.pool import NullPool

from wallet_monitor.core.config import DatabaseSettings, PollerSettings, Settings
from wallet_monitor.core.container import build_container
from wallet_monitor.db import models as orm
from wallet_monitor.infrastructure.database.session import build_engine, create_session_factory, init_db
from wallet_monitor.infrastructure.wallet import WalletBalance
from wallet_monitor.main import create_app


class FakeWalletClient:
    """Wallet client returning scripted balances, failures or delays per account."""

    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.errors: Dict[str, Exception] = {}
        self.delays: Dict[str, float] = {}
        self.calls = []

    def set_balance(self, account_id: str, minor_units: int, *, delay: float = 0.0):
        self.balances[account_id] = minor_units
        if delay:
            self.delays[account_id] = delay

    async def fetch_balance(self, account):
        self.calls.append(account.id)
        delay = self.delays.get(account.id)
        if delay:
            await asyncio.sleep(delay)
        error = self.errors.get(account.id)
        if error is not None:
            raise error
        return WalletBalance(self.balances.get(account.id, 0), account.phone_number)


class Seeder:
    """Synchronous helpers for inserting fixture rows."""

    def __init__(self, session_factory):
        self.session_factory = session_factory

    def network(self, prefix: str, **fields) -> str:
        async def _create():
            async with self.session_factory() as session:
                network = orm.Network(name=prefix.upper(), prefix=prefix, **fields)
                session.add(network)
                await session.commit()
                return network.id

        return asyncio.run(_create())

    def account(self, network_id: str, name: str, phone: Optional[str] = None, **fields) -> str:
        async def _create():
            async with self.session_factory() as session:
                account = orm.Account(
                    network_id=network_id,
                    name=name,
                    wallet_endpoint_url=f"https://wallet.example/{name}",
                    wallet_bearer_token=f"token-{name}",
                    phone_number=phone,
                    **fields,
                )
                session.add(account)
                await session.commit()
                return account.id

        return asyncio.run(_create())

    def count(self, model) -> int:
        async def _count():
            async with self.session_factory() as session:
                result = await session.execute(select(func.count()).select_from(model))
                return int(result.scalar_one())

        return asyncio.run(_count())

    def rows(self, model):
        async def _rows():
            async with self.session_factory() as session:
                result = await session.execute(select(model))
                return list(result.scalars().all())

        return asyncio.run(_rows())


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'wallet_monitor_test.db'}"


@pytest.fixture
def engine(database_url):
    """File backed SQLite engine; NullPool keeps connections out of finished event loops."""
    engine = build_engine(database_url, poolclass=NullPool)
    asyncio.run(init_db(engine))
    yield engine
    asyncio.run(engine.dispose())


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def seed(session_factory):
    return Seeder(session_factory)


@pytest.fixture
def fake_wallet():
    return FakeWalletClient()


@pytest.fixture
def settings(database_url):
    return Settings(
        environment="test",
        database=DatabaseSettings(url=database_url),
        poller=PollerSettings(enabled=False, fetch_timeout=0.5),
    )


@pytest.fixture
def container(settings, engine, fake_wallet):
    return build_container(settings, engine=engine, wallet_client=fake_wallet)


@pytest.fixture
def client(container):
    with TestClient(create_app(container)) as test_client:
        yield test_client
