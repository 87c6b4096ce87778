"""Per-account async locks serialising read-decide-write on snapshots."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class AccountLocks:
    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}

    def get(self, account_id: str) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        return lock

    @asynccontextmanager
    async def hold(self, account_id: str) -> AsyncIterator[None]:
        async with self.get(account_id):
            yield
