"""Repository protocol for persisting notification logs."""

from __future__ import annotations

from typing import Protocol

from wallet_monitor.db.models import NotificationLog as NotificationLogModel


class NotificationLogRepository(Protocol):
    async def add_log(
        self,
        *,
        type: str,
        message: str,
        payload: dict | None,
        account_id: str | None,
    ) -> NotificationLogModel:
        ...
