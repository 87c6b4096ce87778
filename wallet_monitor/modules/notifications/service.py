"""Domain service for the diagnostic notification log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.db.models import NotificationLog as NotificationLogModel

from .models import NotificationLogEntry
from .repository import NotificationLogRepository


@dataclass(slots=True)
class NotificationLogService:
    repository: NotificationLogRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "NotificationLogService":
        from wallet_monitor.infrastructure.database.repositories.notification_log_repository import (
            SqlNotificationLogRepository,
        )

        return cls(SqlNotificationLogRepository(session))

    async def create_log(
        self,
        *,
        type: str,
        message: str,
        payload: Optional[dict] = None,
        account_id: Optional[str] = None,
    ) -> NotificationLogEntry:
        model = await self.repository.add_log(
            type=type,
            message=message,
            payload=payload,
            account_id=account_id,
        )
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: NotificationLogModel) -> NotificationLogEntry:
        return NotificationLogEntry.from_orm(model)
