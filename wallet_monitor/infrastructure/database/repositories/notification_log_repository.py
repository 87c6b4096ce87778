"""SQLAlchemy repository for notification logs."""

from __future__ import annotations

import json

from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.db.models import NotificationLog as NotificationLogModel


class SqlNotificationLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_log(
        self,
        *,
        type: str,
        message: str,
        payload: dict | None,
        account_id: str | None,
    ) -> NotificationLogModel:
        model = NotificationLogModel(
            type=type,
            message=message,
            payload=json.dumps(payload, ensure_ascii=False, default=str) if payload else None,
            account_id=account_id,
        )
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return model
