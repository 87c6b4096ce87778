"""Notification log domain model."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from wallet_monitor.db import models as orm

WEBHOOK_DEBUG = "webhook_debug"
WEBHOOK_IGNORED = "webhook_ignored"
WEBHOOK_DISCARDED = "webhook_discarded"


@dataclass(slots=True)
class NotificationLogEntry:
    id: int
    type: str
    message: str
    payload: Optional[dict[str, Any]]
    account_id: Optional[str]
    created_at: datetime

    @classmethod
    def from_orm(cls, instance: orm.NotificationLog) -> "NotificationLogEntry":
        payload = None
        if instance.payload:
            try:
                payload = json.loads(instance.payload)
            except json.JSONDecodeError:
                payload = None
        return cls(
            id=int(instance.id),
            type=instance.type,
            message=instance.message or "",
            payload=payload,
            account_id=instance.account_id,
            created_at=instance.created_at,
        )
