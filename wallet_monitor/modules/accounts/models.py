"""Domain models for networks and wallet accounts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(slots=True)
class Network:
    id: str
    name: str
    prefix: str
    is_active: bool = True
    realtime_enabled: bool = True
    check_interval_ms: Optional[int] = None
    webhook_enabled: bool = True
    telegram_enabled: bool = False
    telegram_bot_token: Optional[str] = field(default=None, repr=False)
    telegram_chat_id: Optional[str] = None
    notify_money_in: bool = True
    notify_money_out: bool = True
    notify_min_amount: int = 0

    def interval_seconds(self, default: float) -> float:
        if self.check_interval_ms and self.check_interval_ms > 0:
            return self.check_interval_ms / 1000.0
        return default

    def telegram_configured(self) -> bool:
        return bool(self.telegram_enabled and self.telegram_bot_token and self.telegram_chat_id)


@dataclass(slots=True)
class Account:
    id: str
    network_id: str
    name: str
    wallet_endpoint_url: str
    wallet_bearer_token: str = field(repr=False)
    phone_number: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
