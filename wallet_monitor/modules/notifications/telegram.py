"""Telegram notifications for polled balance changes."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

import requests

from wallet_monitor.core.config import TelegramSettings
from wallet_monitor.modules.accounts.models import Account, Network

logger = logging.getLogger(__name__)


def should_notify(network: Network, change_minor_units: int) -> bool:
    if not network.telegram_configured() or change_minor_units == 0:
        return False
    if change_minor_units > 0 and not network.notify_money_in:
        return False
    if change_minor_units < 0 and not network.notify_money_out:
        return False
    return abs(change_minor_units) >= network.notify_min_amount


def _format_baht(minor_units: int) -> str:
    return f"{minor_units / 100:,.2f}"


class TelegramNotifier:
    def __init__(self, settings: TelegramSettings, session: Optional[requests.Session] = None) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    def build_message(
        self,
        account: Account,
        change_minor_units: int,
        balance_minor_units: int,
        at: Optional[datetime] = None,
    ) -> str:
        money_in = change_minor_units > 0
        local_time = (at or datetime.now(timezone.utc)).astimezone(ZoneInfo(self._settings.timezone))
        sign = "+" if money_in else ""
        return "\n".join(
            [
                f"{'💚' if money_in else '❤️'} <b>{'เงินเข้า' if money_in else 'เงินออก'}</b>",
                "",
                f"💳 บัญชี: {account.name}",
                f"📱 เบอร์: {account.phone_number or '-'}",
                f"💰 จำนวน: <b>{sign}{_format_baht(change_minor_units)} บาท</b>",
                f"🏦 ยอดคงเหลือ: {_format_baht(balance_minor_units)} บาท",
                f"⏰ เวลา: {local_time.strftime('%d/%m/%Y %H:%M:%S')}",
            ]
        )

    async def notify_balance_change(
        self,
        network: Network,
        account: Account,
        change_minor_units: int,
        balance_minor_units: int,
    ) -> bool:
        """Send a change message when the network's notification rules allow it.

        Delivery failures are logged and reported as ``False``; they never reach
        the polling loop.
        """
        if not should_notify(network, change_minor_units):
            return False

        url = f"{self._settings.api_base}/bot{network.telegram_bot_token}/sendMessage"
        body = {
            "chat_id": network.telegram_chat_id,
            "text": self.build_message(account, change_minor_units, balance_minor_units),
            "parse_mode": "HTML",
        }
        try:
            response = await asyncio.to_thread(
                self._session.post, url, json=body, timeout=self._settings.timeout
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Telegram notification failed for %s: %s", account.name, exc)
            return False

        logger.info("Telegram sent for %s: %s", account.name, _format_baht(change_minor_units))
        return True
