"""HTTP client for per-account wallet balance endpoints."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

import requests

from wallet_monitor.modules.accounts.models import Account

from .exceptions import WalletApiStatusError, WalletApiUnreachableError, WalletResponseParseError
from .parser import WalletBalance, parse_wallet_balance

logger = logging.getLogger(__name__)


class WalletClient(Protocol):
    async def fetch_balance(self, account: Account) -> WalletBalance:
        ...


class WalletApiClient:
    """Fetch balances with ``requests`` on a worker thread."""

    def __init__(self, timeout: float = 10.0, http: Optional[Any] = None) -> None:
        self._timeout = timeout
        self._http = http or requests

    def _get(self, account: Account) -> requests.Response:
        return self._http.get(
            account.wallet_endpoint_url,
            headers={
                "Authorization": f"Bearer {account.wallet_bearer_token}",
                "Content-Type": "application/json",
            },
            timeout=self._timeout,
        )

    async def fetch_balance(self, account: Account) -> WalletBalance:
        try:
            response = await asyncio.to_thread(self._get, account)
        except requests.RequestException as exc:
            logger.warning("Wallet API unreachable for %s: %s", account.name, exc)
            raise WalletApiUnreachableError(str(exc)) from exc

        if not response.ok:
            logger.warning("Wallet API error for %s: %s", account.name, response.status_code)
            raise WalletApiStatusError(response.status_code)

        try:
            body = response.json()
        except ValueError as exc:
            raise WalletResponseParseError("wallet response is not valid JSON") from exc
        return parse_wallet_balance(body, account.phone_number)
