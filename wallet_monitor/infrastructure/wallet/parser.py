"""Tolerant parsing of wallet balance responses.

The wallet API answers with one of two envelopes::

    {"data": {"balance": "12345", "mobile_no": "0812345678"}}
    {"balance": 12345, "mobile_no": "0812345678"}   # or "mobileNo"

Each layout is a strategy that either returns a :class:`WalletBalance` or
declines with ``None``; strategies are tried in order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional, Sequence

from .exceptions import WalletResponseParseError


@dataclass(slots=True)
class WalletBalance:
    balance_minor_units: int
    mobile_no: Optional[str] = None


def coerce_minor_units(value: Any) -> Optional[int]:
    """Read an integer minor-unit amount from an int, float or numeric string.

    NaN and infinities are not amounts and yield ``None``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
        return int(number) if number.is_finite() else None
    return None


def _first_text(source: dict[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = source.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def _nested_data_layout(body: dict[str, Any]) -> Optional[WalletBalance]:
    data = body.get("data")
    if not isinstance(data, dict):
        return None
    balance = coerce_minor_units(data.get("balance"))
    if balance is None:
        return None
    return WalletBalance(balance, _first_text(data, "mobile_no", "mobileNo"))


def _flat_layout(body: dict[str, Any]) -> Optional[WalletBalance]:
    balance = coerce_minor_units(body.get("balance"))
    if balance is None:
        return None
    return WalletBalance(balance, _first_text(body, "mobile_no", "mobileNo"))


BalanceStrategy = Callable[[dict[str, Any]], Optional[WalletBalance]]

BALANCE_STRATEGIES: Sequence[BalanceStrategy] = (_nested_data_layout, _flat_layout)


def parse_wallet_balance(
    body: Any,
    fallback_mobile: Optional[str] = None,
    strategies: Sequence[BalanceStrategy] = BALANCE_STRATEGIES,
) -> WalletBalance:
    if not isinstance(body, dict):
        raise WalletResponseParseError("wallet response is not a JSON object")
    for strategy in strategies:
        parsed = strategy(body)
        if parsed is not None:
            if parsed.mobile_no is None:
                parsed.mobile_no = fallback_mobile
            return parsed
    raise WalletResponseParseError("wallet response has no recognisable balance field")
