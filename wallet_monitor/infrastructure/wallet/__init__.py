"""Outbound wallet endpoint access."""

from .client import WalletApiClient, WalletClient
from .exceptions import (
    WalletApiError,
    WalletApiStatusError,
    WalletApiUnreachableError,
    WalletResponseParseError,
)
from .parser import WalletBalance, coerce_minor_units, parse_wallet_balance

__all__ = [
    "WalletApiClient",
    "WalletClient",
    "WalletApiError",
    "WalletApiStatusError",
    "WalletApiUnreachableError",
    "WalletResponseParseError",
    "WalletBalance",
    "coerce_minor_units",
    "parse_wallet_balance",
]
