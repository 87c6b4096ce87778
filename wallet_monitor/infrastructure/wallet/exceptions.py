"""Errors raised while talking to an account's wallet endpoint."""

from typing import Optional


class WalletApiError(Exception):
    """Base class for wallet endpoint failures."""

    code = "WALLET_API_FAILED"


class WalletApiUnreachableError(WalletApiError):
    """Raised when the endpoint could not be reached or did not answer in time."""

    code = "WALLET_API_UNREACHABLE"


class WalletApiStatusError(WalletApiError):
    """Raised when the endpoint answered with a non-2xx status."""

    code = "WALLET_API_ERROR"

    def __init__(self, status_code: int, message: Optional[str] = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"wallet API returned {status_code}")


class WalletResponseParseError(WalletApiError):
    """Raised when the response body matches none of the known balance layouts."""

    code = "WALLET_API_INVALID_RESPONSE"
