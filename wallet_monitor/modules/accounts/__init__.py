"""Account domain services and models."""

from .exceptions import AccountError, AccountNotFoundError, NetworkNotFoundError
from .models import Account, Network
from .service import AccountService, normalize_phone

__all__ = [
    "Account",
    "Network",
    "AccountService",
    "AccountError",
    "AccountNotFoundError",
    "NetworkNotFoundError",
    "normalize_phone",
]
