"""SQLAlchemy-backed repository implementations."""

from .account_repository import SqlAccountRepository
from .balance_repository import SqlBalanceRepository
from .notification_log_repository import SqlNotificationLogRepository

__all__ = [
    "SqlAccountRepository",
    "SqlBalanceRepository",
    "SqlNotificationLogRepository",
]
