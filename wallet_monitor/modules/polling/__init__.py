"""Pull-side reconciliation: periodic polling and manual checks."""

from .manual import ManualCheckService
from .models import AccountCheckOutcome, CheckState, TickReport
from .reconciler import BalanceReconciler
from .scheduler import PollScheduler

__all__ = [
    "AccountCheckOutcome",
    "BalanceReconciler",
    "CheckState",
    "ManualCheckService",
    "PollScheduler",
    "TickReport",
]
