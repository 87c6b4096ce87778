"""Outcome types for balance checks and poll ticks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from wallet_monitor.modules.accounts.models import Account
from wallet_monitor.modules.balances.models import to_major_units


class CheckState(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    UNCHANGED = "unchanged"
    CHANGED = "changed"
    FAILED = "failed"


@dataclass(slots=True)
class AccountCheckOutcome:
    account: Account
    state: CheckState
    balance_minor_units: Optional[int] = None
    mobile_no: Optional[str] = None
    checked_at: Optional[datetime] = None
    change_minor_units: int = 0
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state in (CheckState.UNCHANGED, CheckState.CHANGED)

    @property
    def changed(self) -> bool:
        return self.state is CheckState.CHANGED

    @property
    def balance(self) -> Optional[float]:
        if self.balance_minor_units is None:
            return None
        return to_major_units(self.balance_minor_units)


@dataclass(slots=True)
class TickReport:
    total: int = 0
    succeeded: int = 0
    changed: int = 0
    failed: int = 0
    duration_ms: int = 0
    results: list[AccountCheckOutcome] = field(default_factory=list)

    def add(self, outcome: AccountCheckOutcome) -> None:
        self.results.append(outcome)
        self.total += 1
        if outcome.success:
            self.succeeded += 1
        else:
            self.failed += 1
        if outcome.changed:
            self.changed += 1
