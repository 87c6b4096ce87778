"""Per-request ingest stages and results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from wallet_monitor.modules.balances.models import FinancialTransaction


class IngestStage(str, Enum):
    RECEIVED = "received"
    DECODED = "decoded"
    ACCOUNT_MATCHED = "account_matched"
    RECORDED = "recorded"
    ACKNOWLEDGED = "acknowledged"
    HANDSHAKE = "handshake"
    IGNORED = "ignored"
    DISCARDED = "discarded"


@dataclass(slots=True)
class IngestResult:
    stage: IngestStage
    status: str = "ok"
    message: Optional[str] = None
    reason: Optional[str] = None
    transaction: Optional[FinancialTransaction] = None
    duplicate: bool = False

    @classmethod
    def handshake(cls) -> "IngestResult":
        return cls(IngestStage.HANDSHAKE, message="Handshake accepted")

    @classmethod
    def ignored(cls, reason: str) -> "IngestResult":
        return cls(IngestStage.IGNORED, status="ignored", reason=reason)

    @classmethod
    def discarded(cls) -> "IngestResult":
        return cls(IngestStage.DISCARDED, status="discarded", reason="Webhook persistence disabled for network")
