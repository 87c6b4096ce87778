"""Pydantic schemas used across the project."""
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TransactionInfo(CamelModel):
    transaction_id: str
    amount: float
    fee: float
    amount_minor_units: int
    fee_minor_units: int
    type: str


class BalanceStreamEvent(CamelModel):
    type: Literal["initial", "update"]
    balance: Optional[float] = None
    balance_minor_units: Optional[int] = None
    change: Optional[float] = None
    change_minor_units: Optional[int] = None
    checked_at: Optional[datetime] = None
    transaction: Optional[TransactionInfo] = None


class BalanceCheckResponse(CamelModel):
    balance: float
    balance_minor_units: int
    mobile_no: Optional[str] = None
    checked_at: datetime
    changed: bool


class LatestBalanceResponse(CamelModel):
    account_id: str
    has_data: bool
    balance: Optional[float] = None
    balance_minor_units: Optional[int] = None
    mobile_no: Optional[str] = None
    source: Optional[str] = None
    checked_at: Optional[datetime] = None


class HistoryItem(CamelModel):
    kind: Literal["transaction", "snapshot"]
    id: str
    timestamp: datetime
    balance: Optional[float] = None
    balance_minor_units: Optional[int] = None
    source: Optional[str] = None
    transaction_id: Optional[str] = None
    amount: Optional[float] = None
    amount_minor_units: Optional[int] = None
    fee: Optional[float] = None
    fee_minor_units: Optional[int] = None
    direction: Optional[str] = None
    status: Optional[str] = None
    sender_mobile: Optional[str] = None
    recipient_mobile: Optional[str] = None


class HistoryResponse(CamelModel):
    items: list[HistoryItem]
    total: int
    page: int
    page_size: int
    total_pages: int


class AccountCheckItem(CamelModel):
    account_id: str
    name: str
    state: str
    success: bool
    changed: bool
    balance_minor_units: Optional[int] = None
    error: Optional[str] = None


class TickReportResponse(CamelModel):
    total: int
    success: int
    changed: int
    failed: int
    duration: int = Field(..., description="milliseconds")
    results: list[AccountCheckItem] = Field(default_factory=list)


class WebhookAck(BaseModel):
    status: Literal["ok", "ignored", "discarded"]
    message: Optional[str] = None
    reason: Optional[str] = None


class StreamStatusResponse(BaseModel):
    ok: bool = True
    clients: dict[str, int]


class ErrorResponse(BaseModel):
    ok: bool = False
    error: str
    message: Optional[str] = None
    fields: Optional[list[dict[str, Any]]] = None
