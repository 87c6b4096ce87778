"""Schema-tolerant field extraction for inbound wallet events.

Each field is read through an ordered list of strategies. A strategy either
returns a value or declines with ``None``; the first value wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Sequence

from wallet_monitor.infrastructure.wallet.parser import coerce_minor_units
from wallet_monitor.modules.accounts.service import normalize_phone
from wallet_monitor.modules.balances.models import Direction

logger = logging.getLogger(__name__)

FEE_PAYMENT = "FEE_PAYMENT"

Strategy = Callable[[dict[str, Any]], Any]

_INCOMING_TYPES = {"incoming", "creditor", "credit", "in", "p2p_in", "receive"}
_OUTGOING_TYPES = {"outgoing", "debtor", "debit", "out", "p2p_out", "transfer"}


def key(name: str) -> Strategy:
    def _read(payload: dict[str, Any]) -> Any:
        value = payload.get(name)
        if value is None or value == "":
            return None
        return value

    _read.__name__ = f"key_{name}"
    return _read


def first_value(payload: dict[str, Any], strategies: Sequence[Strategy]) -> Any:
    for strategy in strategies:
        value = strategy(payload)
        if value is not None:
            return value
    return None


AMOUNT_FIELDS: Sequence[Strategy] = (key("amount"), key("amount_net"))
FEE_FIELDS: Sequence[Strategy] = (key("fee"), key("transaction_fee"))
RECIPIENT_MOBILE_FIELDS: Sequence[Strategy] = (key("recipient_mobile"), key("receiver_mobile"))
SENDER_MOBILE_FIELDS: Sequence[Strategy] = (key("sender_mobile"), key("payer_mobile"))
GENERIC_MOBILE_FIELDS: Sequence[Strategy] = (key("mobile_no"), key("mobileNo"), key("mobile"))
EVENT_TYPE_FIELDS: Sequence[Strategy] = (key("event_type"), key("eventType"))
TRANSACTION_TYPE_FIELDS: Sequence[Strategy] = (key("transaction_type"), key("transactionType"))
TRANSACTION_DATE_FIELDS: Sequence[Strategy] = (
    key("transaction_date"),
    key("received_time"),
    key("created_at"),
)
STATUS_FIELDS: Sequence[Strategy] = (key("status"),)
SENDER_NAME_FIELDS: Sequence[Strategy] = (key("sender_name"),)
RECIPIENT_NAME_FIELDS: Sequence[Strategy] = (key("recipient_name"), key("receiver_name"))


@dataclass(slots=True)
class WebhookEvent:
    """Normalized view of one inbound event; amounts in minor units."""

    amount_minor_units: int
    fee_minor_units: int
    direction: Direction
    event_type: Optional[str] = None
    status: str = "SUCCESS"
    timestamp: Optional[datetime] = None
    recipient_mobile: Optional[str] = None
    sender_mobile: Optional[str] = None
    generic_mobile: Optional[str] = None
    recipient_name: Optional[str] = None
    sender_name: Optional[str] = None

    @property
    def is_fee_payment(self) -> bool:
        return self.event_type == FEE_PAYMENT

    @property
    def change_minor_units(self) -> int:
        """Signed balance movement implied by the event."""
        if self.is_fee_payment:
            return -self.fee_minor_units
        if self.direction is Direction.OUTGOING:
            return -(self.amount_minor_units + self.fee_minor_units)
        return self.amount_minor_units


def parse_direction(value: Any, amount_minor_units: int) -> Direction:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _INCOMING_TYPES:
            return Direction.INCOMING
        if lowered in _OUTGOING_TYPES:
            return Direction.OUTGOING
    return Direction.INCOMING if amount_minor_units > 0 else Direction.OUTGOING


def parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > 10**11 else value
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable transaction date %r", value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def extract_event(payload: dict[str, Any]) -> WebhookEvent:
    amount = coerce_minor_units(first_value(payload, AMOUNT_FIELDS)) or 0
    fee = coerce_minor_units(first_value(payload, FEE_FIELDS)) or 0
    event_type = first_value(payload, EVENT_TYPE_FIELDS)
    event = WebhookEvent(
        amount_minor_units=amount,
        fee_minor_units=fee,
        direction=parse_direction(first_value(payload, TRANSACTION_TYPE_FIELDS), amount),
        event_type=str(event_type) if event_type is not None else None,
        status=str(first_value(payload, STATUS_FIELDS) or "SUCCESS"),
        timestamp=parse_timestamp(first_value(payload, TRANSACTION_DATE_FIELDS)),
        recipient_mobile=normalize_phone(first_value(payload, RECIPIENT_MOBILE_FIELDS)),
        sender_mobile=normalize_phone(first_value(payload, SENDER_MOBILE_FIELDS)),
        generic_mobile=normalize_phone(first_value(payload, GENERIC_MOBILE_FIELDS)),
        recipient_name=first_value(payload, RECIPIENT_NAME_FIELDS),
        sender_name=first_value(payload, SENDER_NAME_FIELDS),
    )
    if event.is_fee_payment:
        # The event's amount is the fee that was charged.
        event.fee_minor_units = event.amount_minor_units
        event.direction = Direction.OUTGOING
    return event
