"""Push-side reconciliation: inbound wallet webhooks."""

from .decoder import decode_envelope
from .exceptions import WebhookError, WebhookPersistenceError
from .extraction import FEE_PAYMENT, WebhookEvent, extract_event
from .idempotency import derive_transaction_id
from .models import IngestResult, IngestStage
from .service import WebhookIngestor

__all__ = [
    "FEE_PAYMENT",
    "IngestResult",
    "IngestStage",
    "WebhookError",
    "WebhookEvent",
    "WebhookIngestor",
    "WebhookPersistenceError",
    "decode_envelope",
    "derive_transaction_id",
    "extract_event",
]
