"""Webhook ingestion errors."""


class WebhookError(Exception):
    """Base class for webhook ingestion errors."""


class WebhookPersistenceError(WebhookError):
    """Raised when a matched event could not be written; the sender should retry."""
