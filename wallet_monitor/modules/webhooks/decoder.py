"""Unwrap token envelopes posted by the wallet network."""

from __future__ import annotations

import logging
from typing import Any

from jose import jwt
from jose.exceptions import JOSEError

logger = logging.getLogger(__name__)


def is_token_envelope(body: Any) -> bool:
    if not isinstance(body, dict):
        return False
    message = body.get("message")
    return isinstance(message, str) and message.count(".") == 2


def decode_envelope(body: Any) -> tuple[dict[str, Any], bool]:
    """Return ``(payload, decoded)``.

    ``{"message": "<header>.<claims>.<signature>"}`` yields the claims segment.
    The signature is not verified. Anything else, including an envelope that
    fails to decode, is returned as the payload itself.
    """
    if not is_token_envelope(body):
        return (body if isinstance(body, dict) else {}), False
    try:
        claims = jwt.get_unverified_claims(body["message"])
    except JOSEError as exc:
        logger.warning("Failed to decode webhook token envelope: %s", exc)
        return body, False
    return dict(claims), True
