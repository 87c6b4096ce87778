"""Inbound wallet webhook endpoint."""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from wallet_monitor.interfaces.http.deps import get_webhook_ingestor
from wallet_monitor.modules.accounts import NetworkNotFoundError
from wallet_monitor.modules.webhooks import WebhookIngestor, WebhookPersistenceError
from wallet_monitor.schemas import WebhookAck

logger = logging.getLogger(__name__)

router = APIRouter()

ACCEPTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/{prefix}", methods=ACCEPTED_METHODS, summary="Receive wallet push notifications")
async def receive_webhook(
    prefix: str,
    request: Request,
    mobile: Optional[str] = Query(None, max_length=32),
    ingestor: WebhookIngestor = Depends(get_webhook_ingestor),
):
    logger.info("Webhook %s request for prefix %s", request.method, prefix)
    if request.method in ("GET", "HEAD"):
        return WebhookAck(status="ok", message="Ready to receive webhooks").model_dump(exclude_none=True)
    if request.method != "POST":
        return JSONResponse(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, content={"error": "Method Not Allowed"})

    try:
        body = await request.json()
    except ValueError:
        logger.warning("Webhook for %s has a non-JSON body", prefix)
        body = {}

    try:
        result = await ingestor.ingest(prefix, body, mobile_override=mobile)
    except NetworkNotFoundError:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"error": "Network not found"})
    except WebhookPersistenceError:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal processing error"},
        )

    ack = WebhookAck(status=result.status, message=result.message, reason=result.reason)
    return ack.model_dump(exclude_none=True)
