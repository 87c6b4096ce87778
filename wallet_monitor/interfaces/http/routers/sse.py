"""Server-sent event streams of live balance updates."""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import StreamingResponse

from wallet_monitor.core.errors import ACCOUNT_NOT_FOUND, api_error
from wallet_monitor.interfaces.http.deps import get_account_service, get_hub
from wallet_monitor.interfaces.sse.hub import BroadcastHub, QueueChannel, Subscription
from wallet_monitor.modules.accounts import AccountService
from wallet_monitor.schemas import StreamStatusResponse

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


async def _stream(hub: BroadcastHub, subscription: Subscription, channel: QueueChannel):
    try:
        while True:
            frame = await channel.receive()
            if frame is None:
                break
            yield frame
    finally:
        hub.unsubscribe(subscription)


@router.get("/balance/{account_id}", summary="Stream live balance events for an account")
async def balance_stream(
    account_id: str,
    hub: BroadcastHub = Depends(get_hub),
    accounts: AccountService = Depends(get_account_service),
) -> StreamingResponse:
    if await accounts.get_account(account_id) is None:
        raise api_error(status.HTTP_404_NOT_FOUND, ACCOUNT_NOT_FOUND, f"Account {account_id} not found")

    channel = hub.open_channel()
    subscription = await hub.subscribe(account_id, channel)
    return StreamingResponse(
        _stream(hub, subscription, channel),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get("/status", response_model=StreamStatusResponse, summary="Connected stream clients per account")
async def stream_status(hub: BroadcastHub = Depends(get_hub)) -> StreamStatusResponse:
    return StreamStatusResponse(clients=hub.stats())
