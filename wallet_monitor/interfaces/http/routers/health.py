"""Liveness endpoint."""
from fastapi import APIRouter, Depends

from wallet_monitor import __version__
from wallet_monitor.interfaces.http.deps import get_hub, get_scheduler
from wallet_monitor.interfaces.sse.hub import BroadcastHub
from wallet_monitor.modules.polling import PollScheduler

router = APIRouter()


@router.get("/health", summary="Service health")
async def health(
    scheduler: PollScheduler = Depends(get_scheduler),
    hub: BroadcastHub = Depends(get_hub),
) -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "pollerRunning": scheduler.is_running(),
        "pollingNetworks": len(scheduler.network_ids),
        "streamClients": sum(hub.stats().values()),
    }
