"""Container backed dependency providers."""

from fastapi import Depends, Request

from wallet_monitor.core.container import ApplicationContainer
from wallet_monitor.interfaces.sse.hub import BroadcastHub
from wallet_monitor.modules.polling import ManualCheckService, PollScheduler
from wallet_monitor.modules.webhooks import WebhookIngestor


def get_app_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


def get_hub(container: ApplicationContainer = Depends(get_app_container)) -> BroadcastHub:
    return container.hub


def get_scheduler(container: ApplicationContainer = Depends(get_app_container)) -> PollScheduler:
    return container.scheduler


def get_manual_checks(container: ApplicationContainer = Depends(get_app_container)) -> ManualCheckService:
    return container.manual_checks


def get_webhook_ingestor(container: ApplicationContainer = Depends(get_app_container)) -> WebhookIngestor:
    return container.webhooks


__all__ = [
    "get_app_container",
    "get_hub",
    "get_manual_checks",
    "get_scheduler",
    "get_webhook_ingestor",
]
