"""Reusable FastAPI dependencies."""

from .account import get_account_service, get_tenant_account
from .container import get_app_container, get_hub, get_manual_checks, get_scheduler, get_webhook_ingestor
from .database import get_db_session

__all__ = [
    "get_account_service",
    "get_app_container",
    "get_db_session",
    "get_hub",
    "get_manual_checks",
    "get_scheduler",
    "get_tenant_account",
    "get_webhook_ingestor",
]
