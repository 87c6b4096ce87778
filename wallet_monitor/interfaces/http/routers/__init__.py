from fastapi import APIRouter

from wallet_monitor.interfaces.http.routers import balances, cron, health, sse, webhook


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(webhook.router, prefix="/webhook", tags=["webhook"])
    router.include_router(sse.router, prefix="/sse", tags=["stream"])
    router.include_router(balances.router, prefix="/tenant/{prefix}/accounts", tags=["balances"])
    router.include_router(cron.router, prefix="/cron", tags=["cron"])
    router.include_router(health.router, tags=["health"])
    return router


__all__ = [
    "create_api_router",
]
