"""Externally triggered balance check over every active account."""
import logging
import secrets
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query, status

from wallet_monitor.core.container import ApplicationContainer
from wallet_monitor.core.errors import UNAUTHORIZED, api_error
from wallet_monitor.interfaces.http.deps import get_app_container, get_scheduler
from wallet_monitor.modules.balances.models import SnapshotSource
from wallet_monitor.modules.polling import PollScheduler
from wallet_monitor.schemas import AccountCheckItem, TickReportResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def verify_cron_secret(
    authorization: Optional[str] = Header(None),
    secret: Optional[str] = Query(None),
    container: ApplicationContainer = Depends(get_app_container),
) -> None:
    provided = _bearer_token(authorization) or secret
    expected = container.settings.cron_secret
    if not provided or not secrets.compare_digest(provided, expected):
        raise api_error(status.HTTP_401_UNAUTHORIZED, UNAUTHORIZED, "Invalid cron secret")


@router.get(
    "/check-balances",
    response_model=TickReportResponse,
    response_model_by_alias=True,
    dependencies=[Depends(verify_cron_secret)],
)
async def check_balances(scheduler: PollScheduler = Depends(get_scheduler)) -> TickReportResponse:
    report = await scheduler.run_tick(source=SnapshotSource.CRON_CHECK, use_hint=False)
    logger.info(
        "Cron check: %d/%d success, %d changed, %dms",
        report.succeeded,
        report.total,
        report.changed,
        report.duration_ms,
    )
    return TickReportResponse(
        total=report.total,
        success=report.succeeded,
        changed=report.changed,
        failed=report.failed,
        duration=report.duration_ms,
        results=[
            AccountCheckItem(
                account_id=outcome.account.id,
                name=outcome.account.name,
                state=outcome.state.value,
                success=outcome.success,
                changed=outcome.changed,
                balance_minor_units=outcome.balance_minor_units,
                error=outcome.error,
            )
            for outcome in report.results
        ],
    )
