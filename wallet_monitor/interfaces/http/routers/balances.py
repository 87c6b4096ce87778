"""Tenant endpoints for checking and reading account balances."""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.core.errors import ACCOUNT_NOT_FOUND, NETWORK_NOT_FOUND, VALIDATION_ERROR, api_error, wallet_error
from wallet_monitor.db.models import utcnow
from wallet_monitor.infrastructure.wallet import WalletApiError
from wallet_monitor.interfaces.http.deps import get_db_session, get_manual_checks, get_tenant_account
from wallet_monitor.modules.accounts import Account, AccountNotFoundError, NetworkNotFoundError
from wallet_monitor.modules.balances import BalanceService, to_major_units
from wallet_monitor.modules.balances.models import HistoryEntry, TransactionEntry, as_utc
from wallet_monitor.modules.polling import ManualCheckService
from wallet_monitor.schemas import BalanceCheckResponse, HistoryItem, HistoryResponse, LatestBalanceResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/{account_id}/check", response_model=BalanceCheckResponse, response_model_by_alias=True)
async def check_balance(
    prefix: str,
    account_id: str,
    manual_checks: ManualCheckService = Depends(get_manual_checks),
) -> BalanceCheckResponse:
    try:
        outcome = await manual_checks.check(prefix, account_id)
    except NetworkNotFoundError as exc:
        raise api_error(status.HTTP_404_NOT_FOUND, NETWORK_NOT_FOUND, f"Network {prefix} not found") from exc
    except AccountNotFoundError as exc:
        raise api_error(status.HTTP_404_NOT_FOUND, ACCOUNT_NOT_FOUND, f"Account {account_id} not found") from exc
    except WalletApiError as exc:
        logger.warning("Manual check failed for %s: %s", account_id, exc)
        raise wallet_error(exc) from exc

    return BalanceCheckResponse(
        balance=outcome.balance,
        balance_minor_units=outcome.balance_minor_units,
        mobile_no=outcome.mobile_no,
        checked_at=outcome.checked_at or utcnow(),
        changed=outcome.changed,
    )


@router.get("/{account_id}/balance", response_model=LatestBalanceResponse, response_model_by_alias=True)
async def latest_balance(
    account: Account = Depends(get_tenant_account),
    db: AsyncSession = Depends(get_db_session),
) -> LatestBalanceResponse:
    snapshot = await BalanceService.with_session(db).get_latest_balance(account.id)
    if snapshot is None:
        return LatestBalanceResponse(account_id=account.id, has_data=False)
    return LatestBalanceResponse(
        account_id=account.id,
        has_data=True,
        balance=snapshot.balance,
        balance_minor_units=snapshot.balance_minor_units,
        mobile_no=snapshot.mobile_no,
        source=snapshot.source,
        checked_at=snapshot.checked_at,
    )


def _history_item(entry: HistoryEntry) -> HistoryItem:
    if isinstance(entry, TransactionEntry):
        tx = entry.transaction
        return HistoryItem(
            kind="transaction",
            id=tx.id,
            timestamp=tx.timestamp,
            transaction_id=tx.transaction_id,
            amount=to_major_units(tx.amount_minor_units),
            amount_minor_units=tx.amount_minor_units,
            fee=to_major_units(tx.fee_minor_units),
            fee_minor_units=tx.fee_minor_units,
            direction=tx.direction,
            status=tx.status,
            sender_mobile=tx.sender_mobile,
            recipient_mobile=tx.recipient_mobile,
        )
    snapshot = entry.snapshot
    return HistoryItem(
        kind="snapshot",
        id=str(snapshot.id),
        timestamp=snapshot.checked_at,
        balance=snapshot.balance,
        balance_minor_units=snapshot.balance_minor_units,
        source=snapshot.source,
    )


@router.get("/{account_id}/history", response_model=HistoryResponse, response_model_by_alias=True)
async def balance_history(
    account: Account = Depends(get_tenant_account),
    db: AsyncSession = Depends(get_db_session),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    from_time: Optional[datetime] = Query(None, alias="from"),
    to_time: Optional[datetime] = Query(None, alias="to"),
) -> HistoryResponse:
    if from_time is not None and to_time is not None and as_utc(from_time) > as_utc(to_time):
        raise api_error(status.HTTP_400_BAD_REQUEST, VALIDATION_ERROR, "'from' must not be after 'to'")

    history = await BalanceService.with_session(db).get_history(
        account.id,
        from_time=from_time,
        to_time=to_time,
        page=page,
        page_size=page_size,
    )
    return HistoryResponse(
        items=[_history_item(entry) for entry in history.entries],
        total=history.total,
        page=history.page,
        page_size=history.page_size,
        total_pages=history.total_pages,
    )
