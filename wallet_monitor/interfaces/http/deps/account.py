"""Account related dependency providers."""

from fastapi import Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.core.errors import ACCOUNT_NOT_FOUND, NETWORK_NOT_FOUND, api_error
from wallet_monitor.modules.accounts import Account, AccountNotFoundError, AccountService, NetworkNotFoundError

from .database import get_db_session


def get_account_service(db: AsyncSession = Depends(get_db_session)) -> AccountService:
    return AccountService.with_session(db)


async def get_tenant_account(
    prefix: str = Path(..., min_length=1, max_length=64),
    account_id: str = Path(..., min_length=1, max_length=64),
    service: AccountService = Depends(get_account_service),
) -> Account:
    """Resolve ``account_id`` within the network registered under ``prefix``."""
    try:
        network = await service.require_network(prefix)
        return await service.require_account(account_id, network)
    except NetworkNotFoundError as exc:
        raise api_error(status.HTTP_404_NOT_FOUND, NETWORK_NOT_FOUND, f"Network {prefix} not found") from exc
    except AccountNotFoundError as exc:
        raise api_error(status.HTTP_404_NOT_FOUND, ACCOUNT_NOT_FOUND, f"Account {account_id} not found") from exc


__all__ = ["get_account_service", "get_tenant_account"]
