"""Database session dependency."""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from wallet_monitor.core.container import ApplicationContainer

from .container import get_app_container


async def get_db_session(
    container: ApplicationContainer = Depends(get_app_container),
) -> AsyncGenerator[AsyncSession, None]:
    async with container.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


__all__ = ["get_db_session"]
