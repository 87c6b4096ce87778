import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from wallet_monitor import __version__
from wallet_monitor.core.config import get_settings
from wallet_monitor.core.container import ApplicationContainer, get_container
from wallet_monitor.core.errors import register_exception_handlers
from wallet_monitor.core.logging_setup import configure_logging
from wallet_monitor.infrastructure.database.session import init_db
from wallet_monitor.interfaces.http.routers import create_api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container: ApplicationContainer = app.state.container
    await init_db(container.engine)
    await container.startup()
    logger.info("%s %s started", container.settings.project_name, __version__)
    try:
        yield
    finally:
        await container.shutdown()
        logger.info("%s stopped", container.settings.project_name)


def create_app(container: Optional[ApplicationContainer] = None) -> FastAPI:
    container = container or get_container()
    settings = container.settings
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        description="E-wallet balance reconciliation and live balance streaming",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(create_api_router(settings.api_prefix))
    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "wallet_monitor.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.server.reload,
    )


if __name__ == "__main__":
    run()
