"""
Intellectory HTTP service.

`create_app` wires middleware, error handlers and routers; the lifespan
migrates the local database, opens the table client and, on shutdown,
flushes debounced bin notes before the client is closed.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from intellectory import __version__
from intellectory.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from intellectory.api.middleware.error_handler import setup_exception_handlers
from intellectory.api.routes import (
    bins_router,
    commands_router,
    health_router,
    reports_router,
    stock_router,
    suppliers_router,
    teams_router,
)
from intellectory.config import configure_logging, get_logger, get_settings
from intellectory.core.exceptions import ConfigurationError, IntellectoryError

logger = get_logger(__name__)

ROUTERS = (
    health_router,
    teams_router,
    stock_router,
    suppliers_router,
    bins_router,
    commands_router,
    reports_router,
)


async def _migrate_sqlite() -> None:
    from intellectory.infrastructure.storage.sqlite.migrations import initialize_database

    results = await initialize_database()
    for result in results:
        if not result.success:
            raise ConfigurationError(
                f"Migration {result.version} failed: {result.error}",
                code="MIGRATION_FAILED",
            )
    logger.info("database_ready", migrations_applied=len(results))


async def _warm_up_llm() -> None:
    from intellectory.infrastructure.llm import get_llm_provider

    try:
        status = await get_llm_provider().check_health()
    except IntellectoryError as e:
        logger.warning("llm_warmup_failed", error=e.message)
        return
    logger.info("llm_warmup_done", available=status.available, error=status.error)


async def _shutdown() -> None:
    from intellectory.application.services import flush_pending_writes
    from intellectory.infrastructure.storage import close_table_client

    await flush_pending_writes()
    try:
        await close_table_client()
    except IntellectoryError as e:
        logger.warning("table_client_close_failed", error=e.message)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    configure_logging()
    settings = get_settings()
    logger.info(
        "application_starting",
        version=__version__,
        storage=settings.storage.backend,
        llm=settings.llm.provider,
    )

    if settings.storage.backend == "sqlite":
        await _migrate_sqlite()

    from intellectory.infrastructure.storage import get_table_client

    # An unconfigured hosted store yields a client that answers 503
    get_table_client()
    if settings.llm.warmup_on_start:
        await _warm_up_llm()

    logger.info("application_started", host=settings.api.host, port=settings.api.port)
    yield

    logger.info("application_stopping")
    await _shutdown()
    logger.info("application_stopped")


def create_app() -> FastAPI:
    settings = get_settings()
    docs = settings.api.debug

    app = FastAPI(
        title="Intellectory API",
        description="Inventory, supplier credit and returnable bin tracking",
        version=__version__,
        docs_url="/docs" if docs else None,
        redoc_url="/redoc" if docs else None,
        lifespan=lifespan,
    )

    # Last added runs first: CORS, then logging, then the error net
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    setup_exception_handlers(app)
    for router in ROUTERS:
        app.include_router(router)

    @app.get("/health", include_in_schema=False)
    async def liveness() -> dict[str, str]:
        return {"status": "healthy", "version": __version__}

    return app


app = create_app()


def run() -> None:
    """`intellectory` console script."""
    import uvicorn

    api = get_settings().api
    uvicorn.run("intellectory.api.main:app", host=api.host, port=api.port, reload=api.debug)


if __name__ == "__main__":
    run()
