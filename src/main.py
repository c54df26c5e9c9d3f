"""coo-handover - task handover and review service for The COO dashboard."""

import logging
import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from src.core.config import settings
from src.core.db_client import close_connection, init_db
from src.core.logging import configure_logfire, instrument_fastapi
from src.interface.handover_router import EXCEPTION_HANDLERS
from src.interface.handover_router import router as handover_router
from src.interface.store_router import router as store_router


logger = logging.getLogger(__name__)


def validate_startup_configuration() -> None:
    """Fail fast when the selected store backend is missing its settings."""
    logger.info("startup_validation_begin")

    try:
        if settings.store_backend == "http":
            settings.require_credential("remote_store_url", "Remote record store")
        logger.info("startup_validation_complete", extra={"store_backend": settings.store_backend, "status": "ok"})
    except ValueError as e:
        logger.error("startup_validation_failed", extra={"error": str(e)})
        print(f"\n❌ Startup validation failed: {e}\n", file=sys.stderr)  # noqa: T201
        sys.exit(1)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan context manager."""
    # Configure logging first so validation logs are captured
    configure_logfire()
    validate_startup_configuration()

    if settings.store_backend == "sqlite":
        await init_db()
        logger.info("Database initialized")

    yield

    if settings.store_backend == "sqlite":
        await close_connection()


app = FastAPI(
    title="coo-handover",
    description="Task handover and review workflow for The COO dashboard",
    version="0.1.0",
    lifespan=lifespan,
)

# Instrument FastAPI with Logfire
instrument_fastapi(app)

for exc_type, handler in EXCEPTION_HANDLERS.items():
    app.add_exception_handler(exc_type, handler)

# Register routers
app.include_router(handover_router)
app.include_router(store_router)


@app.get("/health")
async def health_check() -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse(content={"status": "healthy", "store_backend": settings.store_backend}, status_code=200)
