"""
Merchant Service - Main Application Entry Point

Backend for merchant onboarding and account management: registration,
email verification, KYC review, bank account verification, settlement
and notification preferences, API quota accounting, and admin access.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from src import __version__
from src.core.config import settings
from src.core.dependencies import build_merchant_service
from src.core.logging import setup_logging
from src.core.metrics import get_metrics, get_metrics_content_type
from src.infrastructure.database import db_manager
from src.infrastructure.scheduler import MaintenanceScheduler
from src.presentation.api import api_router
from src.presentation.middleware import (
    LoggingMiddleware,
    RequestContextMiddleware,
    error_handler_middleware,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Set up logging
    - Initialize database connection pool
    - Create missing tables when database_auto_create is set
    - Start the quota reset and token cleanup jobs
    - Clean up on shutdown
    """
    setup_logging()
    db_manager.init()
    if settings.database_auto_create:
        await db_manager.create_all()

    logger = structlog.get_logger(__name__)

    scheduler = MaintenanceScheduler(build_merchant_service, db_manager)
    if settings.scheduler_enabled:
        scheduler.start()

    logger.info("application_started", version=__version__)

    yield

    scheduler.stop()
    await db_manager.close()
    logger.info("application_stopped")


app = FastAPI(
    title="Merchant Service",
    description="Merchant onboarding, KYC and account management",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)
app.add_middleware(RequestContextMiddleware)

error_handler_middleware(app)

app.include_router(api_router)


if settings.metrics_enabled:

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=get_metrics(),
            media_type=get_metrics_content_type(),
        )


@app.get("/", include_in_schema=False)
async def root():
    """Redirect to API documentation."""

    return RedirectResponse(url="/docs")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("src.main:app", host=settings.host, port=settings.port, reload=settings.debug)
