"""ProtoDiff dashboard and REST API — FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from protodiff.api.deps import build_scanner, get_store
from protodiff.api.errors import register_error_handlers
from protodiff.api.routers import dashboard, results, stats
from protodiff.api.schemas.result import HealthResponse
from protodiff.core.config import Settings, load_settings
from protodiff.core.logging import setup_logging
from protodiff.scheduler import create_scheduler

logger = structlog.get_logger(__name__)


def _make_lifespan(settings: Settings):
    @asynccontextmanager
    async def _lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: build the scanner and start scanning. Shutdown: stop and close."""
        scanner = build_scanner(settings, get_store())
        scheduler = create_scheduler(scanner, interval=settings.scan_interval)
        await scheduler.start()
        yield
        await scheduler.stop()
        close = getattr(scanner.registry_source, "close", None)
        if close is not None:
            await close()

    return _lifespan


def create_app(settings: Settings | None = None, *, run_scanner: bool = True) -> FastAPI:
    """Build and return the FastAPI application.

    With ``run_scanner=False`` only the read side is served, which is what the
    API tests use.
    """
    if settings is None:
        setup_logging()
        settings = load_settings()

    app = FastAPI(
        title="ProtoDiff",
        docs_url="/api/v1/docs",
        openapi_url="/api/v1/openapi.json",
        lifespan=_make_lifespan(settings) if run_scanner else None,
    )

    register_error_handlers(app)

    @app.get("/health", response_model=HealthResponse, tags=["ops"])
    async def health() -> HealthResponse:
        return HealthResponse(status="healthy", results=get_store().count())

    app.include_router(dashboard.router, tags=["dashboard"])
    app.include_router(results.router, prefix="/api/v1/results", tags=["results"])
    app.include_router(stats.router, prefix="/api/v1/stats", tags=["stats"])

    logger.info("app.created", run_scanner=run_scanner)
    return app
