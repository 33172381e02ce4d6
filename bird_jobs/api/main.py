"""
FastAPI application entry point.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bird_jobs import __version__
from bird_jobs.api.errors import register_exception_handlers
from bird_jobs.api.routes import birds_router, health_router
from bird_jobs.config import get_settings
from bird_jobs.db import SqlCounterStore, SqlJobStore, close_db, init_db
from bird_jobs.observability.logging import setup_logging
from bird_jobs.observability.metrics import MetricsCollector, get_metrics, setup_metrics
from bird_jobs.observability.tracing import instrument_fastapi, setup_tracing
from bird_jobs.store.base import JobStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Connects the SQL stores on startup unless a store was injected when the
    application was created.
    """
    setup_logging()
    setup_tracing()

    owns_db = app.state.store is None
    if owns_db:
        session_factory = await init_db()
        app.state.store = SqlJobStore(session_factory)
        setup_metrics(SqlCounterStore(session_factory))

    logger.info("Application started")

    yield

    if owns_db:
        await close_db()
        app.state.store = None
    logger.info("Application shutdown")


def create_app(
    store: JobStore | None = None,
    metrics: MetricsCollector | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Job store to serve from. The SQL store is connected on
            startup when omitted.
        metrics: Metrics collector. Defaults to the process-wide collector.

    Returns:
        FastAPI: The configured application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Bird Jobs API",
        description="Queue Wikipedia lookups for bird names and read back the results",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    app.state.store = store
    app.state.metrics = metrics or get_metrics()

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(health_router)
    app.include_router(birds_router)

    if settings.otel_enabled:
        instrument_fastapi(app)

    return app


def run() -> None:
    """Run the API server."""
    settings = get_settings()

    uvicorn.run(
        "bird_jobs.api.main:create_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
