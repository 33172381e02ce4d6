"""
Health check routes.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from bird_jobs import __version__
from bird_jobs.api.dependencies import get_metrics_collector, get_store
from bird_jobs.observability.metrics import MetricsCollector
from bird_jobs.store.base import JobStore
from bird_jobs.types.api import HealthResponse

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Check the health of the API and the job store.",
)
async def health_check(
    store: JobStore = Depends(get_store),
) -> HealthResponse:
    """
    Perform a health check.

    Args:
        store: The job store.

    Returns:
        HealthResponse with service status.
    """
    store_status = "healthy" if await store.ping() else "unhealthy"

    return HealthResponse(
        status="healthy" if store_status == "healthy" else "degraded",
        version=__version__,
        store=store_status,
        timestamp=datetime.now(timezone.utc),
    )


@router.get(
    "/live",
    summary="Liveness check",
    description="Check if the service is alive.",
)
async def liveness_check() -> dict:
    """Liveness probe endpoint."""
    return {"alive": True}


@router.get(
    "/metrics",
    summary="Prometheus metrics",
    description="Expose Prometheus metrics.",
)
async def metrics(
    collector: MetricsCollector = Depends(get_metrics_collector),
) -> Response:
    """
    Expose Prometheus metrics.

    Returns:
        Prometheus-formatted metrics.
    """
    return Response(
        content=collector.get_metrics(),
        media_type=collector.get_content_type(),
    )
