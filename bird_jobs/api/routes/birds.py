"""
Bird job routes.
"""

import logging

from fastapi import APIRouter, Depends, Query, status

from bird_jobs.api.dependencies import get_metrics_collector, get_store
from bird_jobs.jobs import create_job, get_job_result
from bird_jobs.observability.metrics import MetricsCollector
from bird_jobs.store.base import JobStore
from bird_jobs.types.api import (
    CreateJobRequest,
    CreateJobResponse,
    ErrorResponse,
    JobResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bird", tags=["Birds"])


@router.post(
    "",
    response_model=CreateJobResponse,
    status_code=status.HTTP_201_CREATED,
    responses={status.HTTP_409_CONFLICT: {"model": ErrorResponse}},
    summary="Queue a bird lookup",
    description="Queue a Wikipedia lookup for a bird name. Names are unique.",
)
async def create_bird_job(
    request: CreateJobRequest,
    store: JobStore = Depends(get_store),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> CreateJobResponse:
    """
    Create a queued job for the requested name.

    Args:
        request: Job creation request.
        store: The job store.
        metrics: Metrics collector.

    Returns:
        CreateJobResponse with the queued job.
    """
    job = await create_job(store, request.name)
    await metrics.record_job_created()
    return CreateJobResponse.from_record(job)


@router.get(
    "",
    response_model=JobResponse,
    responses={status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}},
    summary="Get a bird lookup result",
    description="Return the job for a name once it is complete or failed.",
)
async def get_bird_job(
    name: str = Query(..., min_length=1, description="Bird name"),
    store: JobStore = Depends(get_store),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> JobResponse:
    """
    Get a finished job by name.

    Returns 404 while the job is queued or processing.
    """
    await metrics.record_result_request()
    job = await get_job_result(store, name)
    return JobResponse.from_record(job)
