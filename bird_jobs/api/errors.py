"""
Mapping of domain exceptions to HTTP error responses.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from bird_jobs.constants import ERROR_JOB_EXISTS, ERROR_JOB_NOT_COMPLETE, ERROR_JOB_NOT_FOUND
from bird_jobs.exceptions import (
    DuplicateJobError,
    JobNotCompleteError,
    JobNotFoundError,
    StoreError,
)
from bird_jobs.types.api import ErrorResponse

logger = logging.getLogger(__name__)


def _error(status_code: int, error: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


async def duplicate_job_handler(request: Request, exc: DuplicateJobError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, ERROR_JOB_EXISTS)


async def job_not_found_handler(request: Request, exc: JobNotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, ERROR_JOB_NOT_FOUND)


async def job_not_complete_handler(request: Request, exc: JobNotCompleteError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, ERROR_JOB_NOT_COMPLETE)


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("Job store unavailable", extra={"path": request.url.path, "error": str(exc)})
    return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Job store unavailable")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain exception handlers on an application."""
    app.add_exception_handler(DuplicateJobError, duplicate_job_handler)
    app.add_exception_handler(JobNotFoundError, job_not_found_handler)
    app.add_exception_handler(JobNotCompleteError, job_not_complete_handler)
    app.add_exception_handler(StoreError, store_error_handler)
