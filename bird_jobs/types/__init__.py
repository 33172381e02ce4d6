"""
Type definitions for the job lifecycle engine.
Contains input/output type definitions, grouped by module.
"""

from bird_jobs.types.api import (
    CreateJobRequest,
    CreateJobResponse,
    ErrorResponse,
    HealthResponse,
    JobResponse,
)
from bird_jobs.types.job import JobRecord

__all__ = [
    # API types
    "CreateJobRequest",
    "CreateJobResponse",
    "JobResponse",
    "HealthResponse",
    "ErrorResponse",
    # Job types
    "JobRecord",
]
