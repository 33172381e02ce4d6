"""
API request and response type definitions.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from bird_jobs.constants import JobStatus
from bird_jobs.types.job import JobRecord


class CreateJobRequest(BaseModel):
    """Request body for creating a new job."""

    name: str = Field(..., min_length=1, description="Bird name to look up")


class CreateJobResponse(BaseModel):
    """Response body after creating a job."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    status: JobStatus
    created_at: datetime = Field(..., alias="createdAt")

    @classmethod
    def from_record(cls, job: JobRecord) -> "CreateJobResponse":
        return cls(id=job.id, name=job.name, status=job.status, created_at=job.created_at)


class JobResponse(BaseModel):
    """Full job details response, returned once a job is terminal."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    status: JobStatus
    created_at: datetime = Field(..., alias="createdAt")
    result: str | None = None
    error: str | None = None

    @classmethod
    def from_record(cls, job: JobRecord) -> "JobResponse":
        return cls(
            id=job.id,
            name=job.name,
            status=job.status,
            created_at=job.created_at,
            result=job.result,
            error=job.error,
        )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    store: str
    timestamp: datetime


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    detail: str | None = None
