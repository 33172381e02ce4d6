"""
Job-related type definitions for internal use.
"""

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from bird_jobs.constants import ALLOWED_TRANSITIONS, TERMINAL_STATUSES, JobStatus
from bird_jobs.exceptions import InvalidStatusTransitionError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRecord(BaseModel):
    """
    A unit of work and its result.

    Records are immutable values: every status change returns a new record
    which the caller writes back to the job store. Transitions are checked
    against ALLOWED_TRANSITIONS so a record can never regress.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str = Field(..., min_length=1)
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    result: str | None = None
    error: str | None = None

    @classmethod
    def new(cls, name: str) -> "JobRecord":
        """Create a freshly queued job for the given subject name."""
        return cls(id=str(uuid4()), name=name)

    @property
    def is_terminal(self) -> bool:
        """Check if the job has reached complete or failed."""
        return self.status in TERMINAL_STATUSES

    def transition(self, target: JobStatus, **changes: str | None) -> "JobRecord":
        """
        Return a copy of this record moved to the target status.

        Args:
            target: The status to move to.
            **changes: Additional fields to set on the copy.

        Returns:
            The updated record.

        Raises:
            InvalidStatusTransitionError: If the move is not a forward step
                of the job state machine.
        """
        if target not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidStatusTransitionError(self.id, self.status, target)
        return self.model_copy(update={"status": target, **changes})

    def mark_processing(self) -> "JobRecord":
        return self.transition(JobStatus.PROCESSING)

    def mark_complete(self, result: str | None) -> "JobRecord":
        return self.transition(JobStatus.COMPLETE, result=result)

    def mark_failed(self, error: str) -> "JobRecord":
        return self.transition(JobStatus.FAILED, error=error)
