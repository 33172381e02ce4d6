"""
Exception hierarchy for the job lifecycle engine.
"""


class BirdJobsError(Exception):
    """Base class for all application errors."""


class FetchError(BirdJobsError):
    """The external lookup failed on every attempt."""

    def __init__(self, message: str, attempts: int = 1):
        super().__init__(message)
        self.message = message
        self.attempts = attempts


class StoreError(BirdJobsError):
    """A job or counter store operation failed."""


class InvalidStatusTransitionError(BirdJobsError):
    """A job was asked to move to a status its current status cannot reach."""

    def __init__(self, job_id: str, current: str, target: str):
        super().__init__(f"Job {job_id} cannot move from {current} to {target}")
        self.job_id = job_id
        self.current = current
        self.target = target


class DuplicateJobError(BirdJobsError):
    """A job with the requested name already exists."""

    def __init__(self, name: str):
        super().__init__(f"Job with name {name!r} already exists")
        self.name = name


class JobNotFoundError(BirdJobsError):
    """No job exists with the requested name."""

    def __init__(self, name: str):
        super().__init__(f"Job with name {name!r} not found")
        self.name = name


class JobNotCompleteError(BirdJobsError):
    """The job exists but has not reached a terminal status."""

    def __init__(self, name: str, status: str):
        super().__init__(f"Job with name {name!r} is {status}")
        self.name = name
        self.status = status


def error_message(exc: BaseException) -> str:
    """Human-readable message for an exception, never empty."""
    return str(exc) or type(exc).__name__
