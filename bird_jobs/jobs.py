"""
Job creation and lookup by name.

These are the operations the HTTP API performs against the job store. Job
names are unique: creation scans for an existing job with the same name and
inserts the new one inside the same store transaction.
"""

import logging

from bird_jobs.exceptions import DuplicateJobError, JobNotCompleteError, JobNotFoundError
from bird_jobs.store.base import JobStore, JobTransaction
from bird_jobs.types.job import JobRecord

logger = logging.getLogger(__name__)


async def create_job(store: JobStore, name: str) -> JobRecord:
    """
    Queue a new job for the given name.

    Args:
        store: The job store.
        name: Subject name to look up.

    Returns:
        The queued job.

    Raises:
        DuplicateJobError: If a job with this name already exists, whatever
            its status.
    """

    async def _create(tx: JobTransaction) -> JobRecord:
        for _, existing in await tx.scan():
            if existing.name == name:
                raise DuplicateJobError(name)

        job = JobRecord.new(name)
        await tx.put(job.id, job)
        return job

    job = await store.transaction(_create)
    logger.info("Created job", extra={"job_id": job.id, "job_name": name})
    return job


async def find_job_by_name(store: JobStore, name: str) -> JobRecord | None:
    """Return the job with the given name, if any."""
    for _, job in await store.scan():
        if job.name == name:
            return job
    return None


async def get_job_result(store: JobStore, name: str) -> JobRecord:
    """
    Return the job with the given name once it has reached a terminal status.

    Raises:
        JobNotFoundError: If no job has this name.
        JobNotCompleteError: If the job is still queued or processing.
    """
    job = await find_job_by_name(store, name)
    if job is None:
        raise JobNotFoundError(name)
    if not job.is_terminal:
        raise JobNotCompleteError(name, job.status)
    return job
