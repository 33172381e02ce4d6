"""
Atomic claim of the next queued job.
"""

import logging

from bird_jobs.constants import SPAN_CLAIM_JOB, JobStatus
from bird_jobs.observability.tracing import get_tracer
from bird_jobs.store.base import JobStore, JobTransaction
from bird_jobs.types.job import JobRecord

logger = logging.getLogger(__name__)


async def _claim_first_queued(tx: JobTransaction) -> JobRecord | None:
    for key, job in await tx.scan():
        if job.status == JobStatus.QUEUED:
            claimed = job.mark_processing()
            await tx.put(key, claimed)
            return claimed
    return None


async def claim_job(store: JobStore) -> JobRecord | None:
    """
    Move the first queued job, in store scan order, to PROCESSING.

    The scan and the status write run in one store transaction, so two
    concurrent callers can never both claim the same job. Nothing is written
    when no job is queued.

    Args:
        store: The job store.

    Returns:
        The claimed job as written, or None if no job is queued.
    """
    with get_tracer().start_as_current_span(SPAN_CLAIM_JOB) as span:
        job = await store.transaction(_claim_first_queued)
        span.set_attribute("claimed", job is not None)

    if job is not None:
        logger.info("Claimed job", extra={"job_id": job.id, "job_name": job.name})

    return job
