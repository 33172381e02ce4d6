"""
Drives a claimed job to a terminal state.
"""

import logging
import time

from bird_jobs.constants import SPAN_PROCESS_JOB, JobStatus
from bird_jobs.exceptions import InvalidStatusTransitionError, error_message
from bird_jobs.observability.metrics import MetricsCollector
from bird_jobs.observability.tracing import get_tracer
from bird_jobs.store.base import JobStore
from bird_jobs.types.job import JobRecord
from bird_jobs.worker.fetcher import WikipediaFetcher

logger = logging.getLogger(__name__)


class JobProcessor:
    """
    Runs the lookup for a claimed job and records the outcome.

    Every call writes the job back exactly once, as complete or failed. Lookup
    failures are recorded on the job rather than raised. Store failures on the
    write-back are not caught here; the worker loop logs them.
    """

    def __init__(
        self,
        store: JobStore,
        fetcher: WikipediaFetcher,
        metrics: MetricsCollector,
    ):
        self._store = store
        self._fetcher = fetcher
        self._metrics = metrics

    async def process(self, job: JobRecord, worker_id: str) -> JobRecord:
        """
        Process a job previously claimed by the given worker.

        Args:
            job: The claimed job, in PROCESSING status.
            worker_id: Identity of the worker running the job.

        Returns:
            The terminal record that was written to the store.

        Raises:
            InvalidStatusTransitionError: If the job is not in PROCESSING.
        """
        if job.status != JobStatus.PROCESSING:
            raise InvalidStatusTransitionError(job.id, job.status, JobStatus.COMPLETE)

        start_time = time.monotonic()
        logger.info("Processing job", extra={"job_id": job.id, "job_name": job.name})

        with get_tracer().start_as_current_span(SPAN_PROCESS_JOB) as span:
            span.set_attribute("job_id", job.id)
            span.set_attribute("job_name", job.name)
            span.set_attribute("worker_id", worker_id)

            try:
                extract = await self._fetcher.fetch_extract(job.name)
            except Exception as e:
                updated = job.mark_failed(error_message(e))
            else:
                updated = job.mark_complete(extract)

            await self._store.put(job.id, updated)
            span.set_attribute("status", updated.status.value)

        duration = time.monotonic() - start_time

        if updated.status == JobStatus.COMPLETE:
            logger.info(
                "Job complete",
                extra={"job_id": job.id, "duration": f"{duration:.2f}s", "has_result": updated.result is not None},
            )
            await self._metrics.record_job_processed(worker_id)
        else:
            logger.warning(
                "Job failed",
                extra={"job_id": job.id, "duration": f"{duration:.2f}s", "error": updated.error},
            )
            await self._metrics.record_processing_error()

        return updated
