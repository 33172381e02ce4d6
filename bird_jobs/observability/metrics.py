"""
Job lifecycle metrics.

Every event is counted twice: in a Prometheus counter for scraping from the
running process, and in the shared counter store so totals survive restarts
and add up across worker processes.
"""

import logging

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    REGISTRY,
    CollectorRegistry,
    Counter,
    generate_latest,
)

from bird_jobs.constants import (
    COUNTER_JOBS_CREATED,
    COUNTER_JOBS_PROCESSED_PREFIX,
    COUNTER_PROCESSING_ERRORS,
    COUNTER_RESULT_REQUESTS,
    METRIC_JOBS_CREATED,
    METRIC_JOBS_PROCESSED,
    METRIC_PROCESSING_ERRORS,
    METRIC_RESULT_REQUESTS,
)
from bird_jobs.exceptions import StoreError
from bird_jobs.store.base import CounterStore

logger = logging.getLogger(__name__)

# Global metrics instance
_metrics: "MetricsCollector | None" = None


def jobs_processed_key(worker_id: str) -> str:
    """Counter key for jobs completed by one worker."""
    return f"{COUNTER_JOBS_PROCESSED_PREFIX}{worker_id}"


class MetricsCollector:
    """
    Metrics sink for the job lifecycle.

    Collects:
    - Jobs created
    - Result requests
    - Jobs processed, per worker
    - Processing errors

    Counter store failures are logged and otherwise ignored; losing a count
    must never change the outcome recorded for a job.
    """

    def __init__(
        self,
        counter_store: CounterStore | None = None,
        registry: CollectorRegistry | None = None,
    ):
        """
        Initialize the metrics collector.

        Args:
            counter_store: Optional persistent counter store.
            registry: Optional custom registry. Uses default if not provided.
        """
        self._counter_store = counter_store
        self._registry = registry or REGISTRY

        self.jobs_created = Counter(
            METRIC_JOBS_CREATED,
            "Total number of jobs created",
            registry=self._registry,
        )

        self.result_requests = Counter(
            METRIC_RESULT_REQUESTS,
            "Total number of job result requests",
            registry=self._registry,
        )

        self.processing_errors = Counter(
            METRIC_PROCESSING_ERRORS,
            "Total number of jobs that failed processing",
            registry=self._registry,
        )

        self.jobs_processed = Counter(
            METRIC_JOBS_PROCESSED,
            "Total number of jobs completed",
            ["worker_id"],
            registry=self._registry,
        )

    @property
    def counter_store(self) -> CounterStore | None:
        return self._counter_store

    def attach_counter_store(self, counter_store: CounterStore) -> None:
        """Start mirroring counts into a persistent counter store."""
        self._counter_store = counter_store

    async def _increment(self, key: str) -> None:
        if self._counter_store is None:
            return
        try:
            await self._counter_store.increment(key)
        except StoreError as e:
            logger.warning(
                "Failed to increment counter",
                extra={"counter": key, "error": str(e)},
            )

    async def record_job_created(self) -> None:
        """Record a job creation."""
        self.jobs_created.inc()
        await self._increment(COUNTER_JOBS_CREATED)

    async def record_result_request(self) -> None:
        """Record a request for a job's result."""
        self.result_requests.inc()
        await self._increment(COUNTER_RESULT_REQUESTS)

    async def record_job_processed(self, worker_id: str) -> None:
        """Record a job completed by a worker."""
        self.jobs_processed.labels(worker_id=worker_id).inc()
        await self._increment(jobs_processed_key(worker_id))

    async def record_processing_error(self) -> None:
        """Record a job that ended in failure."""
        self.processing_errors.inc()
        await self._increment(COUNTER_PROCESSING_ERRORS)

    def get_metrics(self) -> bytes:
        """Get all metrics in Prometheus format."""
        return generate_latest(self._registry)

    def get_content_type(self) -> str:
        """Get the content type for metrics response."""
        return CONTENT_TYPE_LATEST


def setup_metrics(counter_store: CounterStore | None = None) -> MetricsCollector:
    """
    Set up and return the process-wide metrics collector.

    Args:
        counter_store: Persistent counter store to attach, if any.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector(counter_store=counter_store)
    elif counter_store is not None:
        _metrics.attach_counter_store(counter_store)
    return _metrics


def get_metrics() -> MetricsCollector:
    """
    Get the process-wide metrics collector, creating it if needed.

    Returns:
        MetricsCollector: The metrics collector instance.
    """
    if _metrics is None:
        return setup_metrics()
    return _metrics
