"""
Worker process for looking up queued jobs.

Each worker repeatedly claims the first queued job, processes it to a
terminal state, and sleeps for the poll interval whenever nothing is queued.
A process runs worker_concurrency workers as asyncio tasks against one
shared store.
"""

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable

from bird_jobs.config import get_settings
from bird_jobs.db import SqlCounterStore, SqlJobStore, close_db, init_db
from bird_jobs.observability.logging import bind_context, setup_logging
from bird_jobs.observability.metrics import setup_metrics
from bird_jobs.observability.tracing import setup_tracing
from bird_jobs.store.base import JobStore
from bird_jobs.worker.claim import claim_job
from bird_jobs.worker.fetcher import WikipediaFetcher
from bird_jobs.worker.processor import JobProcessor

logger = logging.getLogger(__name__)


class Worker:
    """
    One poll-claim-process loop.

    Features:
    - Atomic claim through the shared job store
    - One job at a time; the next claim waits for the current job
    - Errors in an iteration are logged and the loop keeps polling
    - Cooperative stop, checked between iterations
    """

    def __init__(
        self,
        worker_id: str,
        store: JobStore,
        processor: JobProcessor,
        poll_interval: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize the worker.

        Args:
            worker_id: Worker identifier, used in logs and metrics.
            store: The shared job store.
            processor: Processor for claimed jobs.
            poll_interval: Seconds to wait when no job is queued.
            sleep: Coroutine used for the idle wait.
        """
        settings = get_settings()

        self.worker_id = worker_id
        self.poll_interval = (
            settings.worker_poll_interval_seconds if poll_interval is None else poll_interval
        )
        if self.poll_interval < 0:
            raise ValueError(f"Poll interval must not be negative, got {self.poll_interval}")

        self._store = store
        self._processor = processor
        self._sleep = sleep
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def run_once(self) -> bool:
        """
        Claim and process at most one job.

        Returns:
            True if a job was processed, False if none was queued.
        """
        job = await claim_job(self._store)
        if job is None:
            return False

        await self._processor.process(job, self.worker_id)
        return True

    async def start(self, max_iterations: int | None = None) -> None:
        """
        Run the loop until stop() is called.

        Args:
            max_iterations: Stop after this many iterations. Runs until
                stopped when None.
        """
        bind_context(worker_id=self.worker_id)
        logger.info("Worker started", extra={"poll_interval": self.poll_interval})

        self._running = True
        iterations = 0

        while self._running:
            if max_iterations is not None and iterations >= max_iterations:
                break
            iterations += 1

            try:
                processed = await self.run_once()
            except Exception as e:
                logger.exception(f"Error in worker loop: {e}")
                processed = False

            if not processed and self._running:
                logger.debug("No jobs queued, polling again", extra={"poll_interval": self.poll_interval})
                await self._sleep(self.poll_interval)

        self._running = False
        logger.info("Worker stopped", extra={"iterations": iterations})

    def request_stop(self) -> None:
        """Stop the worker after its current iteration. Safe to call from a signal handler."""
        logger.info("Worker stopping", extra={"worker_id": self.worker_id})
        self._running = False

    async def stop(self) -> None:
        """Stop the worker after its current iteration."""
        self.request_stop()


class WorkerPool:
    """A fixed number of workers sharing one store and one processor."""

    def __init__(
        self,
        store: JobStore,
        processor: JobProcessor,
        concurrency: int | None = None,
        poll_interval: float | None = None,
    ):
        settings = get_settings()
        concurrency = settings.worker_concurrency if concurrency is None else concurrency
        if concurrency < 1:
            raise ValueError(f"Worker concurrency must be at least 1, got {concurrency}")

        self.workers = [
            Worker(f"worker-{i}", store, processor, poll_interval=poll_interval)
            for i in range(1, concurrency + 1)
        ]

    async def run(self) -> None:
        """Run every worker until all of them have stopped."""
        logger.info("Starting workers", extra={"concurrency": len(self.workers)})
        tasks = [
            asyncio.create_task(worker.start(), name=worker.worker_id)
            for worker in self.workers
        ]
        await asyncio.gather(*tasks)

    def request_stop(self) -> None:
        """Ask every worker to stop after its current iteration."""
        for worker in self.workers:
            worker.request_stop()

    async def stop(self) -> None:
        """Ask every worker to stop after its current iteration."""
        self.request_stop()


async def run_async() -> None:
    """Run the worker pool against the configured database."""
    settings = get_settings()
    setup_logging()
    setup_tracing()

    session_factory = await init_db()
    store = SqlJobStore(session_factory)
    metrics = setup_metrics(SqlCounterStore(session_factory))
    fetcher = WikipediaFetcher()

    pool = WorkerPool(
        store,
        JobProcessor(store, fetcher, metrics),
        concurrency=settings.worker_concurrency,
    )

    # Handle shutdown signals
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, pool.request_stop)

    try:
        await pool.run()
    finally:
        await fetcher.aclose()
        await close_db()


def run() -> None:
    """Run the worker."""
    asyncio.run(run_async())


if __name__ == "__main__":
    run()
