"""
Unit tests for the worker loop and worker pool.
"""

import asyncio
from collections import Counter

import httpx
import pytest

from bird_jobs.constants import JobStatus
from bird_jobs.observability.metrics import MetricsCollector
from bird_jobs.store.memory import MemoryCounterStore
from bird_jobs.worker.main import Worker, WorkerPool
from bird_jobs.worker.processor import JobProcessor
from tests.helpers import FlakyJobStore, RecordingJobStore, make_job, seed, wiki_payload


def _extract_handler(calls: Counter):
    def handler(request: httpx.Request) -> httpx.Response:
        name = request.url.params["titles"]
        calls[name] += 1
        return httpx.Response(200, json=wiki_payload(f"{name} is a bird.", title=name))

    return handler


class TestWorker:
    """Tests for Worker."""

    @pytest.fixture
    def calls(self) -> Counter:
        return Counter()

    @pytest.fixture
    def processor(self, store, metrics, make_fetcher, calls) -> JobProcessor:
        return JobProcessor(store, make_fetcher(_extract_handler(calls)), metrics)

    async def test_run_once_processes_one_job(self, store: RecordingJobStore, processor, calls):
        """Test a single iteration claims and completes one job."""
        robin, wren = make_job("Robin"), make_job("Wren")
        await seed(store, robin, wren)
        worker = Worker("worker-1", store, processor, poll_interval=1.0)

        processed = await worker.run_once()

        assert processed is True
        assert (await store.get(robin.id)).status == JobStatus.COMPLETE
        assert (await store.get(robin.id)).result == "Robin is a bird."
        assert (await store.get(wren.id)).status == JobStatus.QUEUED
        assert calls == Counter({"Robin": 1})

    async def test_run_once_with_empty_store(self, store: RecordingJobStore, processor):
        """Test a single iteration with nothing queued."""
        worker = Worker("worker-1", store, processor)

        assert await worker.run_once() is False
        assert store.writes == []

    async def test_sleeps_only_when_idle(self, store: RecordingJobStore, processor, sleeps, fake_sleep):
        """Test the poll interval is used only for empty polls."""
        await seed(store, make_job("Robin"), make_job("Wren"))
        worker = Worker("worker-1", store, processor, poll_interval=1.0, sleep=fake_sleep)

        await worker.start(max_iterations=4)

        # Two processing iterations, then two idle polls
        assert sleeps == [1.0, 1.0]
        assert all(job.status == JobStatus.COMPLETE for _, job in await store.scan())
        assert worker.running is False

    async def test_survives_store_errors(
        self,
        metrics: MetricsCollector,
        make_fetcher,
        calls,
        sleeps,
        fake_sleep,
    ):
        """Test that a failing claim is logged and the loop keeps polling."""
        store = FlakyJobStore(failures=0)
        robin = make_job("Robin")
        await seed(store, robin)
        store.failures = 2
        processor = JobProcessor(store, make_fetcher(_extract_handler(calls)), metrics)
        worker = Worker("worker-1", store, processor, poll_interval=1.0, sleep=fake_sleep)

        await worker.start(max_iterations=3)

        assert sleeps == [1.0, 1.0]
        assert (await store.get(robin.id)).status == JobStatus.COMPLETE

    async def test_failed_job_does_not_stop_loop(
        self,
        store: RecordingJobStore,
        metrics: MetricsCollector,
        make_fetcher,
    ):
        """Test that a job failure is contained and the next job still runs."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["titles"] == "Robin":
                return httpx.Response(503)
            return httpx.Response(200, json=wiki_payload("A small bird.", title="Wren"))

        robin, wren = make_job("Robin"), make_job("Wren")
        await seed(store, robin, wren)
        worker = Worker("worker-1", store, JobProcessor(store, make_fetcher(handler), metrics))

        await worker.start(max_iterations=2)

        assert (await store.get(robin.id)).status == JobStatus.FAILED
        assert (await store.get(wren.id)).status == JobStatus.COMPLETE

    async def test_stop_ends_loop(self, store: RecordingJobStore, processor):
        """Test that stop() ends a running loop."""
        worker = Worker("worker-1", store, processor, poll_interval=0.01)

        task = asyncio.create_task(worker.start())
        await asyncio.sleep(0.05)
        assert worker.running is True

        await worker.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert worker.running is False


class TestWorkerPool:
    """Tests for WorkerPool."""

    async def test_rejects_zero_concurrency(self, store, metrics, make_fetcher):
        """Test that a pool needs at least one worker."""
        processor = JobProcessor(store, make_fetcher(_extract_handler(Counter())), metrics)

        with pytest.raises(ValueError):
            WorkerPool(store, processor, concurrency=0)

    async def test_names_workers(self, store, metrics, make_fetcher):
        """Test worker identities."""
        processor = JobProcessor(store, make_fetcher(_extract_handler(Counter())), metrics)

        pool = WorkerPool(store, processor, concurrency=3)

        assert [worker.worker_id for worker in pool.workers] == ["worker-1", "worker-2", "worker-3"]

    async def test_rejects_negative_poll_interval(self, store, metrics, make_fetcher):
        processor = JobProcessor(store, make_fetcher(_extract_handler(Counter())), metrics)

        with pytest.raises(ValueError):
            WorkerPool(store, processor, concurrency=1, poll_interval=-1.0)

    async def test_request_stop_ends_run(self, store, metrics, make_fetcher):
        """Test that the synchronous stop used by signal handlers ends every worker."""
        processor = JobProcessor(store, make_fetcher(_extract_handler(Counter())), metrics)
        pool = WorkerPool(store, processor, concurrency=2, poll_interval=0.01)

        task = asyncio.create_task(pool.run())
        await asyncio.sleep(0.05)
        assert all(worker.running for worker in pool.workers)

        pool.request_stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert not any(worker.running for worker in pool.workers)

    async def test_concurrent_workers_process_each_job_once(
        self,
        store: RecordingJobStore,
        metrics: MetricsCollector,
        counter_store: MemoryCounterStore,
        make_fetcher,
    ):
        """Test that several workers drain the queue without duplicate work."""
        calls: Counter = Counter()
        jobs = [make_job(f"Bird {i}") for i in range(12)]
        await seed(store, *jobs)
        pool = WorkerPool(
            store,
            JobProcessor(store, make_fetcher(_extract_handler(calls)), metrics),
            concurrency=4,
            poll_interval=0.01,
        )

        task = asyncio.create_task(pool.run())

        async def _all_terminal() -> None:
            while not all(job.is_terminal for _, job in await store.scan()):
                await asyncio.sleep(0.01)

        await asyncio.wait_for(_all_terminal(), timeout=5.0)
        await pool.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert calls == Counter({job.name: 1 for job in jobs})
        counts = await counter_store.snapshot()
        assert sum(v for k, v in counts.items() if k.startswith("jobs_processed:")) == 12
        assert "processing_errors" not in counts
