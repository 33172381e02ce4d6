"""
Test doubles and builders shared across the test suite.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from bird_jobs.exceptions import StoreError
from bird_jobs.store.base import JobTransaction, T
from bird_jobs.store.memory import MemoryJobStore
from bird_jobs.types.job import JobRecord

WIKIPEDIA_URL = "https://en.wikipedia.org/w/api.php"


class RecordingTransaction(JobTransaction):
    """Transaction wrapper that records writes and yields to the loop on every call."""

    def __init__(self, inner: JobTransaction, writes: list[tuple[str, JobRecord]]):
        self._inner = inner
        self._writes = writes

    async def scan(self) -> list[tuple[str, JobRecord]]:
        await asyncio.sleep(0)
        return await self._inner.scan()

    async def get(self, key: str) -> JobRecord | None:
        await asyncio.sleep(0)
        return await self._inner.get(key)

    async def put(self, key: str, record: JobRecord) -> None:
        await asyncio.sleep(0)
        self._writes.append((key, record))
        await self._inner.put(key, record)


class RecordingJobStore(MemoryJobStore):
    """In-memory job store that keeps a log of every write."""

    def __init__(self, records: dict[str, JobRecord] | None = None):
        super().__init__(records)
        self.writes: list[tuple[str, JobRecord]] = []

    async def transaction(self, fn: Callable[[JobTransaction], Awaitable[T]]) -> T:
        async def _recording(tx: JobTransaction) -> T:
            return await fn(RecordingTransaction(tx, self.writes))

        return await super().transaction(_recording)


class FlakyJobStore(MemoryJobStore):
    """In-memory job store whose first transactions raise StoreError."""

    def __init__(self, failures: int, records: dict[str, JobRecord] | None = None):
        super().__init__(records)
        self.failures = failures

    async def transaction(self, fn: Callable[[JobTransaction], Awaitable[T]]) -> T:
        if self.failures > 0:
            self.failures -= 1
            raise StoreError("connection lost")
        return await super().transaction(fn)


def wiki_payload(extract: str | None = None, title: str = "Robin") -> dict[str, Any]:
    """Build a formatversion=2 extracts response with a single page."""
    page: dict[str, Any] = {"pageid": 1, "ns": 0, "title": title}
    if extract is not None:
        page["extract"] = extract
    return {"batchcomplete": True, "query": {"pages": [page]}}


def make_job(name: str = "Robin", **fields: Any) -> JobRecord:
    """Create a queued job, optionally overriding fields."""
    return JobRecord.new(name).model_copy(update=fields)


async def seed(store: MemoryJobStore, *jobs: JobRecord) -> None:
    """Write jobs straight into a store."""
    for job in jobs:
        await store.put(job.id, job)
