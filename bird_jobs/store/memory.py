"""
In-memory stores.

Used by the test suite and for running the API and workers inside a single
process. A single asyncio.Lock serializes transactions, which is enough for
the isolation the claim protocol needs between tasks on one event loop.
"""

import asyncio
from collections.abc import Awaitable, Callable

from bird_jobs.store.base import CounterStore, JobStore, JobTransaction, T
from bird_jobs.types.job import JobRecord


class _MemoryTransaction(JobTransaction):
    """Transaction over a private working copy of the records."""

    def __init__(self, records: dict[str, JobRecord]):
        self.records = dict(records)

    async def scan(self) -> list[tuple[str, JobRecord]]:
        return list(self.records.items())

    async def get(self, key: str) -> JobRecord | None:
        return self.records.get(key)

    async def put(self, key: str, record: JobRecord) -> None:
        self.records[key] = record


class MemoryJobStore(JobStore):
    """
    Job store backed by a dict.

    Iteration order is insertion order. Writes made inside a transaction are
    applied only when the transaction function returns without raising.
    """

    def __init__(self, records: dict[str, JobRecord] | None = None):
        self._records: dict[str, JobRecord] = dict(records or {})
        self._lock = asyncio.Lock()

    async def transaction(self, fn: Callable[[JobTransaction], Awaitable[T]]) -> T:
        async with self._lock:
            tx = _MemoryTransaction(self._records)
            result = await fn(tx)
            self._records = tx.records
            return result

    def __len__(self) -> int:
        return len(self._records)


class MemoryCounterStore(CounterStore):
    """Counter store backed by a dict."""

    def __init__(self):
        self._counts: dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def increment(self, key: str) -> int:
        async with self._lock:
            value = self._counts.get(key, 0) + 1
            self._counts[key] = value
            return value

    async def get(self, key: str) -> int:
        async with self._lock:
            return self._counts.get(key, 0)

    async def snapshot(self) -> dict[str, int]:
        async with self._lock:
            return dict(self._counts)
