"""
Store abstractions consumed by the job lifecycle engine.

Components receive a store instance instead of reaching for a module-level
database handle, so tests can hand in an in-memory store and several workers
can share one.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TypeVar

from bird_jobs.types.job import JobRecord

T = TypeVar("T")


class JobTransaction(ABC):
    """Reads and writes performed inside a single store transaction."""

    @abstractmethod
    async def scan(self) -> list[tuple[str, JobRecord]]:
        """Return every (key, record) pair in the store's natural order."""

    @abstractmethod
    async def get(self, key: str) -> JobRecord | None:
        """Return the record stored at key, if any."""

    @abstractmethod
    async def put(self, key: str, record: JobRecord) -> None:
        """Insert or replace the record stored at key."""


class JobStore(ABC):
    """
    Transactional key-value map from job id to job record.

    Implementations must guarantee that the reads and writes performed by one
    transaction() call are isolated from every concurrently running
    transaction. The claim protocol depends on nothing else.

    A store may later keep a secondary index of queued jobs to avoid the full
    scan, as long as claiming through it stays a single transaction.
    """

    @abstractmethod
    async def transaction(self, fn: Callable[[JobTransaction], Awaitable[T]]) -> T:
        """
        Run fn inside an isolated transaction.

        Args:
            fn: Coroutine function receiving the transaction handle.

        Returns:
            Whatever fn returns. Writes are committed only if fn returns.
        """

    async def scan(self) -> list[tuple[str, JobRecord]]:
        return await self.transaction(lambda tx: tx.scan())

    async def get(self, key: str) -> JobRecord | None:
        return await self.transaction(lambda tx: tx.get(key))

    async def put(self, key: str, record: JobRecord) -> None:
        await self.transaction(lambda tx: tx.put(key, record))

    async def ping(self) -> bool:
        """Check that the store is reachable."""
        return True

    async def close(self) -> None:
        """Release any resources held by the store."""


class CounterStore(ABC):
    """Named integer counters with atomic increments."""

    @abstractmethod
    async def increment(self, key: str) -> int:
        """Atomically add one to the counter and return the new value."""

    @abstractmethod
    async def get(self, key: str) -> int:
        """Return the counter value, zero if it was never incremented."""

    @abstractmethod
    async def snapshot(self) -> dict[str, int]:
        """Return every counter value."""
