"""
SQL-backed job and counter stores.
Implements the store interfaces on top of PostgreSQL.
"""

import logging
from collections.abc import Awaitable, Callable

from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bird_jobs.db.models import JobRow, MetricCounter
from bird_jobs.exceptions import StoreError
from bird_jobs.store.base import CounterStore, JobStore, JobTransaction, T
from bird_jobs.types.job import JobRecord

logger = logging.getLogger(__name__)

# asyncpg raises plain OSError subclasses when the server cannot be reached
DB_ERRORS = (SQLAlchemyError, OSError)


class _SqlJobTransaction(JobTransaction):
    """
    Job store operations bound to one database transaction.

    With lock=True every row read is taken FOR UPDATE. A concurrent locking
    scan therefore blocks until this transaction commits, and then reads the
    committed status, which is what keeps two workers from claiming the same
    job.
    """

    def __init__(self, session: AsyncSession, lock: bool = True):
        self._session = session
        self._lock = lock

    async def scan(self) -> list[tuple[str, JobRecord]]:
        stmt = (
            select(JobRow)
            .order_by(JobRow.created_at, JobRow.id)
            .execution_options(populate_existing=True)
        )
        if self._lock:
            stmt = stmt.with_for_update()

        result = await self._session.execute(stmt)
        return [(row.id, row.to_record()) for row in result.scalars().all()]

    async def get(self, key: str) -> JobRecord | None:
        stmt = (
            select(JobRow)
            .where(JobRow.id == key)
            .execution_options(populate_existing=True)
        )
        if self._lock:
            stmt = stmt.with_for_update()

        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return row.to_record() if row is not None else None

    async def put(self, key: str, record: JobRecord) -> None:
        values = JobRow.values_from_record(record)
        stmt = (
            insert(JobRow)
            .values(id=key, **values)
            .on_conflict_do_update(index_elements=[JobRow.id], set_=values)
        )
        await self._session.execute(stmt)


class SqlJobStore(JobStore):
    """
    Job store persisted in the jobs table.

    Natural scan order is (created_at, id).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """
        Initialize the store with a session factory.

        Args:
            session_factory: Factory producing async database sessions.
        """
        self._session_factory = session_factory

    async def _run(
        self,
        fn: Callable[[JobTransaction], Awaitable[T]],
        lock: bool,
    ) -> T:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    return await fn(_SqlJobTransaction(session, lock=lock))
        except DB_ERRORS as e:
            logger.error("Job store transaction failed", extra={"error": str(e)})
            raise StoreError(str(e)) from e

    async def transaction(self, fn: Callable[[JobTransaction], Awaitable[T]]) -> T:
        return await self._run(fn, lock=True)

    async def scan(self) -> list[tuple[str, JobRecord]]:
        # Plain reads do not need row locks.
        return await self._run(lambda tx: tx.scan(), lock=False)

    async def get(self, key: str) -> JobRecord | None:
        return await self._run(lambda tx: tx.get(key), lock=False)

    async def ping(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Job store ping failed", exc_info=True)
            return False


class SqlCounterStore(CounterStore):
    """Counter store persisted in the metric_counters table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def increment(self, key: str) -> int:
        """
        Increment a counter with a single upsert statement.

        The database applies value + 1 under its own row lock, so concurrent
        increments of one key never lose updates.
        """
        stmt = (
            insert(MetricCounter)
            .values(key=key, value=1)
            .on_conflict_do_update(
                index_elements=[MetricCounter.key],
                set_={"value": MetricCounter.value + 1},
            )
            .returning(MetricCounter.value)
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.execute(stmt)
                    return result.scalar_one()
        except DB_ERRORS as e:
            raise StoreError(str(e)) from e

    async def get(self, key: str) -> int:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(MetricCounter.value).where(MetricCounter.key == key)
                )
                return result.scalar_one_or_none() or 0
        except DB_ERRORS as e:
            raise StoreError(str(e)) from e

    async def snapshot(self) -> dict[str, int]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(select(MetricCounter.key, MetricCounter.value))
                return {key: value for key, value in result.all()}
        except DB_ERRORS as e:
            raise StoreError(str(e)) from e
