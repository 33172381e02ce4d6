"""
SQLAlchemy database models.
Defines the jobs and metric_counters tables.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from bird_jobs.constants import JobStatus
from bird_jobs.types.job import JobRecord


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class JobRow(Base):
    """
    Stored form of a job record, keyed by job id.

    The table is used as a plain key-value map: the claim protocol scans it in
    full inside a transaction rather than relying on a status index. Name
    uniqueness is checked by the creation path, not by a constraint.
    """

    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    status: Mapped[JobStatus] = mapped_column(
        Enum(JobStatus, name="job_status", create_constraint=True, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=JobStatus.QUEUED,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    result: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )

    @staticmethod
    def values_from_record(record: JobRecord) -> dict[str, Any]:
        """Column values for an insert or update of the given record."""
        return {
            "name": record.name,
            "status": record.status,
            "created_at": record.created_at,
            "result": record.result,
            "error": record.error,
        }

    def to_record(self) -> JobRecord:
        return JobRecord(
            id=self.id,
            name=self.name,
            status=JobStatus(self.status),
            created_at=self.created_at,
            result=self.result,
            error=self.error,
        )

    def __repr__(self) -> str:
        return f"JobRow(id={self.id}, name={self.name}, status={self.status})"


class MetricCounter(Base):
    """A named counter incremented by the metrics sink."""

    __tablename__ = "metric_counters"

    key: Mapped[str] = mapped_column(
        String(255),
        primary_key=True,
    )
    value: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
