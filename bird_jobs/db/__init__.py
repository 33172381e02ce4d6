"""
Database module.
Contains database connection, models, and the SQL store implementations.
"""

from bird_jobs.db.connection import (
    close_db,
    create_session_factory,
    get_engine,
    init_db,
)
from bird_jobs.db.models import Base, JobRow, MetricCounter
from bird_jobs.db.repository import SqlCounterStore, SqlJobStore

__all__ = [
    "get_engine",
    "create_session_factory",
    "init_db",
    "close_db",
    "JobRow",
    "MetricCounter",
    "Base",
    "SqlJobStore",
    "SqlCounterStore",
]
