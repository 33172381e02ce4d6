"""
Job and counter store interfaces and in-memory implementations.
"""

from bird_jobs.store.base import CounterStore, JobStore, JobTransaction
from bird_jobs.store.memory import MemoryCounterStore, MemoryJobStore

__all__ = [
    "JobStore",
    "JobTransaction",
    "CounterStore",
    "MemoryJobStore",
    "MemoryCounterStore",
]
