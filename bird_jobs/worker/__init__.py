"""
Job lifecycle engine: claim protocol, lookup with retry, processor, and the
polling worker loop.
"""

from bird_jobs.worker.claim import claim_job
from bird_jobs.worker.fetcher import WikipediaFetcher
from bird_jobs.worker.processor import JobProcessor

__all__ = [
    "claim_job",
    "WikipediaFetcher",
    "JobProcessor",
]
