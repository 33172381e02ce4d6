"""
FastAPI dependencies resolving the stores held on application state.
"""

from fastapi import Request

from bird_jobs.observability.metrics import MetricsCollector
from bird_jobs.store.base import JobStore


def get_store(request: Request) -> JobStore:
    store = request.app.state.store
    if store is None:
        raise RuntimeError("Job store not initialized")
    return store


def get_metrics_collector(request: Request) -> MetricsCollector:
    return request.app.state.metrics
