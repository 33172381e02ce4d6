"""
Pytest configuration and shared fixtures.
"""

import os
from collections.abc import AsyncGenerator, Awaitable, Callable

# Keep tests from exporting spans; must be set before settings are cached
os.environ.setdefault("OTEL_ENABLED", "false")

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from prometheus_client import CollectorRegistry

from bird_jobs.api.main import create_app
from bird_jobs.observability.metrics import MetricsCollector
from bird_jobs.store.memory import MemoryCounterStore
from bird_jobs.worker.fetcher import WikipediaFetcher
from tests.helpers import WIKIPEDIA_URL, RecordingJobStore

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def store() -> RecordingJobStore:
    """Create an empty in-memory job store."""
    return RecordingJobStore()


@pytest.fixture
def counter_store() -> MemoryCounterStore:
    """Create an empty in-memory counter store."""
    return MemoryCounterStore()


@pytest.fixture
def registry() -> CollectorRegistry:
    """Create an isolated Prometheus registry."""
    return CollectorRegistry()


@pytest.fixture
def metrics(counter_store: MemoryCounterStore, registry: CollectorRegistry) -> MetricsCollector:
    """Create a metrics collector backed by the in-memory counter store."""
    return MetricsCollector(counter_store=counter_store, registry=registry)


@pytest.fixture
def sleeps() -> list[float]:
    """Delays requested through fake_sleep, in order."""
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], Awaitable[None]]:
    """A sleep that records the delay and returns immediately."""

    async def _sleep(delay: float) -> None:
        sleeps.append(delay)

    return _sleep


@pytest_asyncio.fixture
async def make_fetcher(
    fake_sleep: Callable[[float], Awaitable[None]],
) -> AsyncGenerator[Callable[..., WikipediaFetcher]]:
    """Factory for fetchers whose HTTP traffic is served by a handler function."""
    clients: list[httpx.AsyncClient] = []

    def _make(handler: Handler, max_retries: int = 5) -> WikipediaFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return WikipediaFetcher(
            client,
            api_url=WIKIPEDIA_URL,
            max_retries=max_retries,
            base_delay=0.5,
            sleep=fake_sleep,
        )

    yield _make

    for client in clients:
        await client.aclose()


@pytest.fixture
def app(store: RecordingJobStore, metrics: MetricsCollector) -> FastAPI:
    """Create a FastAPI app serving from the in-memory store."""
    return create_app(store=store, metrics=metrics)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create an async HTTP client for testing."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
