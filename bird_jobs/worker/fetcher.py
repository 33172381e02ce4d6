"""
Wikipedia extract lookup with bounded retry.

The lookup is the only external call a job makes. Any error raised by an
attempt, including transport errors, non-2xx responses and malformed bodies,
counts as a failed attempt; a page without an extract is a successful lookup
that simply found no content.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from bird_jobs.config import get_settings
from bird_jobs.constants import SPAN_FETCH_EXTRACT, WIKIPEDIA_QUERY_PARAMS
from bird_jobs.exceptions import FetchError, error_message
from bird_jobs.observability.tracing import get_tracer

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


class WikipediaFetcher:
    """
    Fetches the introductory extract of a Wikipedia page by title.

    Makes up to max_retries + 1 attempts. Before retry k (k being the
    0-indexed attempt that just failed) it sleeps base_delay * 2**k seconds.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        api_url: str | None = None,
        max_retries: int | None = None,
        base_delay: float | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """
        Initialize the fetcher.

        Args:
            client: HTTP client to use. One is created (and owned) if omitted.
            api_url: Wikipedia action API endpoint.
            max_retries: Attempts allowed after the first one.
            base_delay: Delay in seconds before the first retry.
            sleep: Coroutine used to wait between attempts.
        """
        settings = get_settings()

        self.api_url = api_url or settings.fetch_api_url
        self.max_retries = settings.fetch_max_retries if max_retries is None else max_retries
        self.base_delay = settings.fetch_base_delay_seconds if base_delay is None else base_delay
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be at least 0, got {self.max_retries}")
        if self.base_delay < 0:
            raise ValueError(f"base_delay must be at least 0, got {self.base_delay}")
        self._sleep = sleep

        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers={"User-Agent": settings.fetch_user_agent},
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def backoff_delay(self, attempt: int) -> float:
        """Seconds to wait after the given 0-indexed attempt failed."""
        return self.base_delay * 2**attempt

    async def fetch_extract(self, name: str) -> str | None:
        """
        Look up the extract for a subject name.

        Args:
            name: Page title to look up.

        Returns:
            The extract text, or None if the page has no extract.

        Raises:
            FetchError: If every attempt failed. The message is that of the
                last attempt's error.
        """
        last_error: Exception | None = None

        with get_tracer().start_as_current_span(SPAN_FETCH_EXTRACT) as span:
            span.set_attribute("subject", name)

            for attempt in range(self.max_attempts):
                logger.info(
                    "Fetching extract",
                    extra={"subject": name, "attempt": attempt + 1, "max_attempts": self.max_attempts},
                )
                try:
                    extract = await self._request_extract(name)
                except Exception as e:
                    last_error = e
                    if attempt == self.max_retries:
                        break

                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        "Fetch failed, retrying",
                        extra={
                            "subject": name,
                            "attempt": attempt + 1,
                            "retry_in_seconds": delay,
                            "error": error_message(e),
                        },
                    )
                    await self._sleep(delay)
                    continue

                span.set_attribute("attempts", attempt + 1)
                logger.info(
                    "Fetch succeeded",
                    extra={"subject": name, "attempt": attempt + 1, "has_extract": extract is not None},
                )
                return extract

            span.set_attribute("attempts", self.max_attempts)

        logger.error(
            "Fetch failed after all attempts",
            extra={"subject": name, "attempts": self.max_attempts, "error": error_message(last_error)},
        )
        raise FetchError(error_message(last_error), attempts=self.max_attempts) from last_error

    async def _request_extract(self, name: str) -> str | None:
        params = {**WIKIPEDIA_QUERY_PARAMS, "titles": name}
        response = await self._client.get(self.api_url, params=params)

        if not response.is_success:
            raise FetchError(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"Invalid JSON response: {e}") from e

        return _first_page_extract(data)

    async def aclose(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "WikipediaFetcher":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _first_page_extract(data: Any) -> str | None:
    """Pull query.pages[0].extract out of a formatversion=2 response."""
    try:
        pages = data["query"]["pages"]
    except (KeyError, TypeError) as e:
        raise FetchError("Unexpected response: missing query.pages") from e

    if not isinstance(pages, list):
        raise FetchError("Unexpected response: query.pages is not a list")
    if not pages:
        return None

    page = pages[0]
    if not isinstance(page, dict):
        raise FetchError("Unexpected response: page is not an object")
    return page.get("extract")
