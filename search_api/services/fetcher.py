"""Async HTML fetcher with browser-like headers and linear-backoff retries."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import httpx

from search_api.core.errors import TransientFetchError


logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/122 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7",
}

RETRYABLE_ERRORS = (httpx.TransportError, httpx.HTTPStatusError)


class HtmlFetcher:
    """Thin async wrapper around ``httpx.AsyncClient`` for search result pages."""

    def __init__(
        self,
        *,
        timeout_s: float = 10.0,
        retries: int = 2,
        backoff_s: float = 0.5,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.retries = retries
        self.backoff_s = backoff_s
        self._sleep = sleep
        self._client = client or httpx.AsyncClient(
            headers=BROWSER_HEADERS,
            timeout=httpx.Timeout(timeout_s),
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTPX client."""

        await self._client.aclose()

    async def __aenter__(self) -> "HtmlFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._client.aclose()

    async def fetch_html(self, url: str) -> str:
        """GET ``url`` and return the body, retrying transient failures.

        Attempt ``n`` (1-based) that fails waits ``backoff_s * n`` seconds
        before the next one. When every attempt fails the last error is
        raised as ``TransientFetchError`` with the original as its cause.
        """

        attempts = self.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.get(url)
                response.raise_for_status()
                return response.text
            except RETRYABLE_ERRORS as exc:
                if attempt == attempts:
                    logger.warning("Giving up on %s after %d attempt(s): %s", url, attempt, exc)
                    raise TransientFetchError(url, attempt, exc) from exc
                delay = self.backoff_s * attempt
                logger.warning(
                    "Fetch attempt %d/%d for %s failed (%s); retrying in %.1fs",
                    attempt,
                    attempts,
                    url,
                    exc,
                    delay,
                )
                await self._sleep(delay)
        raise TransientFetchError(url, attempts)
