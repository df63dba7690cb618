"""Async HTTP fetching with per-request failure isolation."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import httpx

from build_news.config import HttpConfig

logger = logging.getLogger(__name__)

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class FeedFetcher:
    """Fetch URL bodies, returning an empty result instead of raising.

    Use as an async context manager so the underlying client is closed:

        async with FeedFetcher(config.http) as fetcher:
            text = await fetcher.fetch(url)
    """

    def __init__(
        self,
        http_config: HttpConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.config = http_config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "FeedFetcher":
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.timeout_seconds),
            headers={"User-Agent": self.config.user_agent},
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> str:
        """GET ``url`` and return its decoded body, or "" if the source is unavailable."""
        response = await self._get(url)
        return response.text if response is not None else ""

    async def fetch_bytes(self, url: str) -> bytes:
        """GET ``url`` and return the undecoded body, or b"" if the source is unavailable.

        Feeds declare their own encoding, so the body is left for the feed
        parser to decode.
        """
        response = await self._get(url)
        return response.content if response is not None else b""

    async def _get(self, url: str) -> Optional[httpx.Response]:
        if self._client is None:
            raise RuntimeError("FeedFetcher must be used as an async context manager")

        attempts = max(self.config.max_retries, 0) + 1
        for attempt in range(1, attempts + 1):
            try:
                response = await self._client.get(url)
            except httpx.HTTPError as e:
                logger.warning("Fetch attempt %d/%d failed for %s: %s", attempt, attempts, url, e)
            else:
                if response.is_success:
                    return response
                logger.warning(
                    "Fetch attempt %d/%d for %s returned HTTP %d",
                    attempt, attempts, url, response.status_code,
                )
                if response.status_code not in RETRYABLE_STATUS:
                    return None

            if attempt < attempts and self.config.backoff_seconds > 0:
                await asyncio.sleep(self.config.backoff_seconds * attempt)

        logger.error("Giving up on %s after %d attempts", url, attempts)
        return None
