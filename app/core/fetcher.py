"""
Upstream HTTP client shared by the route handlers.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .errors import UpstreamFetchError

logger = logging.getLogger(__name__)

_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
                  "(KHTML, like Gecko) Chrome/123.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,image/*;q=0.9,*/*;q=0.8",
}


class UpstreamFetcher:
    def __init__(self, timeout: float = 10.0, client: Optional[httpx.AsyncClient] = None):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers=_DEFAULT_HEADERS,
        )

    async def _get(self, url: str) -> httpx.Response:
        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("[fetcher] request to %s failed: %s", url, exc)
            raise UpstreamFetchError(url, f"request failed: {exc.__class__.__name__}") from exc
        if not response.is_success:
            logger.warning("[fetcher] %s returned HTTP %d", url, response.status_code)
            raise UpstreamFetchError(
                url,
                f"upstream returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def fetch(self, url: str) -> bytes:
        """Return the body of `url`; raises UpstreamFetchError on any failure."""
        response = await self._get(url)
        return response.content

    async def fetch_text(self, url: str) -> str:
        response = await self._get(url)
        return response.text

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
