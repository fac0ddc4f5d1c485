"""HTTP page fetcher for image discovery."""

import logging
from typing import Optional

import httpx

from news_curator.core.interfaces import PageFetcher

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (compatible; NewsCuratorBot/1.0)"


class HttpPageFetcher(PageFetcher):
    """Fetch article pages over a shared ``httpx.AsyncClient``.

    Never retries: a page that fails once is treated as having no image.
    """

    def __init__(self, timeout: float = 10.0) -> None:
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpPageFetcher":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
            )
        return self._client

    async def fetch(self, url: str) -> Optional[str]:
        try:
            response = await self._get_client().get(url)
        except httpx.HTTPError as e:
            logger.debug("Page fetch failed for %s: %s", url, e)
            return None

        if not response.is_success:
            logger.debug("Page fetch for %s returned HTTP %d", url, response.status_code)
            return None
        return response.text
