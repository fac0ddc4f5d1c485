"""Representative image discovery for shortlisted articles."""

import logging
from typing import Optional
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from news_curator.core.concurrency import ConcurrencyLimiter, map_isolated
from news_curator.core.entities import EnrichedCandidate, ScoredCandidate
from news_curator.core.interfaces import PageFetcher

logger = logging.getLogger(__name__)

# (selector, attribute), in priority order
IMAGE_SELECTORS: tuple[tuple[str, str], ...] = (
    ('meta[property="og:image"]', "content"),
    ('meta[name="twitter:image"]', "content"),
    ('meta[property="og:image:url"]', "content"),
    ("article img", "src"),
    (".article-image img", "src"),
    ("main img", "src"),
)


def extract_image_url(html: str, page_url: str) -> Optional[str]:
    """First usable image reference in ``html``, as an absolute URL."""
    soup = BeautifulSoup(html, "html.parser")

    for selector, attribute in IMAGE_SELECTORS:
        element = soup.select_one(selector)
        if element is None:
            continue
        value = (element.get(attribute) or "").strip()
        if not value or value.startswith("data:"):
            continue
        return urljoin(page_url, value)

    return None


class ImageEnricher:
    """Attach an image URL to each item; failures mean "no image"."""

    def __init__(self, fetcher: PageFetcher, concurrency: int = 5) -> None:
        self.fetcher = fetcher
        self.concurrency = concurrency

    async def enrich(self, items: list[ScoredCandidate]) -> list[EnrichedCandidate]:
        logger.info("Extracting images for %d articles (concurrency %d)", len(items), self.concurrency)

        results = await map_isolated(self._find_image, items, ConcurrencyLimiter(self.concurrency))

        enriched = []
        for item, result in zip(items, results):
            if isinstance(result, Exception):
                logger.debug("Image lookup failed for %s: %s", item.link, result)
                result = None
            enriched.append(EnrichedCandidate.from_scored(item, result))

        found = sum(1 for e in enriched if e.image_url)
        logger.info("Images found: %d/%d", found, len(items))
        return enriched

    async def _find_image(self, item: ScoredCandidate) -> Optional[str]:
        html = await self.fetcher.fetch(item.link)
        if not html:
            return None
        return extract_image_url(html, item.link)
