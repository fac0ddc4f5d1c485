"""RSS 2.0 and Atom feed source for news candidates."""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
from xml.etree import ElementTree as ET

import httpx
from bs4 import BeautifulSoup

from news_curator.config import FeedConfig
from news_curator.core.concurrency import ConcurrencyLimiter, map_isolated
from news_curator.core.entities import Candidate
from news_curator.core.interfaces import CandidateSource
from news_curator.core.retry import RetryPolicy, execute

logger = logging.getLogger(__name__)

ATOM_NS = "{http://www.w3.org/2005/Atom}"
USER_AGENT = "Mozilla/5.0 (compatible; NewsCuratorBot/1.0)"


def _is_feed_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code >= 500
    return isinstance(error, httpx.TransportError)


def parse_date(value: Optional[str]) -> Optional[datetime]:
    """Parse RFC 822 (RSS) or ISO 8601 (Atom) dates; None if unparseable."""
    if not value:
        return None
    value = value.strip()
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def strip_html(text: Optional[str]) -> Optional[str]:
    if not text:
        return None
    cleaned = BeautifulSoup(text, "html.parser").get_text(" ", strip=True)
    return cleaned or None


def _text(elem: Optional[ET.Element]) -> str:
    return elem.text.strip() if elem is not None and elem.text else ""


class RSSFeedSource(CandidateSource):
    """Fetch candidates from a list of RSS/Atom feeds."""

    def __init__(
        self,
        feeds: list[FeedConfig],
        timeout: float = 30.0,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.feeds = feeds
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=3, base_delay=1.0, is_retryable=_is_feed_retryable
        )

    async def fetch_candidates(self) -> list[Candidate]:
        """Fetch all feeds concurrently; a failed feed contributes nothing."""
        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/rss+xml, application/xml, text/xml, */*",
            },
        ) as client:

            async def _fetch(feed: FeedConfig) -> list[Candidate]:
                return await self._fetch_feed(client, feed)

            results = await map_isolated(_fetch, self.feeds, ConcurrencyLimiter(None))

        candidates: list[Candidate] = []
        for feed, result in zip(self.feeds, results):
            if isinstance(result, Exception):
                logger.error("[%s] fetch failed: %s", feed.source, result)
                continue
            logger.info("[%s] %d articles", feed.source, len(result))
            candidates.extend(result)

        logger.info("Collected %d candidates from %d feeds", len(candidates), len(self.feeds))
        return candidates

    async def _fetch_feed(self, client: httpx.AsyncClient, feed: FeedConfig) -> list[Candidate]:
        async def _get() -> str:
            response = await client.get(feed.url)
            response.raise_for_status()
            return response.text

        xml_content = await execute(_get, self.retry_policy, description=f"feed {feed.source}")
        return self._parse_feed(xml_content, feed)

    def _parse_feed(self, xml_content: str, feed: FeedConfig) -> list[Candidate]:
        """Parse RSS 2.0 items and Atom entries."""
        try:
            root = ET.fromstring(xml_content)
        except ET.ParseError as e:
            logger.error("[%s] XML parse error: %s", feed.source, e)
            return []

        candidates = []

        for item in root.iter("item"):
            candidate = self._build(
                feed,
                title=_text(item.find("title")),
                link=_text(item.find("link")) or _text(item.find("guid")),
                description=_text(item.find("description")),
                published=_text(item.find("pubDate")),
            )
            if candidate:
                candidates.append(candidate)

        for entry in root.iter(f"{ATOM_NS}entry"):
            candidate = self._build(
                feed,
                title=_text(entry.find(f"{ATOM_NS}title")),
                link=self._atom_link(entry),
                description=_text(entry.find(f"{ATOM_NS}summary")) or _text(entry.find(f"{ATOM_NS}content")),
                published=_text(entry.find(f"{ATOM_NS}published")) or _text(entry.find(f"{ATOM_NS}updated")),
            )
            if candidate:
                candidates.append(candidate)

        return candidates

    @staticmethod
    def _atom_link(entry: ET.Element) -> str:
        links = entry.findall(f"{ATOM_NS}link")
        for link in links:
            if link.get("rel", "alternate") == "alternate" and link.get("type", "text/html") == "text/html":
                return link.get("href", "").strip()
        return links[0].get("href", "").strip() if links else ""

    @staticmethod
    def _build(
        feed: FeedConfig,
        title: str,
        link: str,
        description: str,
        published: str,
    ) -> Optional[Candidate]:
        # Entries without title or link are skipped
        if not title or not link:
            return None
        return Candidate(
            title=title,
            link=link,
            description=strip_html(description),
            published_at=parse_date(published),
            source=feed.source,
            region=feed.region,
        )
