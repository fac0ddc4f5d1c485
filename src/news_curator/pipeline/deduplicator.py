"""Stage 0: drop candidates that are already stored."""

import logging

from news_curator.core.entities import Candidate
from news_curator.core.interfaces import ArticleStore

logger = logging.getLogger(__name__)


class Deduplicator:
    """Filter out candidates whose link is already persisted."""

    def __init__(self, store: ArticleStore) -> None:
        self.store = store

    async def filter(self, candidates: list[Candidate]) -> list[Candidate]:
        if not candidates:
            return []

        # Collapse repeated links within this batch, first occurrence wins
        unique: dict[str, Candidate] = {}
        for candidate in candidates:
            unique.setdefault(candidate.link, candidate)
        batch = list(unique.values())
        if len(batch) < len(candidates):
            logger.info("Collapsed %d in-batch duplicate links", len(candidates) - len(batch))

        try:
            existing = await self.store.existing_links(list(unique))
        except Exception as e:
            logger.warning("Duplicate lookup failed, continuing with all candidates: %s", e)
            return batch

        if not existing:
            logger.info("Stage 0: no stored duplicates, %d new candidates", len(batch))
            return batch

        fresh = [c for c in batch if c.link not in existing]
        logger.info("Stage 0: %d already stored, %d new candidates", len(existing), len(fresh))
        return fresh
