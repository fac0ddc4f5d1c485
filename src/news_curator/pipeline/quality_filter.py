"""Stage 2: quality shortlist that prefers articles with images."""

import logging
from datetime import datetime
from typing import Optional

from news_curator.core.entities import EnrichedCandidate, QualifiedCandidate
from news_curator.core.interfaces import TextGenerator
from news_curator.core.scoring import composite_score
from news_curator.pipeline.batch_scoring import (
    NEUTRAL_SCORE,
    SCORING_MAX_TOKENS,
    SCORING_TEMPERATURE,
    score_batch,
)

logger = logging.getLogger(__name__)

QUALITY_FILTER_SYSTEM_PROMPT = """You are a senior news curator selecting the highest quality economic news articles for a general audience.

Score each article from 0-100 based on:
- Content depth and substance (30 points): based on title and description
- Source reliability (25 points): major outlets (CNBC, Bloomberg, WSJ, 매일경제, 한경) score higher
- Visual content availability (25 points): articles with an image score higher
- Reader engagement value (20 points): relevance and interest to a general audience

Prioritize in-depth analysis over brief mentions, data-driven reporting, and clear explanations of complex topics.

Return a score for every index you are given, as {"articles": [{"index": 0, "score": 90, "reason": "..."}]}."""

DESCRIPTION_PREVIEW = 200


class QualityFilter:
    """Rank by quality score plus recency, filling from image-bearing items first."""

    def __init__(
        self,
        generator: TextGenerator,
        shortlist_size: int = 20,
        request_timeout: Optional[float] = None,
        max_tokens: int = SCORING_MAX_TOKENS,
        temperature: float = SCORING_TEMPERATURE,
    ) -> None:
        self.generator = generator
        self.shortlist_size = shortlist_size
        self.request_timeout = request_timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def filter(self, items: list[EnrichedCandidate], now: Optional[datetime] = None) -> list[QualifiedCandidate]:
        has_image = [i for i in items if i.image_url]
        no_image = [i for i in items if not i.image_url]
        logger.info("Stage 2: %d with image, %d without", len(has_image), len(no_image))

        ranked_with_image = self._rank(await self._score(has_image), now)

        if len(has_image) >= self.shortlist_size:
            selected = ranked_with_image[:self.shortlist_size]
            logger.info("Stage 2 done: %d selected, all with images", len(selected))
            return selected

        remaining = self.shortlist_size - len(has_image)
        ranked_no_image = self._rank(await self._score(no_image), now)
        selected = ranked_with_image + ranked_no_image[:remaining]

        logger.info(
            "Stage 2 done: %d selected (%d with image + %d without)",
            len(selected),
            len(ranked_with_image),
            len(selected) - len(ranked_with_image),
        )
        return selected

    @staticmethod
    def _rank(items: list[QualifiedCandidate], now: Optional[datetime]) -> list[QualifiedCandidate]:
        return sorted(items, key=lambda c: composite_score(c.quality_score, c.published_at, now), reverse=True)

    async def _score(self, group: list[EnrichedCandidate]) -> list[QualifiedCandidate]:
        if not group:
            return []

        blocks = []
        for i, item in enumerate(group):
            description = (item.description or "")[:DESCRIPTION_PREVIEW] or "(no description)"
            blocks.append(
                f'[{i}] "{item.title}"\n'
                f"   Source: {item.source or 'Unknown'}\n"
                f"   Description: {description}\n"
                f"   Has Image: {'Yes' if item.image_url else 'No'}"
            )
        user = (
            f"Evaluate these {len(group)} articles for quality:\n\n"
            + "\n\n".join(blocks)
            + "\n\nReturn quality scores for ALL articles in JSON format."
        )

        scores = await score_batch(
            self.generator,
            system=QUALITY_FILTER_SYSTEM_PROMPT,
            user=user,
            indexes=list(range(len(group))),
            missing_score=NEUTRAL_SCORE,
            timeout=self.request_timeout,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return [QualifiedCandidate.from_enriched(item, scores[i][0]) for i, item in enumerate(group)]
