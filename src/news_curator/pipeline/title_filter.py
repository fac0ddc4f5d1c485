"""Stage 1: cheap title-only shortlist."""

import logging
from datetime import datetime
from typing import Optional

from news_curator.core.entities import Candidate, ScoredCandidate
from news_curator.core.interfaces import TextGenerator
from news_curator.core.scoring import composite_score
from news_curator.pipeline.batch_scoring import SCORING_MAX_TOKENS, SCORING_TEMPERATURE, score_batch

logger = logging.getLogger(__name__)

TITLE_FILTER_SYSTEM_PROMPT = """You are an expert financial news editor. Evaluate news article titles for their newsworthiness and economic/financial relevance.

Score each article from 0-100 based on:
- Economic/financial significance (40 points): central bank decisions, major economic indicators, market-moving events
- Market impact potential (30 points): likely to affect stock markets, currencies, or commodities
- Timeliness and freshness (20 points): breaking news, recent developments
- Clarity and informativeness (10 points): clear, informative headline

Focus on:
- Central bank decisions, interest rates
- Major company earnings, M&A, IPOs
- Economic indicators (GDP, inflation, employment)
- Trade policies, regulations

Deprioritize:
- Clickbait or sensational titles
- Opinion pieces without clear news value
- Overly technical items without context

Return a score for every index you are given, as {"articles": [{"index": 0, "score": 85, "reason": "..."}]}."""


class TitleFilter:
    """Shortlist candidates by title score plus recency bonus."""

    def __init__(
        self,
        generator: TextGenerator,
        shortlist_size: int = 30,
        batch_size: int = 50,
        request_timeout: Optional[float] = None,
        max_tokens: int = SCORING_MAX_TOKENS,
        temperature: float = SCORING_TEMPERATURE,
    ) -> None:
        self.generator = generator
        self.shortlist_size = shortlist_size
        self.batch_size = batch_size
        self.request_timeout = request_timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def filter(self, candidates: list[Candidate], now: Optional[datetime] = None) -> list[ScoredCandidate]:
        logger.info("Stage 1: title filtering %d candidates", len(candidates))

        if len(candidates) <= self.shortlist_size:
            logger.info(
                "Stage 1 skipped (%d <= %d), all candidates pass",
                len(candidates),
                self.shortlist_size,
            )
            return [ScoredCandidate.from_candidate(c, 100.0, "below shortlist size") for c in candidates]

        scored: list[ScoredCandidate] = []
        total_batches = (len(candidates) + self.batch_size - 1) // self.batch_size
        for start in range(0, len(candidates), self.batch_size):
            batch = candidates[start:start + self.batch_size]
            logger.info(
                "Scoring title batch %d/%d (%d articles)",
                start // self.batch_size + 1,
                total_batches,
                len(batch),
            )
            scored.extend(await self._score_batch(batch, start))

        scored.sort(key=lambda c: composite_score(c.title_score, c.published_at, now), reverse=True)
        shortlist = scored[:self.shortlist_size]

        logger.info(
            "Stage 1 done: %d selected (title scores %.0f..%.0f)",
            len(shortlist),
            shortlist[0].title_score,
            shortlist[-1].title_score,
        )
        return shortlist

    async def _score_batch(self, batch: list[Candidate], offset: int) -> list[ScoredCandidate]:
        """Score a batch; indexes are global so they stay unique across batches."""
        lines = [
            f'[{offset + i}] "{c.title}" ({c.source or "Unknown"})'
            for i, c in enumerate(batch)
        ]
        user = (
            f"Evaluate these {len(batch)} news article titles and score each one:\n\n"
            + "\n".join(lines)
            + "\n\nReturn scores for ALL articles in JSON format."
        )
        indexes = [offset + i for i in range(len(batch))]

        scores = await score_batch(
            self.generator,
            system=TITLE_FILTER_SYSTEM_PROMPT,
            user=user,
            indexes=indexes,
            missing_score=0.0,
            timeout=self.request_timeout,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        return [
            ScoredCandidate.from_candidate(c, *scores[offset + i])
            for i, c in enumerate(batch)
        ]
