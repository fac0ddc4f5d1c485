"""Stage 3: structured per-article analysis."""

import logging
from typing import Optional

from news_curator.core.concurrency import ConcurrencyLimiter, map_isolated
from news_curator.core.entities import AnalyzedItem, QualifiedCandidate
from news_curator.core.errors import (
    ExhaustedRetries,
    ResponseValidationError,
    StageError,
)
from news_curator.core.interfaces import TextGenerator
from news_curator.core.schemas import NewsAnalysis
from news_curator.pipeline.prompt_builder import (
    DEFAULT_TOKEN_BUDGET,
    PromptBuilder,
    check_token_budget,
)

logger = logging.getLogger(__name__)

ANALYSIS_TEMPERATURE = 0.4
ANALYSIS_MAX_TOKENS = 3000


class DetailAnalyzer:
    """Analyze every item concurrently; only schema-valid analyses survive."""

    def __init__(
        self,
        generator: TextGenerator,
        prompt_builder: PromptBuilder,
        concurrency: Optional[int] = None,
        request_timeout: Optional[float] = None,
        token_budget: int = DEFAULT_TOKEN_BUDGET,
        max_tokens: int = ANALYSIS_MAX_TOKENS,
        temperature: float = ANALYSIS_TEMPERATURE,
    ) -> None:
        self.generator = generator
        self.prompt_builder = prompt_builder
        self.concurrency = concurrency
        self.request_timeout = request_timeout
        self.token_budget = token_budget
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def analyze(self, items: list[QualifiedCandidate]) -> list[AnalyzedItem]:
        """Analyze items, dropping failures.

        Raises:
            StageError: no item succeeded and at least one failed fatally.
        """
        if not items:
            return []

        logger.info(
            "Stage 3: analyzing %d articles (concurrency %s)",
            len(items),
            self.concurrency or "unbounded",
        )
        results = await map_isolated(self._analyze_one, items, ConcurrencyLimiter(self.concurrency))

        analyzed: list[AnalyzedItem] = []
        fatal: list[Exception] = []
        for item, result in zip(items, results):
            if isinstance(result, ResponseValidationError):
                logger.error("Analysis dropped, invalid response for %.40s: %s", item.title, result.reason[:200])
            elif isinstance(result, ExhaustedRetries):
                logger.error("Analysis dropped, retries exhausted for %.40s: %s", item.title, result)
            elif isinstance(result, Exception):
                logger.error("Analysis dropped, fatal error for %.40s: %s", item.title, result)
                fatal.append(result)
            else:
                analyzed.append(AnalyzedItem.from_qualified(item, result))

        logger.info("Stage 3 done: %d/%d analyzed", len(analyzed), len(items))

        if not analyzed and fatal:
            raise StageError(
                f"Detail analysis failed for all {len(items)} articles",
                {"fatal_errors": len(fatal), "first_error": str(fatal[0])},
            ) from fatal[0]

        return analyzed

    async def _analyze_one(self, item: QualifiedCandidate) -> NewsAnalysis:
        prompt = await self.prompt_builder.build(item)
        check_token_budget(prompt, self.token_budget)
        return await self.generator.generate(
            system=prompt.system,
            user=prompt.user,
            schema=NewsAnalysis,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout=self.request_timeout,
        )
