"""Shared batch scoring call used by the title and quality filters."""

import logging
from typing import Optional

from news_curator.core.errors import ExhaustedRetries, ResponseValidationError
from news_curator.core.interfaces import TextGenerator
from news_curator.core.schemas import BatchScoreResponse

logger = logging.getLogger(__name__)

NEUTRAL_SCORE = 50.0
SCORING_TEMPERATURE = 0.3
SCORING_MAX_TOKENS = 2000


async def score_batch(
    generator: TextGenerator,
    *,
    system: str,
    user: str,
    indexes: list[int],
    missing_score: float,
    timeout: Optional[float] = None,
    max_tokens: int = SCORING_MAX_TOKENS,
    temperature: float = SCORING_TEMPERATURE,
) -> dict[int, tuple[float, str]]:
    """Score one batch; returns ``{index: (score, reason)}`` for every index.

    A reply that fails validation, or a call that exhausts its retries,
    gives every index ``NEUTRAL_SCORE``. Indexes the reply leaves out get
    ``missing_score``. Fatal errors propagate.
    """
    try:
        response = await generator.generate(
            system=system,
            user=user,
            schema=BatchScoreResponse,
            max_tokens=max_tokens,
            temperature=temperature,
            timeout=timeout,
        )
    except ResponseValidationError as e:
        logger.error("Batch scoring response invalid, using neutral scores: %s", e.reason[:200])
        return {i: (NEUTRAL_SCORE, "response failed validation") for i in indexes}
    except ExhaustedRetries as e:
        logger.error("Batch scoring gave up, using neutral scores: %s", e)
        return {i: (NEUTRAL_SCORE, "scoring unavailable") for i in indexes}

    by_index = {s.index: (s.score, s.reason) for s in response.articles}
    missing = [i for i in indexes if i not in by_index]
    if missing:
        logger.warning("Batch scoring omitted %d of %d articles", len(missing), len(indexes))
    return {i: by_index.get(i, (missing_score, "no score returned")) for i in indexes}
