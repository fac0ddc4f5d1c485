"""Rubric grading of a rendered digest."""

import logging
from typing import Optional

from news_curator.core.entities import DailyDigest, QualityVerdict
from news_curator.core.interfaces import DigestRenderer, TextGenerator
from news_curator.core.schemas import QualityEvaluationResponse

logger = logging.getLogger(__name__)

EVALUATION_TEMPERATURE = 0.3
EVALUATION_MAX_TOKENS = 3000

QUALITY_EVALUATION_PROMPT = """You are an expert in evaluating economic content. Grade the daily report objectively on six criteria, each 0-10.

1. specificity: concrete figures, cases and data instead of abstractions
   ("stocks rose" vs "KOSPI broke 2,850, up 1.5%").
2. evidence_based: every claim rests on the provided articles, not on speculation.
3. logical_consistency: the analysis flows logically and conclusions follow from evidence.
4. tone: understandable for non-experts, jargon explained, friendly voice.
5. practicality: actionable advice for investors, workers and consumers.
6. completeness: every section has enough depth and nothing important is missing.

Give constructive feedback for each criterion, plus strengths and improvements."""


def final_quality_score(verdict: QualityVerdict, evidence: float) -> float:
    """Blend rubric and evidence scores 60/40."""
    return round(verdict.overall_score * 0.6 + evidence * 0.4, 1)


class QualityEvaluator:
    def __init__(
        self,
        generator: TextGenerator,
        renderer: DigestRenderer,
        timeout: Optional[float] = None,
        max_tokens: int = EVALUATION_MAX_TOKENS,
        temperature: float = EVALUATION_TEMPERATURE,
    ) -> None:
        self.generator = generator
        self.renderer = renderer
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def evaluate(self, digest: DailyDigest) -> QualityVerdict:
        user = (
            "Grade the quality of this daily report.\n\n"
            f"{self.renderer.render(digest)}\n\n"
            "---\n\n"
            "Score all six criteria and list concrete strengths and improvements."
        )
        response = await self.generator.generate(
            system=QUALITY_EVALUATION_PROMPT,
            user=user,
            schema=QualityEvaluationResponse,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout=self.timeout,
        )

        criteria = dict(response.criteria)
        # Overall is derived from the sub-scores, never taken from the model
        overall = round(sum(c.score for c in criteria.values()) / len(criteria) * 10, 1)

        verdict = QualityVerdict(
            criteria=criteria,
            overall_score=overall,
            strengths=response.strengths,
            improvements=response.improvements,
            summary=response.summary,
        )
        logger.info("Quality evaluation: %.1f/100", overall)
        return verdict
