"""Check digest evidence against the articles it cites."""

import logging
from typing import Optional

from news_curator.core.entities import (
    ArticleRecord,
    DailyDigest,
    EvidenceCheck,
    EvidenceItem,
    EvidenceReport,
)
from news_curator.core.errors import TextGenerationError
from news_curator.core.interfaces import TextGenerator
from news_curator.core.schemas import EvidenceRelevanceResponse

logger = logging.getLogger(__name__)

RELEVANCE_TEMPERATURE = 0.3
RELEVANCE_MAX_TOKENS = 500

RELEVANCE_SYSTEM_PROMPT = "You are an evidence verification expert. Evaluate objectively."


def evidence_score(report: EvidenceReport) -> float:
    """Pass rate, blended 90/10 with average relevance when relevance was checked."""
    if report.total == 0:
        return 100.0

    score = report.validation_rate
    relevance = [d.relevance_score for d in report.details if d.relevance_score is not None]
    if relevance:
        avg_relevance = sum(relevance) / len(relevance)
        score = score * 0.9 + avg_relevance * 10 * 0.1

    return round(score, 1)


class EvidenceValidator:
    """Validate every key-insight evidence item of a digest.

    Evidence without an article id is accepted as external. An id outside
    the corpus is always invalid. With ``check_relevance`` the generator
    rates how well the cited article supports the text; generation errors
    fall back to accepting the item on its id alone.
    """

    def __init__(
        self,
        generator: Optional[TextGenerator] = None,
        check_relevance: bool = True,
        threshold: float = 5.0,
        timeout: Optional[float] = None,
        max_tokens: int = RELEVANCE_MAX_TOKENS,
        temperature: float = RELEVANCE_TEMPERATURE,
    ) -> None:
        self.generator = generator
        self.check_relevance = check_relevance and generator is not None
        self.threshold = threshold
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def validate(self, digest: DailyDigest, articles: list[ArticleRecord]) -> EvidenceReport:
        by_id = {a.id: a for a in articles}
        evidence = digest.evidence_items()

        details = []
        for item in evidence:
            check = await self._check(item, by_id)
            if not check.is_valid:
                logger.warning("Invalid evidence %r: %s", item.text[:30], check.reason)
            details.append(check)

        valid = sum(1 for d in details if d.is_valid)
        total = len(details)
        rate = valid / total * 100 if total else 100.0

        report = EvidenceReport(
            total=total,
            valid_count=valid,
            invalid_count=total - valid,
            validation_rate=round(rate, 1),
            details=details,
            summary=f"{valid} of {total} evidence items valid ({rate:.1f}%)",
        )
        logger.info("Evidence validation: %s", report.summary)
        return report

    async def _check(self, item: EvidenceItem, by_id: dict[int, ArticleRecord]) -> EvidenceCheck:
        if item.article_id is None:
            return EvidenceCheck(item.text, None, True, "external source evidence")

        article = by_id.get(item.article_id)
        if article is None:
            return EvidenceCheck(item.text, item.article_id, False, f"nonexistent id: {item.article_id}")

        if not self.check_relevance:
            return EvidenceCheck(item.text, item.article_id, True, "valid article id")

        try:
            relevance = await self._relevance(item.text, article)
        except TextGenerationError as e:
            logger.debug("Relevance check failed, accepting on id alone: %s", e)
            return EvidenceCheck(
                item.text, item.article_id, True, "relevance check failed; article id verified only"
            )

        score = relevance.relevanceScore
        if score >= self.threshold:
            return EvidenceCheck(item.text, item.article_id, True, relevance.reasoning, score)
        return EvidenceCheck(
            item.text,
            item.article_id,
            False,
            f"low relevance ({score:g}/10): {relevance.reasoning}",
            score,
        )

    async def _relevance(self, text: str, article: ArticleRecord) -> EvidenceRelevanceResponse:
        analysis = article.analysis
        user = (
            "## Evidence check\n\n"
            f'### Evidence text\n"{text}"\n\n'
            "### Cited article\n"
            f"- Title: {article.title}\n"
            f"- Summary: {analysis.headline_summary if analysis else 'none'}\n"
            f"- Main point: {analysis.so_what.main_point if analysis else 'none'}\n\n"
            "### Scale\n"
            "- 10: the evidence matches the article directly\n"
            "- 7-9: reasonably inferred from the article\n"
            "- 4-6: related, but weak as direct support\n"
            "- 1-3: barely related\n"
            "- 0: unrelated\n\n"
            "Rate whether the evidence is grounded in this article."
        )
        return await self.generator.generate(
            system=RELEVANCE_SYSTEM_PROMPT,
            user=user,
            schema=EvidenceRelevanceResponse,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout=self.timeout,
        )
