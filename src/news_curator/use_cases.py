"""Business logic use cases."""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time, timedelta
from pathlib import Path
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo

from news_curator.core.entities import (
    AnalyzedItem,
    Candidate,
    DailyDigest,
    PipelineMetrics,
    StageMetrics,
)
from news_curator.core.errors import NewsCuratorError
from news_curator.core.interfaces import ArticleStore, CandidateSource, DigestRenderer
from news_curator.pipeline.deduplicator import Deduplicator
from news_curator.pipeline.detail_analyzer import DetailAnalyzer
from news_curator.pipeline.image_enricher import ImageEnricher
from news_curator.pipeline.quality_filter import QualityFilter
from news_curator.pipeline.title_filter import TitleFilter
from news_curator.report.evidence_validator import EvidenceValidator, evidence_score
from news_curator.report.quality_evaluator import QualityEvaluator, final_quality_score
from news_curator.report.synthesizer import ReportSynthesizer

logger = logging.getLogger(__name__)


class _StageTimer:
    """Record one stage's counts and elapsed time into PipelineMetrics."""

    def __init__(self, metrics: PipelineMetrics, name: str, input_count: int) -> None:
        self.metrics = metrics
        self.name = name
        self.input_count = input_count
        self._start = time.perf_counter()

    def done(self, output_count: int) -> None:
        self.metrics.stages.append(
            StageMetrics(
                name=self.name,
                input_count=self.input_count,
                output_count=output_count,
                elapsed_seconds=time.perf_counter() - self._start,
            )
        )


class CurationPipeline:
    """Collect candidates and run them through every selection stage."""

    def __init__(
        self,
        store: ArticleStore,
        deduplicator: Deduplicator,
        title_filter: TitleFilter,
        image_enricher: ImageEnricher,
        quality_filter: QualityFilter,
        detail_analyzer: DetailAnalyzer,
        sources: Optional[list[CandidateSource]] = None,
    ) -> None:
        self.store = store
        self.deduplicator = deduplicator
        self.title_filter = title_filter
        self.image_enricher = image_enricher
        self.quality_filter = quality_filter
        self.detail_analyzer = detail_analyzer
        self.sources = sources or []

    async def collect(self) -> list[Candidate]:
        """Fetch candidates from all sources; a failing source contributes nothing."""
        candidates: list[Candidate] = []
        for source in self.sources:
            name = source.__class__.__name__
            try:
                items = await source.fetch_candidates()
            except Exception as e:
                logger.error("Source %s failed: %s", name, e)
                continue
            logger.info("Source %s: %d candidates", name, len(items))
            candidates.extend(items)
        return candidates

    async def run(self, candidates: list[Candidate]) -> tuple[list[AnalyzedItem], PipelineMetrics]:
        """Run all stages in order and return survivors with run metrics."""
        started = time.perf_counter()
        metrics = PipelineMetrics(total_candidates=len(candidates))
        analyzed: list[AnalyzedItem] = []

        if candidates:
            timer = _StageTimer(metrics, "dedup", len(candidates))
            unique = await self.deduplicator.filter(candidates)
            timer.done(len(unique))

            if not unique:
                logger.info("All candidates are already stored")
            else:
                timer = _StageTimer(metrics, "title", len(unique))
                shortlisted = await self.title_filter.filter(unique)
                timer.done(len(shortlisted))

                timer = _StageTimer(metrics, "images", len(shortlisted))
                enriched = await self.image_enricher.enrich(shortlisted)
                timer.done(sum(1 for item in enriched if item.image_url))

                timer = _StageTimer(metrics, "quality", len(enriched))
                qualified = await self.quality_filter.filter(enriched)
                timer.done(len(qualified))

                timer = _StageTimer(metrics, "analysis", len(qualified))
                analyzed = await self.detail_analyzer.analyze(qualified)
                timer.done(len(analyzed))

        metrics.with_images = sum(1 for item in analyzed if item.image_url)
        metrics.total_seconds = time.perf_counter() - started
        logger.info("Pipeline metrics: %s", json.dumps(metrics.as_dict(), ensure_ascii=False))
        return analyzed, metrics

    async def save(self, items: list[AnalyzedItem]) -> int:
        """Persist items one by one; returns how many were new."""
        saved = 0
        for item in items:
            try:
                record = await self.store.upsert_article(item)
            except NewsCuratorError as e:
                logger.error("Could not save %.40s: %s", item.title, e)
                continue
            if record is not None:
                saved += 1

        logger.info("Saved %d/%d articles (%d duplicates skipped)", saved, len(items), len(items) - saved)
        return saved

    async def run_once(self) -> tuple[int, PipelineMetrics]:
        """Collect, run and save; returns saved count and metrics."""
        candidates = await self.collect()
        analyzed, metrics = await self.run(candidates)
        saved = await self.save(analyzed)
        return saved, metrics

    async def run_with_timeout(self, timeout: float) -> Optional[tuple[int, PipelineMetrics]]:
        """``run_once`` under a wall-clock limit; None when the limit is hit.

        The in-flight stage is cancelled, so nothing past it runs or is saved.
        """
        try:
            return await asyncio.wait_for(self.run_once(), timeout)
        except asyncio.TimeoutError:
            logger.error("Run exceeded %.0fs and was cancelled", timeout)
            return None


@dataclass
class ReportResult:
    report_date: date
    success: bool
    digest: Optional[DailyDigest] = None
    digest_id: Optional[str] = None
    article_count: int = 0
    quality_score: Optional[float] = None
    error: Optional[str] = None


class DailyReportService:
    """Generate, grade and store the digest for a calendar day."""

    def __init__(
        self,
        store: ArticleStore,
        synthesizer: ReportSynthesizer,
        evidence_validator: EvidenceValidator,
        quality_evaluator: QualityEvaluator,
        timezone: str = "Asia/Seoul",
        min_articles: int = 3,
        skip_quality_eval: bool = False,
        batch_pause: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.synthesizer = synthesizer
        self.evidence_validator = evidence_validator
        self.quality_evaluator = quality_evaluator
        self.tz = ZoneInfo(timezone)
        self.min_articles = min_articles
        self.skip_quality_eval = skip_quality_eval
        self.batch_pause = batch_pause
        self._sleep = sleep

    def today(self) -> date:
        return datetime.now(self.tz).date()

    def day_bounds(self, report_date: date) -> tuple[datetime, datetime]:
        """``[start, end)`` of ``report_date`` in the configured timezone."""
        start = datetime.combine(report_date, dt_time.min, tzinfo=self.tz)
        return start, start + timedelta(days=1)

    async def generate(self, report_date: Optional[date] = None) -> ReportResult:
        report_date = report_date or self.today()
        logger.info("Generating daily report for %s", report_date)

        try:
            articles = await self.store.articles_between(*self.day_bounds(report_date))
            logger.info("%d articles for %s", len(articles), report_date)

            if len(articles) < self.min_articles:
                message = f"Too few articles ({len(articles)}), at least {self.min_articles} required"
                logger.warning(message)
                return ReportResult(report_date, False, article_count=len(articles), error=message)

            digest = await self.synthesizer.synthesize(report_date, articles)

            if self.skip_quality_eval:
                logger.info("Quality evaluation skipped")
            else:
                await self._grade(digest, articles)

            digest_id = await self.store.upsert_digest(report_date, digest)
        except NewsCuratorError as e:
            logger.error("Daily report for %s failed: %s", report_date, e)
            return ReportResult(report_date, False, error=str(e))

        return ReportResult(
            report_date,
            True,
            digest=digest,
            digest_id=digest_id,
            article_count=digest.article_count,
            quality_score=digest.quality_score,
        )

    async def _grade(self, digest: DailyDigest, articles: list) -> None:
        """Attach evidence report, verdict and final score; failures leave them unset."""
        try:
            digest.evidence_report = await self.evidence_validator.validate(digest, articles)
            digest.quality_verdict = await self.quality_evaluator.evaluate(digest)
        except NewsCuratorError as e:
            logger.warning("Quality evaluation failed, saving report without it: %s", e)
            return

        evidence = evidence_score(digest.evidence_report)
        digest.quality_score = final_quality_score(digest.quality_verdict, evidence)
        logger.info(
            "Quality score %.1f/100 (rubric %.1f, evidence %.1f)",
            digest.quality_score,
            digest.quality_verdict.overall_score,
            evidence,
        )

    async def generate_range(self, start: date, end: date) -> list[ReportResult]:
        """Generate one digest per day from ``start`` to ``end`` inclusive."""
        if end < start:
            raise ValueError("end date is before start date")

        results = []
        day = start
        while day <= end:
            results.append(await self.generate(day))
            day += timedelta(days=1)
            if day <= end and self.batch_pause > 0:
                await self._sleep(self.batch_pause)

        succeeded = sum(1 for r in results if r.success)
        logger.info("Report range %s..%s: %d/%d succeeded", start, end, succeeded, len(results))
        return results

    @staticmethod
    def save_markdown(renderer: DigestRenderer, digest: DailyDigest, output_path: Path) -> None:
        """Save rendered digest to file."""
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(renderer.render(digest), encoding="utf-8")
        logger.info("Digest saved to %s", output_path)
