"""CLI entry point for news curator."""

import asyncio
import json
import logging
from contextlib import AsyncExitStack
from datetime import date, datetime
from pathlib import Path
from typing import Optional

import typer

from news_curator.adapters.digest import MarkdownDigestRenderer
from news_curator.adapters.llm import ClaudeClient
from news_curator.adapters.sources import RSSFeedSource
from news_curator.adapters.storage import YamlArticleStore
from news_curator.adapters.web import HttpPageFetcher
from news_curator.config import Settings, get_settings
from news_curator.core.errors import ConfigurationError, NewsCuratorError
from news_curator.logger import setup_logging
from news_curator.pipeline import (
    Deduplicator,
    DetailAnalyzer,
    ImageEnricher,
    PromptBuilder,
    QualityFilter,
    TitleFilter,
)
from news_curator.report import EvidenceValidator, QualityEvaluator, ReportSynthesizer
from news_curator.use_cases import CurationPipeline, DailyReportService, ReportResult

logger = logging.getLogger("news_curator.cli")

app = typer.Typer(help="Curate, analyze and summarize economic news.", no_args_is_help=True)

ConfigOption = typer.Option(Path("config.yaml"), "--config", "-c", help="Path to YAML config")


def _load(config: Path, require_api: bool = True) -> Settings:
    try:
        settings = get_settings(config)
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    setup_logging(settings.log_level, settings.paths.log_file)
    if require_api:
        try:
            settings.validate()
        except ConfigurationError as e:
            logger.error("Configuration error: %s", e)
            raise typer.Exit(code=1)
    return settings


def _parse_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as e:
        raise typer.BadParameter(f"Expected YYYY-MM-DD, got {value!r}") from e


def _execute(job) -> None:
    """Run a coroutine, turning domain errors into exit code 1."""
    try:
        ok = asyncio.run(job)
    except NewsCuratorError as e:
        logger.error("%s", e)
        raise typer.Exit(code=1)
    if not ok:
        raise typer.Exit(code=1)


def build_pipeline(settings: Settings, generator: ClaudeClient, fetcher: HttpPageFetcher) -> CurationPipeline:
    store = YamlArticleStore(settings.paths.storage_dir)
    cfg = settings.pipeline
    claude = settings.claude
    timeout = claude.request_timeout
    return CurationPipeline(
        store=store,
        deduplicator=Deduplicator(store),
        title_filter=TitleFilter(
            generator,
            cfg.title_shortlist_size,
            cfg.title_batch_size,
            timeout,
            max_tokens=claude.scoring.max_tokens,
            temperature=claude.scoring.temperature,
        ),
        image_enricher=ImageEnricher(fetcher, cfg.image_concurrency),
        quality_filter=QualityFilter(
            generator,
            cfg.quality_shortlist_size,
            timeout,
            max_tokens=claude.scoring.max_tokens,
            temperature=claude.scoring.temperature,
        ),
        detail_analyzer=DetailAnalyzer(
            generator,
            PromptBuilder(exemplar_store=store),
            concurrency=cfg.analysis_concurrency,
            request_timeout=timeout,
            max_tokens=claude.analysis.max_tokens,
            temperature=claude.analysis.temperature,
        ),
        sources=[RSSFeedSource(settings.feeds, timeout=cfg.feed_timeout)],
    )


def build_report_service(settings: Settings, generator: ClaudeClient) -> DailyReportService:
    report = settings.report
    claude = settings.claude
    return DailyReportService(
        store=YamlArticleStore(settings.paths.storage_dir),
        synthesizer=ReportSynthesizer(
            generator,
            report.article_base_url,
            report.max_articles,
            claude.report_timeout,
            max_tokens=claude.report.max_tokens,
            temperature=claude.report.temperature,
        ),
        evidence_validator=EvidenceValidator(
            generator,
            check_relevance=not report.skip_evidence_check,
            threshold=report.relevance_threshold,
            timeout=claude.request_timeout,
            max_tokens=claude.relevance.max_tokens,
            temperature=claude.relevance.temperature,
        ),
        quality_evaluator=QualityEvaluator(
            generator,
            MarkdownDigestRenderer(),
            claude.report_timeout,
            max_tokens=claude.evaluation.max_tokens,
            temperature=claude.evaluation.temperature,
        ),
        timezone=settings.timezone,
        min_articles=report.min_articles,
        skip_quality_eval=report.skip_quality_eval,
        batch_pause=report.batch_pause,
    )


def _write_markdown(settings: Settings, result: ReportResult) -> None:
    if result.digest is None:
        return
    output = settings.paths.output_dir / f"{result.report_date.isoformat()}.md"
    DailyReportService.save_markdown(MarkdownDigestRenderer(), result.digest, output)


async def run_pipeline(settings: Settings) -> bool:
    """One collection run; clients are closed even when the run times out."""
    async with AsyncExitStack() as stack:
        generator = await stack.enter_async_context(ClaudeClient(settings))
        fetcher = await stack.enter_async_context(HttpPageFetcher(settings.pipeline.fetch_timeout))
        outcome = await build_pipeline(settings, generator, fetcher).run_with_timeout(settings.pipeline.run_timeout)

    if outcome is None:
        return False
    saved, metrics = outcome
    logger.info("Run complete: %d new articles from %d candidates", saved, metrics.total_candidates)
    return True


@app.command()
def run(config: Path = ConfigOption) -> None:
    """Fetch feeds, select and analyze articles, and store them."""
    settings = _load(config)
    _execute(run_pipeline(settings))


@app.command()
def report(
    day: Optional[str] = typer.Option(None, "--date", "-d", help="Report date (YYYY-MM-DD), defaults to today"),
    config: Path = ConfigOption,
) -> None:
    """Generate the daily digest for one day."""
    settings = _load(config)
    report_date = _parse_date(day)

    async def _report() -> bool:
        async with ClaudeClient(settings) as generator:
            result = await build_report_service(settings, generator).generate(report_date)
        if not result.success:
            logger.error("Report for %s failed: %s", result.report_date, result.error)
            return False

        _write_markdown(settings, result)
        score = f"{result.quality_score:.1f}/100" if result.quality_score is not None else "not graded"
        logger.info("Report %s: %d articles, quality %s", result.digest_id, result.article_count, score)
        return True

    _execute(_report())


@app.command("report-range")
def report_range(
    start: str = typer.Argument(..., help="First day (YYYY-MM-DD)"),
    end: str = typer.Argument(..., help="Last day (YYYY-MM-DD)"),
    config: Path = ConfigOption,
) -> None:
    """Generate digests for every day in a range."""
    settings = _load(config)
    first, last = _parse_date(start), _parse_date(end)
    if last < first:
        raise typer.BadParameter("END is before START")

    async def _report_range() -> bool:
        async with ClaudeClient(settings) as generator:
            results = await build_report_service(settings, generator).generate_range(first, last)
        for result in results:
            _write_markdown(settings, result)
            status = "ok" if result.success else f"failed: {result.error}"
            logger.info("%s: %s", result.report_date, status)
        return all(r.success for r in results)

    _execute(_report_range())


@app.command()
def rate(
    article_id: int = typer.Argument(..., help="Stored article id"),
    rating: int = typer.Argument(..., min=1, max=5, help="Quality rating 1-5"),
    notes: Optional[str] = typer.Option(None, "--notes", "-n"),
    config: Path = ConfigOption,
) -> None:
    """Rate a stored article's analysis."""
    settings = _load(config, require_api=False)
    store = YamlArticleStore(settings.paths.storage_dir)

    async def _rate() -> bool:
        await store.rate_article(article_id, rating, notes)
        return True

    _execute(_rate())


@app.command()
def exemplar(
    article_id: int = typer.Argument(..., help="Stored article id"),
    rating: int = typer.Option(5, "--rating", "-r", min=1, max=5),
    notes: Optional[str] = typer.Option(None, "--notes", "-n"),
    config: Path = ConfigOption,
) -> None:
    """Mark a stored article as a few-shot exemplar."""
    settings = _load(config, require_api=False)
    store = YamlArticleStore(settings.paths.storage_dir)

    async def _mark() -> bool:
        await store.mark_as_exemplar(article_id, rating, notes)
        return True

    _execute(_mark())


@app.command("feedback-stats")
def feedback_stats(config: Path = ConfigOption) -> None:
    """Print feedback statistics as JSON."""
    settings = _load(config, require_api=False)
    store = YamlArticleStore(settings.paths.storage_dir)

    async def _stats() -> bool:
        typer.echo(json.dumps(await store.feedback_stats(), indent=2))
        return True

    _execute(_stats())


if __name__ == "__main__":
    app()
