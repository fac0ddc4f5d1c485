"""Article and digest storage as individual YAML artifacts."""

import asyncio
import dataclasses
import logging
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ValidationError

from news_curator.core.classifier import classify_category
from news_curator.core.entities import (
    AnalyzedItem,
    ArticleRecord,
    Candidate,
    DailyDigest,
    Exemplar,
)
from news_curator.core.errors import StorageError
from news_curator.core.interfaces import ArticleStore, ExemplarStore
from news_curator.core.schemas import NewsAnalysis

logger = logging.getLogger(__name__)

HIGH_RATING = 4
HIGH_RATING_WINDOW = timedelta(days=30)


def normalize_importance(score: Optional[float]) -> Optional[int]:
    """Clamp an importance score to 1-10, reading 0-100 scores as tenths."""
    if score is None:
        return None
    if 1 <= score <= 10:
        return round(score)
    return max(1, min(10, round(score / 10)))


def to_plain(value: Any) -> Any:
    """Convert entities to YAML-safe builtins."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_plain(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [to_plain(v) for v in value]
    return value


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class YamlArticleStore(ArticleStore, ExemplarStore):
    """Store articles as ``articles/<id>.yaml`` and digests as ``digests/<date>.yaml``.

    All records are loaded once and kept in memory; every write goes straight
    to disk.
    """

    def __init__(self, storage_dir: Path) -> None:
        self.storage_dir = storage_dir
        self.articles_dir = storage_dir / "articles"
        self.digests_dir = storage_dir / "digests"
        self._records: Optional[dict[int, ArticleRecord]] = None
        self._links: dict[str, int] = {}
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Loading and writing
    # ------------------------------------------------------------------

    def _ensure_structure(self) -> None:
        self.articles_dir.mkdir(parents=True, exist_ok=True)
        self.digests_dir.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict[int, ArticleRecord]:
        if self._records is not None:
            return self._records

        try:
            self._ensure_structure()
            records: dict[int, ArticleRecord] = {}
            for path in sorted(self.articles_dir.glob("*.yaml")):
                with open(path, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
                record = self._record_from_dict(data)
                records[record.id] = record
        except (OSError, yaml.YAMLError, KeyError, ValueError) as e:
            raise StorageError(f"Could not load articles from {self.articles_dir}: {e}") from e

        self._records = records
        self._links = {record.link: record.id for record in records.values()}
        logger.debug("Loaded %d stored articles", len(records))
        return records

    def _record_from_dict(self, data: dict[str, Any]) -> ArticleRecord:
        analysis = None
        if data.get("analysis"):
            try:
                analysis = NewsAnalysis.model_validate(data["analysis"])
            except ValidationError as e:
                logger.warning("Stored analysis for article %s is invalid: %s", data.get("id"), e)

        return ArticleRecord(
            id=int(data["id"]),
            title=data["title"],
            link=data["link"],
            created_at=datetime.fromisoformat(data["created_at"]),
            analysis=analysis,
            description=data.get("description"),
            published_at=_parse_dt(data.get("published_at")),
            source=data.get("source"),
            region=data.get("region"),
            image_url=data.get("image_url"),
            importance_score=data.get("importance_score"),
            quality_rating=data.get("quality_rating"),
            is_exemplar=bool(data.get("is_exemplar", False)),
            feedback_notes=data.get("feedback_notes"),
            reviewed_at=_parse_dt(data.get("reviewed_at")),
        )

    def _write_yaml(self, path: Path, data: dict[str, Any]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                yaml.dump(data, f, allow_unicode=True, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(f"Could not write {path}: {e}") from e

    def _article_path(self, article_id: int) -> Path:
        return self.articles_dir / f"{article_id:06d}.yaml"

    def _save_record(self, record: ArticleRecord) -> None:
        self._write_yaml(self._article_path(record.id), to_plain(record))

    def _get_record(self, article_id: int) -> ArticleRecord:
        record = self._load().get(article_id)
        if record is None:
            raise StorageError(f"Article #{article_id} not found")
        return record

    # ------------------------------------------------------------------
    # ArticleStore
    # ------------------------------------------------------------------

    async def existing_links(self, links: list[str]) -> set[str]:
        if not links:
            return set()
        self._load()
        return {link for link in links if link in self._links}

    async def upsert_article(self, item: AnalyzedItem) -> Optional[ArticleRecord]:
        async with self._lock:
            records = self._load()
            if item.link in self._links:
                logger.warning("Duplicate article skipped: %s", item.title)
                return None

            record = ArticleRecord(
                id=max(records, default=0) + 1,
                title=item.title,
                link=item.link,
                created_at=datetime.now(timezone.utc),
                analysis=item.analysis,
                description=item.description,
                published_at=item.published_at,
                source=item.source,
                region=item.region,
                image_url=item.image_url,
                importance_score=normalize_importance(item.analysis.importance_score),
            )
            self._save_record(record)
            records[record.id] = record
            self._links[record.link] = record.id

        logger.debug("Saved article #%d: %s", record.id, record.title)
        return record

    async def articles_between(self, start: datetime, end: datetime) -> list[ArticleRecord]:
        selected = [r for r in self._load().values() if start <= r.created_at < end]
        # Importance desc (unscored last), then newest first
        selected.sort(key=lambda r: r.created_at, reverse=True)
        selected.sort(key=lambda r: r.importance_score or 0, reverse=True)
        return selected

    async def upsert_digest(self, report_date: date, digest: DailyDigest) -> str:
        digest_id = report_date.isoformat()
        data = to_plain(digest)
        data["updated_at"] = datetime.now(timezone.utc).isoformat()
        self._write_yaml(self.digests_dir / f"{digest_id}.yaml", data)
        logger.info("Digest %s saved", digest_id)
        return digest_id

    async def get_digest(self, report_date: date) -> Optional[dict[str, Any]]:
        path = self.digests_dir / f"{report_date.isoformat()}.yaml"
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise StorageError(f"Could not read {path}: {e}") from e

    # ------------------------------------------------------------------
    # ExemplarStore
    # ------------------------------------------------------------------

    async def get_examples_for_prompt(self, candidate: Candidate, limit: int = 2) -> list[Exemplar]:
        """Exemplars first, then recent highly rated articles.

        Exemplars are restricted to the category inferred from the title, if
        any; highly rated articles to the candidate's region, if known.
        """
        records = [r for r in self._load().values() if r.analysis is not None]
        category = classify_category(candidate.title)

        def _rank(r: ArticleRecord) -> tuple[int, datetime]:
            return (r.quality_rating or 0, r.created_at)

        exemplars = sorted(
            (r for r in records if r.is_exemplar and (category is None or r.category == category)),
            key=_rank,
            reverse=True,
        )[:limit]

        if len(exemplars) < limit:
            cutoff = datetime.now(timezone.utc) - HIGH_RATING_WINDOW
            chosen_titles = {r.title for r in exemplars}
            high_rated = sorted(
                (
                    r for r in records
                    if not r.is_exemplar
                    and (r.quality_rating or 0) >= HIGH_RATING
                    and r.created_at >= cutoff
                    and r.title not in chosen_titles
                    and (candidate.region is None or r.region == candidate.region)
                ),
                key=_rank,
                reverse=True,
            )
            exemplars.extend(high_rated[:limit - len(exemplars)])

        return [
            Exemplar(
                title=r.title,
                description=r.description,
                source=r.source,
                region=r.region,
                category=r.category,
                analysis=r.analysis,
                quality_rating=r.quality_rating,
            )
            for r in exemplars
        ]

    async def rate_article(self, article_id: int, rating: int, notes: Optional[str] = None) -> None:
        async with self._lock:
            record = self._get_record(article_id)
            record.quality_rating = min(5, max(1, rating))
            record.feedback_notes = notes
            record.reviewed_at = datetime.now(timezone.utc)
            self._save_record(record)
        logger.info("Article #%d rated %d/5", article_id, record.quality_rating)

    async def mark_as_exemplar(self, article_id: int, rating: int = 5, notes: Optional[str] = None) -> None:
        async with self._lock:
            record = self._get_record(article_id)
            record.is_exemplar = True
            record.quality_rating = min(5, max(1, rating))
            record.feedback_notes = notes
            record.reviewed_at = datetime.now(timezone.utc)
            self._save_record(record)
        logger.info("Article #%d marked as exemplar (%d/5)", article_id, record.quality_rating)

    async def feedback_stats(self) -> dict[str, Any]:
        records = self._load().values()
        ratings = [r.quality_rating for r in records if r.quality_rating is not None]
        return {
            "total_reviewed": len(ratings),
            "exemplar_count": sum(1 for r in records if r.is_exemplar),
            "avg_rating": round(sum(ratings) / len(ratings), 2) if ratings else 0.0,
        }
