"""Core domain entities."""

from dataclasses import dataclass, field, fields
from datetime import date, datetime
from typing import Any, Optional

from news_curator.core.schemas import CriterionScore, NewsAnalysis


def _carry(obj: Any) -> dict[str, Any]:
    """Field values of a lifecycle entity, for building the next stage's type."""
    return {f.name: getattr(obj, f.name) for f in fields(obj)}


@dataclass(frozen=True, kw_only=True)
class Candidate:
    """Raw news article as fetched from a feed."""

    title: str
    link: str
    description: Optional[str] = None
    published_at: Optional[datetime] = None
    source: Optional[str] = None
    region: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not self.link:
            raise ValueError("Link cannot be empty")


@dataclass(frozen=True, kw_only=True)
class ScoredCandidate(Candidate):
    """Stage 1 output."""

    title_score: float
    reason: str = ""

    @classmethod
    def from_candidate(cls, candidate: Candidate, title_score: float, reason: str) -> "ScoredCandidate":
        return cls(**_carry(candidate), title_score=title_score, reason=reason)


@dataclass(frozen=True, kw_only=True)
class EnrichedCandidate(ScoredCandidate):
    """Stage 1 output after image discovery."""

    image_url: Optional[str] = None

    @classmethod
    def from_scored(cls, scored: ScoredCandidate, image_url: Optional[str]) -> "EnrichedCandidate":
        values = _carry(scored)
        values["image_url"] = image_url
        return cls(**values)


@dataclass(frozen=True, kw_only=True)
class QualifiedCandidate(EnrichedCandidate):
    """Stage 2 output."""

    quality_score: float
    has_valid_image: bool

    @classmethod
    def from_enriched(cls, enriched: EnrichedCandidate, quality_score: float) -> "QualifiedCandidate":
        return cls(
            **_carry(enriched),
            quality_score=quality_score,
            has_valid_image=bool(enriched.image_url),
        )


@dataclass(frozen=True, kw_only=True)
class AnalyzedItem(QualifiedCandidate):
    """Stage 3 output; only schema-valid analyses get here."""

    analysis: NewsAnalysis

    @classmethod
    def from_qualified(cls, qualified: QualifiedCandidate, analysis: NewsAnalysis) -> "AnalyzedItem":
        return cls(**_carry(qualified), analysis=analysis)


@dataclass
class ArticleRecord:
    """Analyzed article as persisted, with feedback fields."""

    id: int
    title: str
    link: str
    created_at: datetime
    analysis: Optional[NewsAnalysis] = None
    description: Optional[str] = None
    published_at: Optional[datetime] = None
    source: Optional[str] = None
    region: Optional[str] = None
    image_url: Optional[str] = None
    importance_score: Optional[int] = None
    quality_rating: Optional[int] = None
    is_exemplar: bool = False
    feedback_notes: Optional[str] = None
    reviewed_at: Optional[datetime] = None

    @property
    def category(self) -> Optional[str]:
        return self.analysis.category if self.analysis else None


@dataclass
class Exemplar:
    """Previously rated analysis reused as a few-shot example."""

    title: str
    description: Optional[str]
    source: Optional[str]
    region: Optional[str]
    category: Optional[str]
    analysis: Optional[NewsAnalysis]
    quality_rating: Optional[int] = None


# ---------------------------------------------------------------------------
# Daily digest
# ---------------------------------------------------------------------------

@dataclass
class RelatedArticle:
    id: int
    title: str
    url: str
    importance: int = 5


@dataclass
class EvidenceItem:
    text: str
    article_id: Optional[int] = None
    article_url: Optional[str] = None
    source: Optional[str] = None


@dataclass
class Highlight:
    title: str
    description: str
    related_article: RelatedArticle


@dataclass
class ExecutiveSummary:
    headline: str
    overview: str
    highlights: list[Highlight]
    sentiment: str
    sentiment_description: str


@dataclass
class MarketSection:
    title: str
    content: str
    key_data: list[str]
    related_articles: list[RelatedArticle]


@dataclass
class MarketOverview:
    summary: str
    sections: list[MarketSection]
    outlook: str
    watch_list: list[str]


@dataclass
class Implications:
    investors: str
    workers: str
    consumers: str


@dataclass
class KeyInsight:
    title: str
    summary: str
    analysis: str
    implications: Implications
    evidence: list[EvidenceItem]
    related_articles: list[RelatedArticle]
    action_items: list[str]
    impact: str
    time_horizon: str


@dataclass
class SentimentTally:
    overall: str
    positive_count: int
    negative_count: int
    neutral_count: int


@dataclass
class EvidenceCheck:
    """Validation outcome for one evidence item."""

    evidence_text: str
    article_id: Optional[int]
    is_valid: bool
    reason: str
    relevance_score: Optional[float] = None


@dataclass
class EvidenceReport:
    total: int
    valid_count: int
    invalid_count: int
    validation_rate: float
    details: list[EvidenceCheck]
    summary: str


@dataclass
class QualityVerdict:
    criteria: dict[str, CriterionScore]
    overall_score: float
    strengths: list[str]
    improvements: list[str]
    summary: str


@dataclass
class DailyDigest:
    """Aggregate over one calendar day's analyzed articles."""

    report_date: date
    title: str
    executive_summary: ExecutiveSummary
    market_overview: MarketOverview
    key_insights: list[KeyInsight]
    top_keywords: list[str]
    sentiment: SentimentTally
    article_count: int
    article_ids: list[int]
    evidence_report: Optional[EvidenceReport] = None
    quality_verdict: Optional[QualityVerdict] = None
    quality_score: Optional[float] = None

    def evidence_items(self) -> list[EvidenceItem]:
        """Every evidence item cited by the key insights, in order."""
        return [evidence for insight in self.key_insights for evidence in insight.evidence]


@dataclass
class StageMetrics:
    """Counts and timing for one pipeline stage."""

    name: str
    input_count: int
    output_count: int
    elapsed_seconds: float

    @property
    def pass_rate(self) -> float:
        if self.input_count == 0:
            return 0.0
        return self.output_count / self.input_count


@dataclass
class PipelineMetrics:
    total_candidates: int
    stages: list[StageMetrics] = field(default_factory=list)
    with_images: int = 0
    total_seconds: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "total_candidates": self.total_candidates,
            "final_with_images": self.with_images,
            "total_seconds": round(self.total_seconds, 3),
            "stages": {
                s.name: {
                    "in": s.input_count,
                    "out": s.output_count,
                    "pass_rate": round(s.pass_rate, 2),
                    "seconds": round(s.elapsed_seconds, 3),
                }
                for s in self.stages
            },
        }
