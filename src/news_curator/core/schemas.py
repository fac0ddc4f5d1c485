"""Response schemas for every text-generation call type.

Each call type has its own model; a reply that does not validate against
it is a ``ResponseValidationError`` rather than a half-parsed dict.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

Category = Literal["economy", "finance", "business", "markets", "policy", "trade"]
SentimentLabel = Literal["positive", "negative", "neutral", "mixed"]
TimeHorizon = Literal["short", "medium", "long"]
Impact = Literal["high", "medium", "low"]


# ---------------------------------------------------------------------------
# Batch scoring (Stage 1 and Stage 2)
# ---------------------------------------------------------------------------

class ArticleScore(BaseModel):
    index: int = Field(..., ge=0)
    score: float = Field(..., ge=0, le=100)
    reason: str = ""


class BatchScoreResponse(BaseModel):
    """Scores for a batch of articles, keyed by the index they were sent with."""

    articles: list[ArticleScore]


# ---------------------------------------------------------------------------
# Detailed analysis (Stage 3)
# ---------------------------------------------------------------------------

class SoWhat(BaseModel):
    main_point: str = Field(..., min_length=200, description="Why this news matters, with at least one everyday analogy")
    market_signal: str = Field(..., min_length=120, description="Signal to markets with concrete reasoning")
    time_horizon: TimeHorizon


class InvestorImpact(BaseModel):
    summary: str = Field(..., min_length=150)
    action_items: list[str]
    sectors_affected: list[str]


class WorkerImpact(BaseModel):
    summary: str = Field(..., min_length=150)
    industries_affected: list[str]
    job_outlook: str = Field(..., min_length=80)


class ConsumerImpact(BaseModel):
    summary: str = Field(..., min_length=150)
    price_impact: str = Field(..., min_length=80)
    spending_advice: str = Field(..., min_length=80)


class ImpactAnalysis(BaseModel):
    investors: InvestorImpact
    workers: WorkerImpact
    consumers: ConsumerImpact


class RelatedContext(BaseModel):
    background: str = Field(..., min_length=150)
    related_events: list[str]
    what_to_watch: str = Field(..., min_length=100)


class Sentiment(BaseModel):
    overall: SentimentLabel
    confidence: float = Field(..., ge=0, le=1)


class NewsAnalysis(BaseModel):
    """Structured analysis attached to every persisted article."""

    headline_summary: str = Field(..., min_length=150, description="What happened, why it matters, expected impact")
    so_what: SoWhat
    impact_analysis: ImpactAnalysis
    related_context: RelatedContext
    keywords: list[str] = Field(..., min_length=3, max_length=7)
    category: Category
    sentiment: Sentiment
    importance_score: int = Field(..., ge=1, le=10)


# ---------------------------------------------------------------------------
# Daily report synthesis
# ---------------------------------------------------------------------------

class HighlightResponse(BaseModel):
    title: str = Field(..., min_length=5)
    description: str = Field(..., min_length=100)
    relatedArticleId: int = Field(..., gt=0)


class SummarySentimentResponse(BaseModel):
    overall: SentimentLabel
    description: str = Field(..., min_length=80)


class ExecutiveSummaryResponse(BaseModel):
    headline: str = Field(..., min_length=10, max_length=60)
    overview: str = Field(..., min_length=600)
    highlights: list[HighlightResponse] = Field(..., min_length=3, max_length=5)
    sentiment: SummarySentimentResponse


class MarketSectionResponse(BaseModel):
    title: str = Field(..., min_length=2)
    content: str = Field(..., min_length=300)
    keyData: list[str] = Field(..., min_length=1)
    relatedArticleIds: list[int]


class MarketOverviewResponse(BaseModel):
    summary: str = Field(..., min_length=400)
    sections: list[MarketSectionResponse] = Field(..., min_length=2, max_length=5)
    outlook: str = Field(..., min_length=200)
    watchList: list[str] = Field(..., min_length=2)


class ImplicationsResponse(BaseModel):
    investors: str = Field(..., min_length=100)
    workers: str = Field(..., min_length=100)
    consumers: str = Field(..., min_length=100)


class EvidenceResponse(BaseModel):
    text: str = Field(..., min_length=10)
    articleId: Optional[int] = None
    source: Optional[str] = None


class KeyInsightResponse(BaseModel):
    title: str = Field(..., min_length=5)
    summary: str = Field(..., min_length=150)
    analysis: str = Field(..., min_length=400)
    implications: ImplicationsResponse
    evidence: list[EvidenceResponse] = Field(..., min_length=2)
    relatedArticleIds: list[int]
    actionItems: list[str] = Field(..., min_length=1, max_length=3)
    impact: Impact
    timeHorizon: TimeHorizon


class DailyReportResponse(BaseModel):
    """Whole-day digest as returned by the synthesis call."""

    title: str = Field(..., min_length=10)
    executiveSummary: ExecutiveSummaryResponse
    marketOverview: MarketOverviewResponse
    keyInsights: list[KeyInsightResponse] = Field(..., min_length=2, max_length=5)
    topKeywords: list[str] = Field(..., min_length=3, max_length=10)


# ---------------------------------------------------------------------------
# Digest grading
# ---------------------------------------------------------------------------

class CriterionScore(BaseModel):
    score: float = Field(..., ge=0, le=10)
    feedback: str = Field(..., min_length=20)


class QualityCriteria(BaseModel):
    specificity: CriterionScore
    evidence_based: CriterionScore
    logical_consistency: CriterionScore
    tone: CriterionScore
    practicality: CriterionScore
    completeness: CriterionScore


class QualityEvaluationResponse(BaseModel):
    criteria: QualityCriteria
    strengths: list[str] = Field(..., min_length=1)
    improvements: list[str] = Field(..., min_length=1)
    summary: str = Field(..., min_length=50)


class EvidenceRelevanceResponse(BaseModel):
    relevanceScore: float = Field(..., ge=0, le=10)
    reasoning: str
