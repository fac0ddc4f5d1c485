"""Shared factories for tests."""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Optional

import pytest

from news_curator.core.entities import (
    AnalyzedItem,
    ArticleRecord,
    Candidate,
    DailyDigest,
    EnrichedCandidate,
    QualifiedCandidate,
    ScoredCandidate,
)
from news_curator.core.interfaces import TextGenerator
from news_curator.core.schemas import (
    BatchScoreResponse,
    DailyReportResponse,
    NewsAnalysis,
    QualityEvaluationResponse,
)
from news_curator.report import ReportSynthesizer

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def long_text(prefix: str, length: int) -> str:
    """Deterministic filler text of at least ``length`` characters."""
    text = prefix
    while len(text) < length:
        text += " and the effect keeps spreading through the economy"
    return text


def make_candidate(n: int = 0, **overrides: Any) -> Candidate:
    values = {
        "title": f"Market update number {n}",
        "link": f"https://news.example.com/articles/{n}",
        "description": f"Description of story {n}",
        "published_at": NOW - timedelta(days=2),
        "source": "CNBC Business",
        "region": "US",
    }
    values.update(overrides)
    return Candidate(**values)


def analysis_payload(**overrides: Any) -> dict[str, Any]:
    payload = {
        "headline_summary": long_text("The central bank held rates steady", 150),
        "so_what": {
            "main_point": long_text("Borrowing stays expensive, like a toll road that keeps its toll", 200),
            "market_signal": long_text("Bond markets read this as a pause", 120),
            "time_horizon": "medium",
        },
        "impact_analysis": {
            "investors": {
                "summary": long_text("Investors should expect range-bound yields", 150),
                "action_items": ["Review bond duration"],
                "sectors_affected": ["banks"],
            },
            "workers": {
                "summary": long_text("Hiring in rate-sensitive sectors stays slow", 150),
                "industries_affected": ["construction"],
                "job_outlook": long_text("Job openings flatten", 80),
            },
            "consumers": {
                "summary": long_text("Loan payments stay where they are", 150),
                "price_impact": long_text("Prices keep cooling slowly", 80),
                "spending_advice": long_text("Hold off on variable-rate loans", 80),
            },
        },
        "related_context": {
            "background": long_text("Rates were raised eleven times since 2022", 150),
            "related_events": ["Last month's jobs report"],
            "what_to_watch": long_text("Next inflation print", 100),
        },
        "keywords": ["rates", "central bank", "bonds"],
        "category": "policy",
        "sentiment": {"overall": "neutral", "confidence": 0.8},
        "importance_score": 7,
    }
    payload.update(overrides)
    return payload


def make_analysis(**overrides: Any) -> NewsAnalysis:
    return NewsAnalysis.model_validate(analysis_payload(**overrides))


def make_record(article_id: int, **overrides: Any) -> ArticleRecord:
    values = {
        "id": article_id,
        "title": f"Stored article {article_id}",
        "link": f"https://news.example.com/stored/{article_id}",
        "created_at": NOW,
        "analysis": make_analysis(),
        "source": "CNBC Business",
        "region": "US",
        "importance_score": 5,
    }
    values.update(overrides)
    return ArticleRecord(**values)


def report_payload(article_ids: list[int], evidence_ids: Optional[list[Optional[int]]] = None) -> dict[str, Any]:
    """A DailyReportResponse payload that cites ``article_ids``."""
    first = article_ids[0]
    evidence_ids = evidence_ids if evidence_ids is not None else [first, None]
    insight = {
        "title": "Rates stay put",
        "summary": long_text("The pause changes the outlook for borrowers", 150),
        "analysis": long_text("Looking across the day's coverage the picture is consistent", 400),
        "implications": {
            "investors": long_text("Investors get a quieter bond market", 100),
            "workers": long_text("Workers see slower hiring", 100),
            "consumers": long_text("Consumers keep current loan rates", 100),
        },
        "evidence": [
            {"text": f"Evidence sentence number {i}", "articleId": eid}
            for i, eid in enumerate(evidence_ids)
        ],
        "relatedArticleIds": list(article_ids),
        "actionItems": ["Check your loan terms"],
        "impact": "high",
        "timeHorizon": "medium",
    }
    second_insight = dict(insight, title="Markets shrug", evidence=[
        {"text": "Second insight evidence one", "articleId": first},
        {"text": "Second insight evidence two", "articleId": first},
    ])
    return {
        "title": "Rates on hold, markets calm",
        "executiveSummary": {
            "headline": "Rates on hold: what it means",
            "overview": long_text("Today the central bank held rates", 600),
            "highlights": [
                {
                    "title": f"Highlight {i}",
                    "description": long_text("This matters because", 100),
                    "relatedArticleId": article_ids[i % len(article_ids)],
                }
                for i in range(3)
            ],
            "sentiment": {"overall": "neutral", "description": long_text("A calm day overall", 80)},
        },
        "marketOverview": {
            "summary": long_text("Markets were calm", 400),
            "sections": [
                {
                    "title": f"Section {i}",
                    "content": long_text("Stocks moved sideways", 300),
                    "keyData": ["S&P 500 +0.1%"],
                    "relatedArticleIds": list(article_ids),
                }
                for i in range(2)
            ],
            "outlook": long_text("Expect a quiet week", 200),
            "watchList": ["CPI release", "Jobs report"],
        },
        "keyInsights": [insight, second_insight],
        "topKeywords": ["rates", "bonds", "stocks"],
    }


def quality_payload(scores: Optional[dict[str, float]] = None) -> dict[str, Any]:
    names = ["specificity", "evidence_based", "logical_consistency", "tone", "practicality", "completeness"]
    scores = scores or {}
    return {
        "criteria": {
            name: {"score": scores.get(name, 8), "feedback": f"Feedback for {name} criterion here"}
            for name in names
        },
        "strengths": ["Clear structure"],
        "improvements": ["More figures"],
        "summary": "A solid report with room for more concrete data points overall.",
    }


def batch_scores(scores: dict[int, float]) -> BatchScoreResponse:
    return BatchScoreResponse.model_validate(
        {"articles": [{"index": i, "score": s, "reason": f"score {s}"} for i, s in scores.items()]}
    )


def make_analyzed(n: int = 0, image_url: Optional[str] = None, **candidate_overrides: Any) -> AnalyzedItem:
    analysis_overrides = candidate_overrides.pop("analysis", {})
    scored = ScoredCandidate.from_candidate(make_candidate(n, **candidate_overrides), 80.0, "")
    qualified = QualifiedCandidate.from_enriched(EnrichedCandidate.from_scored(scored, image_url), 75.0)
    return AnalyzedItem.from_qualified(qualified, make_analysis(**analysis_overrides))


def make_digest(article_ids: list[int], report_date: date = date(2026, 3, 10), **payload_kwargs: Any) -> DailyDigest:
    response = DailyReportResponse.model_validate(report_payload(article_ids, **payload_kwargs))
    synthesizer = ReportSynthesizer(ScriptedGenerator(lambda **_: None), "https://news.example.com/news")
    return synthesizer.to_digest(response, [make_record(i) for i in article_ids], report_date)


class ScriptedGenerator(TextGenerator):
    """TextGenerator whose replies come from a handler keyed on the schema."""

    def __init__(self, handler: Callable[..., Any]) -> None:
        self.handler = handler
        self.calls: list[dict[str, Any]] = []

    async def generate(self, *, system, user, schema, max_tokens, temperature, timeout=None):
        call = {
            "system": system,
            "user": user,
            "schema": schema,
            "max_tokens": max_tokens,
            "temperature": temperature,
        }
        self.calls.append(call)
        result = self.handler(**call)
        if isinstance(result, Exception):
            raise result
        return result

    def calls_for(self, schema: type) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["schema"] is schema]


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def analysis() -> NewsAnalysis:
    return make_analysis()


@pytest.fixture
def report_response() -> DailyReportResponse:
    return DailyReportResponse.model_validate(report_payload([1, 2, 3]))


@pytest.fixture
def quality_response() -> QualityEvaluationResponse:
    return QualityEvaluationResponse.model_validate(quality_payload())
