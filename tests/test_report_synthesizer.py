"""Tests for daily digest synthesis."""

from datetime import date, timedelta

import pytest

from conftest import NOW, ScriptedGenerator, make_analysis, make_record, report_payload
from news_curator.core.schemas import DailyReportResponse
from news_curator.report import ReportSynthesizer
from news_curator.report.synthesizer import (
    MISSING_ARTICLE_TITLE,
    build_article_url,
    tally_sentiment,
)

BASE_URL = "https://news.example.com/news"
DAY = date(2026, 3, 10)


def with_sentiment(article_id: int, label: str):
    return make_record(article_id, analysis=make_analysis(sentiment={"overall": label, "confidence": 0.7}))


def test_build_article_url() -> None:
    assert build_article_url("https://news.example.com/news/", 42) == "https://news.example.com/news/42"


@pytest.mark.parametrize(
    ("labels", "overall"),
    [
        (["positive", "positive", "positive", "negative"], "positive"),
        (["negative", "negative", "neutral"], "negative"),
        (["positive", "negative"], "mixed"),
        (["positive", "neutral", "neutral"], "neutral"),
        (["neutral", "neutral", "negative"], "neutral"),
        # No polar articles at all ties positive with negative
        (["mixed", "mixed"], "mixed"),
    ],
)
def test_tally_sentiment(labels, overall) -> None:
    tally = tally_sentiment([with_sentiment(i, label) for i, label in enumerate(labels, 1)])

    assert tally.overall == overall
    assert tally.positive_count + tally.negative_count + tally.neutral_count == len(labels)


def test_mixed_counts_as_neutral() -> None:
    tally = tally_sentiment([with_sentiment(1, "mixed"), with_sentiment(2, "positive")])

    assert tally.neutral_count == 1
    assert tally.positive_count == 1


def test_select_articles_by_importance_then_recency() -> None:
    articles = [
        make_record(1, importance_score=5, created_at=NOW - timedelta(hours=3)),
        make_record(2, importance_score=9, created_at=NOW - timedelta(hours=5)),
        make_record(3, importance_score=5, created_at=NOW - timedelta(hours=1)),
        make_record(4, importance_score=None, created_at=NOW),
    ]
    synthesizer = ReportSynthesizer(ScriptedGenerator(lambda **_: None), BASE_URL, max_articles=3)

    assert [a.id for a in synthesizer.select_articles(articles)] == [2, 3, 1]


@pytest.mark.asyncio
async def test_synthesize_lists_allowed_ids() -> None:
    articles = [make_record(i) for i in (1, 2, 3)]
    generator = ScriptedGenerator(lambda **_: DailyReportResponse.model_validate(report_payload([1, 2, 3])))

    digest = await ReportSynthesizer(generator, BASE_URL).synthesize(DAY, articles)

    call = generator.calls[0]
    assert "Allowed article IDs: [1, 2, 3]" in call["user"]
    assert call["temperature"] == 0.5
    assert call["max_tokens"] == 12000
    assert digest.report_date == DAY
    assert digest.article_count == 3
    assert digest.article_ids == [1, 2, 3]


@pytest.mark.asyncio
async def test_synthesize_uses_configured_generation_settings() -> None:
    generator = ScriptedGenerator(lambda **_: DailyReportResponse.model_validate(report_payload([1])))
    synthesizer = ReportSynthesizer(generator, BASE_URL, max_tokens=16000, temperature=0.7)

    await synthesizer.synthesize(DAY, [make_record(1)])

    assert generator.calls[0]["max_tokens"] == 16000
    assert generator.calls[0]["temperature"] == 0.7


def test_to_digest_resolves_references() -> None:
    articles = [make_record(1, title="Fed pauses"), make_record(2)]
    response = DailyReportResponse.model_validate(report_payload([1, 2, 77], evidence_ids=[1, 9999, None]))
    synthesizer = ReportSynthesizer(ScriptedGenerator(lambda **_: None), BASE_URL)

    digest = synthesizer.to_digest(response, articles, DAY)

    highlights = digest.executive_summary.highlights
    assert highlights[0].related_article.title == "Fed pauses"
    assert highlights[0].related_article.url == f"{BASE_URL}/1"
    # Unknown highlight id gets a placeholder instead of failing
    assert highlights[2].related_article.id == 77
    assert highlights[2].related_article.title == MISSING_ARTICLE_TITLE
    assert highlights[2].related_article.importance == 5

    # Unknown ids are dropped from related lists
    assert [r.id for r in digest.market_overview.sections[0].related_articles] == [1, 2]
    assert [r.id for r in digest.key_insights[0].related_articles] == [1, 2]

    # Evidence keeps every id so it can be validated later
    evidence = digest.key_insights[0].evidence
    assert [e.article_id for e in evidence] == [1, 9999, None]
    assert evidence[0].article_url == f"{BASE_URL}/1"
    assert evidence[2].article_url is None

    assert digest.title == "Rates on hold, markets calm"
    assert digest.top_keywords == ["rates", "bonds", "stocks"]
    assert digest.sentiment.neutral_count == 2
