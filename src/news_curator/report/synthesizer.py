"""Daily digest synthesis over one day's analyzed articles."""

import logging
from datetime import date
from typing import Optional

from news_curator.core.entities import (
    ArticleRecord,
    DailyDigest,
    EvidenceItem,
    ExecutiveSummary,
    Highlight,
    Implications,
    KeyInsight,
    MarketOverview,
    MarketSection,
    RelatedArticle,
    SentimentTally,
)
from news_curator.core.interfaces import TextGenerator
from news_curator.core.schemas import DailyReportResponse

logger = logging.getLogger(__name__)

REPORT_MAX_TOKENS = 12000
REPORT_TEMPERATURE = 0.5
DEFAULT_IMPORTANCE = 5
MISSING_ARTICLE_TITLE = "Article details unavailable"

DAILY_REPORT_SYSTEM_PROMPT = """You are a professional economic analyst. Combine today's collected and analyzed economic news into an in-depth daily report.

## Tone and style
- Friendly and approachable; explain jargon with a short definition or analogy.
- Talk to the reader ("worth keeping an eye on").
- Include concrete figures, always with context.

## Titles (title, headline)
- Use concrete numbers, questions, or a personal angle ("your paycheck") to draw readers in.
- BAD: "KOSPI continues rally". GOOD: "KOSPI at 3,000? Experts are split".

## Content
1. Executive summary: a headline under 60 characters, an overview of at least 600 characters,
   and 3-5 highlights that each explain why the story matters.
2. Market overview: a summary of at least 400 characters and 2-5 sections
   (domestic stocks, global finance, FX and rates...) with concrete figures in each.
3. Key insights: 2-5 insights, each with deep analysis, implications for investors,
   workers and consumers, at least two pieces of evidence, and 1-3 actionable items.

## Rules
- Base every claim on the provided articles; prefer derived insight over speculation.
- Put article references only in evidence.articleId and relatedArticleIds, never inline in text.
- No markdown formatting inside text fields.
- This is information analysis, not investment advice.
- Fill every field and meet every minimum length."""


def build_article_url(base_url: str, article_id: int) -> str:
    return f"{base_url.rstrip('/')}/{article_id}"


def tally_sentiment(articles: list[ArticleRecord]) -> SentimentTally:
    """Count article sentiments (mixed counts as neutral) and derive a label."""
    positive = negative = neutral = 0
    for article in articles:
        if article.analysis is None:
            continue
        label = article.analysis.sentiment.overall
        if label == "positive":
            positive += 1
        elif label == "negative":
            negative += 1
        else:
            neutral += 1

    if positive > negative + neutral:
        overall = "positive"
    elif negative > positive + neutral:
        overall = "negative"
    elif positive == negative:
        overall = "mixed"
    else:
        overall = "neutral"

    return SentimentTally(
        overall=overall,
        positive_count=positive,
        negative_count=negative,
        neutral_count=neutral,
    )


def format_articles_for_prompt(articles: list[ArticleRecord]) -> str:
    blocks = []
    for n, article in enumerate(articles, 1):
        parts = [
            f"[Article {n}] ID: {article.id}",
            f"Title: {article.title}",
            f"Source: {article.source or 'Unknown'}",
            f"Importance: {article.importance_score or 'N/A'}/10",
        ]
        analysis = article.analysis
        if analysis is not None:
            parts.extend([
                f"Summary: {analysis.headline_summary}",
                f"Main point: {analysis.so_what.main_point}",
                f"Market signal: {analysis.so_what.market_signal}",
                f"Investors: {analysis.impact_analysis.investors.summary}",
                f"Workers: {analysis.impact_analysis.workers.summary}",
                f"Consumers: {analysis.impact_analysis.consumers.summary}",
                f"Keywords: {', '.join(analysis.keywords)}",
                f"Sentiment: {analysis.sentiment.overall}",
            ])
        blocks.append("\n".join(parts))
    return "\n\n---\n\n".join(blocks)


class ReportSynthesizer:
    """Turn a day's articles into a DailyDigest with resolved article references."""

    def __init__(
        self,
        generator: TextGenerator,
        article_base_url: str,
        max_articles: int = 30,
        timeout: Optional[float] = None,
        max_tokens: int = REPORT_MAX_TOKENS,
        temperature: float = REPORT_TEMPERATURE,
    ) -> None:
        self.generator = generator
        self.article_base_url = article_base_url
        self.max_articles = max_articles
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature

    def select_articles(self, articles: list[ArticleRecord]) -> list[ArticleRecord]:
        """Top articles by importance, newest first on ties."""
        ranked = sorted(articles, key=lambda a: a.created_at, reverse=True)
        ranked.sort(key=lambda a: a.importance_score or 0, reverse=True)
        return ranked[:self.max_articles]

    async def synthesize(self, report_date: date, articles: list[ArticleRecord]) -> DailyDigest:
        top = self.select_articles(articles)
        ids = [a.id for a in top]

        user = (
            f"## Today's top economic news ({len(top)} articles)\n\n"
            f"Allowed article IDs: [{', '.join(map(str, ids))}]\n\n"
            f"{format_articles_for_prompt(top)}\n\n"
            "---\n\n"
            f"Write the daily report from the {len(top)} articles above.\n\n"
            "1. Use only IDs from the list above in relatedArticleIds and articleId.\n"
            "2. Cite the supporting article ID for every analysis.\n"
            "3. Meet every minimum length."
        )

        logger.info("Synthesizing digest for %s from %d articles", report_date, len(top))
        response = await self.generator.generate(
            system=DAILY_REPORT_SYSTEM_PROMPT,
            user=user,
            schema=DailyReportResponse,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            timeout=self.timeout,
        )
        return self.to_digest(response, articles, report_date)

    def to_digest(
        self,
        response: DailyReportResponse,
        articles: list[ArticleRecord],
        report_date: date,
    ) -> DailyDigest:
        """Resolve article references in ``response`` against ``articles``."""
        by_id = {a.id: a for a in articles}

        summary = response.executiveSummary
        executive_summary = ExecutiveSummary(
            headline=summary.headline,
            overview=summary.overview,
            highlights=[
                Highlight(
                    title=h.title,
                    description=h.description,
                    related_article=self._related(h.relatedArticleId, by_id),
                )
                for h in summary.highlights
            ],
            sentiment=summary.sentiment.overall,
            sentiment_description=summary.sentiment.description,
        )

        market = response.marketOverview
        market_overview = MarketOverview(
            summary=market.summary,
            sections=[
                MarketSection(
                    title=s.title,
                    content=s.content,
                    key_data=s.keyData,
                    related_articles=self._related_list(s.relatedArticleIds, by_id),
                )
                for s in market.sections
            ],
            outlook=market.outlook,
            watch_list=market.watchList,
        )

        key_insights = [
            KeyInsight(
                title=insight.title,
                summary=insight.summary,
                analysis=insight.analysis,
                implications=Implications(
                    investors=insight.implications.investors,
                    workers=insight.implications.workers,
                    consumers=insight.implications.consumers,
                ),
                # Evidence keeps unknown ids so the validator can flag them
                evidence=[
                    EvidenceItem(
                        text=e.text,
                        article_id=e.articleId,
                        article_url=build_article_url(self.article_base_url, e.articleId) if e.articleId else None,
                        source=e.source,
                    )
                    for e in insight.evidence
                ],
                related_articles=self._related_list(insight.relatedArticleIds, by_id),
                action_items=insight.actionItems,
                impact=insight.impact,
                time_horizon=insight.timeHorizon,
            )
            for insight in response.keyInsights
        ]

        return DailyDigest(
            report_date=report_date,
            title=response.title,
            executive_summary=executive_summary,
            market_overview=market_overview,
            key_insights=key_insights,
            top_keywords=response.topKeywords,
            sentiment=tally_sentiment(articles),
            article_count=len(articles),
            article_ids=[a.id for a in articles],
        )

    def _related(self, article_id: int, by_id: dict[int, ArticleRecord]) -> RelatedArticle:
        article = by_id.get(article_id)
        if article is None:
            logger.warning("Highlight references unknown article %d", article_id)
            return RelatedArticle(
                id=article_id,
                title=MISSING_ARTICLE_TITLE,
                url=build_article_url(self.article_base_url, article_id),
                importance=DEFAULT_IMPORTANCE,
            )
        return RelatedArticle(
            id=article.id,
            title=article.title,
            url=build_article_url(self.article_base_url, article.id),
            importance=article.importance_score or DEFAULT_IMPORTANCE,
        )

    def _related_list(self, ids: list[int], by_id: dict[int, ArticleRecord]) -> list[RelatedArticle]:
        return [self._related(i, by_id) for i in ids if i in by_id]
