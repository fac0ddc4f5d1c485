"""Markdown digest renderer."""

from news_curator.core.entities import (
    DailyDigest,
    Highlight,
    KeyInsight,
    MarketSection,
    RelatedArticle,
)
from news_curator.core.interfaces import DigestRenderer

SENTIMENT_EMOJI = {
    "positive": "📈",
    "negative": "📉",
    "neutral": "➖",
    "mixed": "🔀",
}


class MarkdownDigestRenderer(DigestRenderer):
    """Render a daily digest as Markdown."""

    def render(self, digest: DailyDigest) -> str:
        """Render markdown digest."""
        summary = digest.executive_summary
        emoji = SENTIMENT_EMOJI.get(summary.sentiment, "")

        lines = [
            f"# {digest.title}",
            "",
            f"*{digest.report_date.isoformat()} · {digest.article_count} articles*",
            "",
            "## Executive Summary",
            "",
            f"### {summary.headline}",
            "",
            summary.overview,
            "",
            f"**Sentiment:** {emoji} {summary.sentiment} · {summary.sentiment_description}",
            "",
        ]

        if summary.highlights:
            lines.extend(["**Highlights:**", ""])
            for highlight in summary.highlights:
                lines.extend(self._format_highlight(highlight))
            lines.append("")

        overview = digest.market_overview
        lines.extend([
            "## Market Overview",
            "",
            overview.summary,
            "",
        ])
        for section in overview.sections:
            lines.extend(self._format_section(section))
        lines.extend([
            "**Outlook:** " + overview.outlook,
            "",
        ])
        if overview.watch_list:
            lines.extend(["**Watch list:**", ""])
            lines.extend(f"- {item}" for item in overview.watch_list)
            lines.append("")

        lines.extend(["## Key Insights", ""])
        for insight in digest.key_insights:
            lines.extend(self._format_insight(insight))

        tally = digest.sentiment
        lines.extend([
            "## Sentiment",
            "",
            f"{SENTIMENT_EMOJI.get(tally.overall, '')} **{tally.overall}** · "
            f"positive {tally.positive_count} / negative {tally.negative_count} / neutral {tally.neutral_count}",
            "",
        ])

        if digest.top_keywords:
            lines.append("**Keywords:** " + ", ".join(digest.top_keywords))
            lines.append("")

        if digest.quality_score is not None:
            lines.append(f"*Quality score: {digest.quality_score:.1f}/100*")
            lines.append("")

        return "\n".join(lines)

    def _format_highlight(self, highlight: Highlight) -> list[str]:
        return [
            f"- **{highlight.title}**: {highlight.description} "
            f"({self._link(highlight.related_article)})",
        ]

    def _format_section(self, section: MarketSection) -> list[str]:
        lines = [
            f"### {section.title}",
            "",
            section.content,
            "",
        ]
        if section.key_data:
            lines.extend(f"- {data}" for data in section.key_data)
            lines.append("")
        if section.related_articles:
            lines.append("Related: " + ", ".join(self._link(a) for a in section.related_articles))
            lines.append("")
        return lines

    def _format_insight(self, insight: KeyInsight) -> list[str]:
        """Format single key insight."""
        lines = [
            f"### {insight.title}",
            "",
            f"*Impact: {insight.impact} · Horizon: {insight.time_horizon}*",
            "",
            insight.summary,
            "",
            insight.analysis,
            "",
            "**What it means:**",
            "",
            f"- Investors: {insight.implications.investors}",
            f"- Workers: {insight.implications.workers}",
            f"- Consumers: {insight.implications.consumers}",
            "",
        ]

        if insight.evidence:
            lines.extend(["**Evidence:**", ""])
            for evidence in insight.evidence:
                if evidence.article_url:
                    lines.append(f"- {evidence.text} ([source]({evidence.article_url}))")
                elif evidence.source:
                    lines.append(f"- {evidence.text} ({evidence.source})")
                else:
                    lines.append(f"- {evidence.text}")
            lines.append("")

        if insight.action_items:
            lines.extend(["**Action items:**", ""])
            lines.extend(f"- {item}" for item in insight.action_items)
            lines.append("")

        if insight.related_articles:
            lines.append("Related: " + ", ".join(self._link(a) for a in insight.related_articles))
            lines.append("")

        lines.append("---")
        lines.append("")

        return lines

    @staticmethod
    def _link(article: RelatedArticle) -> str:
        return f"[{article.title}]({article.url})"
