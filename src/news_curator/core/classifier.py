"""Keyword-based category inference."""

import re
from typing import Optional

# Ordered; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("policy", (
        "fed", "연준", "금리", "interest rate", "fomc", "한은", "기준금리",
        "통화정책", "central bank",
    )),
    ("economy", (
        "gdp", "cpi", "인플레이션", "inflation", "경제성장", "실업률",
        "unemployment", "물가", "경기",
    )),
    ("business", (
        "실적", "영업이익", "매출", "earnings", "revenue", "profit", "분기",
        "quarter", "ceo",
    )),
    ("markets", (
        "코스피", "kospi", "코스닥", "s&p", "nasdaq", "주가", "stock",
        "증시", "채권", "bond", "유가", "oil",
    )),
    ("trade", (
        "수출", "수입", "export", "import", "관세", "tariff", "무역", "trade",
        "supply chain", "공급망",
    )),
    ("finance", (
        "은행", "bank", "대출", "loan", "예금", "deposit", "금융", "보험",
        "핀테크",
    )),
)


def _keyword_pattern(keyword: str) -> str:
    # Hangul attaches particles directly, so only ASCII keywords need boundaries
    if not keyword.isascii():
        return re.escape(keyword)
    return rf"\b{re.escape(keyword)}(?:s|es)?\b"


CATEGORY_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = tuple(
    (category, re.compile("|".join(_keyword_pattern(k) for k in keywords)))
    for category, keywords in CATEGORY_KEYWORDS
)


def classify_category(text: str) -> Optional[str]:
    """Infer a category from free text, or None if nothing matches."""
    lowered = text.lower()
    for category, pattern in CATEGORY_PATTERNS:
        if pattern.search(lowered):
            return category
    return None
