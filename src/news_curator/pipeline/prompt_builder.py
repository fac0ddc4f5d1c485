"""Analysis prompt assembly: house rules, rubrics, steps and worked examples."""

import logging
import math
import re
from dataclasses import dataclass
from typing import Optional

from news_curator.core.classifier import classify_category
from news_curator.core.entities import Candidate, Exemplar
from news_curator.core.interfaces import ExemplarStore
from news_curator.prompts.chain_of_thought import (
    PRACTICAL_INSIGHT_GUIDE,
    TONE_GUIDELINES,
    Complexity,
    get_cot_template,
)
from news_curator.prompts.examples import (
    ANALYSIS_EXAMPLES,
    AnalysisExample,
    format_example_for_prompt,
    get_example_by_category,
)
from news_curator.prompts.rubrics import (
    CATEGORY_RUBRIC,
    IMPORTANCE_RUBRIC,
    SENTIMENT_RUBRIC,
    TIME_HORIZON_RUBRIC,
)

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_BUDGET = 8000

NUMBERS_PATTERN = re.compile(r"\d+%|\$\d+|₩\d+|억원|조원")
COMPLEX_KEYWORDS_PATTERN = re.compile(
    r"금리|GDP|인플레이션|FOMC|연준|한은|물가|정책|inflation|interest rate|\bfed\b|policy",
    re.IGNORECASE,
)

KOREAN_CHARS = re.compile(r"[가-힣]")
ENGLISH_CHARS = re.compile(r"[a-zA-Z]")
DIGIT_CHARS = re.compile(r"[0-9]")

CORE_INSTRUCTIONS = """## Core rules (MUST)

1. Friendly, conversational tone. No stiff report-speak.
2. Use at least three everyday analogies or examples across the analysis.
3. Length:
   - headline_summary: at least 150 characters, 4-5 sentences
   - so_what.main_point: at least 200 characters, 5-7 sentences, one analogy
   - every impact summary: at least 150 characters with a real-life example
4. Be specific: figures, periods and dates wherever the article allows.
5. Output JSON matching the requested schema.
6. Language: analyze Korean articles in Korean and English articles in English."""

GUIDELINES = """## Guidelines (SHOULD)

- Talk to the reader ("if you have a variable-rate loan...").
- Explain jargon in parentheses the first time, for example "FOMC (the Fed committee that sets US rates)".
- Show the path of impact: "rate hike -> higher loan interest -> less spending"."""

BASE_SYSTEM_PROMPT = f"""You are a friendly economic analyst who makes economic news easy to understand,
like a well-informed friend explaining it over coffee.

{CORE_INSTRUCTIONS}

{GUIDELINES}"""

SEPARATOR = "\n\n---\n\n"


@dataclass(frozen=True)
class BuiltPrompt:
    system: str
    user: str

    @property
    def text(self) -> str:
        return self.system + self.user


@dataclass(frozen=True)
class TokenBudget:
    within_budget: bool
    estimated_tokens: int
    remaining: int


def estimate_complexity(candidate: Candidate) -> Complexity:
    """Pick how much analysis scaffolding an article needs."""
    description = candidate.description or ""
    text = f"{candidate.title} {description}"
    has_numbers = bool(NUMBERS_PATTERN.search(text))
    has_complex_keywords = bool(COMPLEX_KEYWORDS_PATTERN.search(text))

    if len(description) > 400 and has_numbers and has_complex_keywords:
        return "high"
    if len(description) > 150 or (len(candidate.title) > 30 and has_numbers):
        return "medium"
    return "low"


def estimate_tokens(text: str) -> int:
    """Rough token count for mixed Korean/English text."""
    korean = len(KOREAN_CHARS.findall(text))
    english = len(ENGLISH_CHARS.findall(text))
    digits = len(DIGIT_CHARS.findall(text))
    other = len(text) - korean - english - digits

    tokens = korean * 1.7 + english / 3.5 + digits / 2.5 + other * 0.5
    # 5% safety margin
    return math.ceil(tokens * 1.05)


def check_token_budget(prompt: BuiltPrompt, max_tokens: int = DEFAULT_TOKEN_BUDGET) -> TokenBudget:
    estimated = estimate_tokens(prompt.text)
    remaining = max_tokens - estimated
    if remaining < 0:
        logger.warning("Prompt over token budget: %d/%d (%d over)", estimated, max_tokens, -remaining)
    return TokenBudget(within_budget=remaining >= 0, estimated_tokens=estimated, remaining=remaining)


def exemplar_to_example(exemplar: Exemplar) -> Optional[AnalysisExample]:
    if exemplar.analysis is None:
        return None
    rating = f"{exemplar.quality_rating}/5" if exemplar.quality_rating else "unrated"
    return AnalysisExample(
        category=exemplar.category or exemplar.analysis.category,
        title=exemplar.title,
        description=exemplar.description or "",
        source=exemplar.source or "Unknown",
        region=exemplar.region or "US",
        output=exemplar.analysis.model_dump(mode="json"),
        reasoning=f"Reviewed analysis rated {rating}",
    )


def select_static_examples(candidate: Candidate) -> list[AnalysisExample]:
    """Category match first, then a same-region example of another category."""
    selected: list[AnalysisExample] = []

    category = classify_category(candidate.title)
    if category:
        example = get_example_by_category(category)
        if example:
            selected.append(example)

    if candidate.region:
        region_example = next(
            (
                ex for ex in ANALYSIS_EXAMPLES
                if ex.region == candidate.region
                and all(ex.category != sel.category for sel in selected)
            ),
            None,
        )
        if region_example:
            selected.append(region_example)

    if not selected:
        selected.append(ANALYSIS_EXAMPLES[0])

    return selected


class PromptBuilder:
    """Build the Stage 3 analysis prompt for one article."""

    def __init__(self, exemplar_store: Optional[ExemplarStore] = None, example_limit: int = 2) -> None:
        self.exemplar_store = exemplar_store
        self.example_limit = example_limit

    async def build(self, candidate: Candidate) -> BuiltPrompt:
        examples = await self.select_examples(candidate)
        return BuiltPrompt(
            system=self._system_prompt(candidate, examples),
            user=self._user_prompt(candidate),
        )

    async def select_examples(self, candidate: Candidate) -> list[AnalysisExample]:
        """Reviewed exemplars when available, static examples otherwise."""
        if self.exemplar_store is not None:
            try:
                exemplars = await self.exemplar_store.get_examples_for_prompt(candidate, self.example_limit)
            except Exception as e:
                logger.warning("Exemplar lookup failed, using static examples: %s", e)
            else:
                converted = [ex for ex in map(exemplar_to_example, exemplars) if ex is not None]
                if converted:
                    logger.debug("Using %d stored exemplars", len(converted))
                    return converted

        return select_static_examples(candidate)

    def _system_prompt(self, candidate: Candidate, examples: list[AnalysisExample]) -> str:
        parts = [
            BASE_SYSTEM_PROMPT,
            TONE_GUIDELINES,
            IMPORTANCE_RUBRIC,
            SENTIMENT_RUBRIC,
            CATEGORY_RUBRIC,
            TIME_HORIZON_RUBRIC,
            get_cot_template(estimate_complexity(candidate)),
            PRACTICAL_INSIGHT_GUIDE,
        ]

        if examples:
            parts.append(
                "## Reference examples\n\n"
                "Match the tone, length and use of analogies in these examples.\n\n"
                + "\n".join(format_example_for_prompt(ex) for ex in examples)
            )

        return SEPARATOR.join(parts)

    def _user_prompt(self, candidate: Candidate) -> str:
        published = candidate.published_at.isoformat() if candidate.published_at else "Unknown"
        return "\n".join([
            "## Article",
            "",
            f"**Title:** {candidate.title}",
            f"**Source:** {candidate.source or 'Unknown'}",
            f"**Region:** {candidate.region or 'Unknown'}",
            f"**Published:** {published}",
            "",
            "**Content:**",
            candidate.description or "(no details)",
            "",
            "---",
            "",
            "## Request",
            "",
            "Analyze the article above and return JSON with:",
            "",
            "1. headline_summary: what happened, why it matters, expected impact",
            "2. so_what: main point, market signal, time horizon",
            "3. impact_analysis: effects on investors, workers and consumers",
            "4. related_context: background, related events, what to watch",
            "5. keywords: 3-7 key terms",
            "6. category: economy|finance|business|markets|policy|trade",
            "7. sentiment: overall (positive/negative/neutral/mixed) + confidence (0.0-1.0)",
            "8. importance_score: integer 1-10 (see rubric)",
            "",
            "Follow the analysis steps internally and output only the final JSON.",
        ])
