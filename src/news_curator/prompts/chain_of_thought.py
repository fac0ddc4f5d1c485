"""Analysis step templates, chosen by article complexity."""

from typing import Literal

Complexity = Literal["high", "medium", "low"]

ANALYSIS_STEPS = """## Analysis steps (follow internally, output JSON only)

1. Facts: What exactly happened? Who, what, when, how much?
2. Cause: Why did it happen? What led up to it?
3. Transmission: How does it reach people? Trace the chain, for example
   rate hike -> higher loan interest -> less spending.
4. Audiences: What changes for investors, for workers, for consumers?
5. Outlook: What should readers watch next, and when?"""

HIGH_COMPLEXITY_TEMPLATE = f"""{ANALYSIS_STEPS}

### Extra care for this article
This article combines figures with policy or macro context.
- Restate every key number with its unit and comparison point (vs. last
  month, vs. forecast).
- Separate what was decided from what is expected.
- Explain each technical term in plain words the first time it appears.
- Give at least two distinct transmission paths."""

MEDIUM_COMPLEXITY_TEMPLATE = f"""{ANALYSIS_STEPS}

### Focus for this article
- Anchor the analysis on the most important figure in the article.
- Give one clear transmission path and one concrete everyday example."""

LOW_COMPLEXITY_TEMPLATE = """## Analysis steps (follow internally, output JSON only)

1. Facts: Summarize what happened in one sentence.
2. Meaning: Why should a general reader care?
3. Audiences: One practical takeaway each for investors, workers and consumers.

The article is short; do not invent figures it does not contain."""

TONE_GUIDELINES = """## Tone

- Write like a friend who knows economics explaining the news over coffee.
- Use everyday analogies ("it is like...", "for example...").
- Address the reader directly and keep sentences short.
- This is information, not investment advice; say so when giving actions."""

PRACTICAL_INSIGHT_GUIDE = """## Practical insight

- action_items must be things a reader can actually do this week or month.
- Name sectors and industries explicitly rather than "some companies".
- State time frames ("over the next three months") wherever possible."""


def get_cot_template(complexity: Complexity) -> str:
    if complexity == "high":
        return HIGH_COMPLEXITY_TEMPLATE
    if complexity == "low":
        return LOW_COMPLEXITY_TEMPLATE
    return MEDIUM_COMPLEXITY_TEMPLATE
