"""Scoring rubrics embedded in the analysis prompt."""

IMPORTANCE_RUBRIC = """## Importance score rubric (importance_score, 1-10)

- 9-10: Moves markets or policy across countries. Central bank rate decisions,
  financial crises, historic index moves, major trade agreements.
- 7-8: Significant for a whole economy or sector. Key data releases (CPI, GDP,
  jobs), earnings of market leaders, large M&A, new regulation.
- 5-6: Relevant to a specific industry or investor group. Mid-size company
  results, sector outlooks, notable corporate strategy changes.
- 3-4: Limited reach. Single-company news without market impact, follow-up
  coverage, minor data.
- 1-2: Background or human-interest pieces with little economic consequence.

Score the news itself, not how well the article is written."""

SENTIMENT_RUBRIC = """## Sentiment rubric (sentiment.overall, sentiment.confidence)

- positive: Most readers would be better off (growth, easing prices, rate cuts
  that lower borrowing costs, strong earnings).
- negative: Most readers would be worse off (recession signals, layoffs, rising
  prices, market sell-offs).
- neutral: Informational with no clear direction.
- mixed: Clear winners and losers at the same time (a strong dollar helps
  importers but hurts exporters).

confidence is 0.0-1.0. Use 0.8 or above only when the article states the
outcome directly; use 0.5-0.7 when you infer it."""

CATEGORY_RUBRIC = """## Category rubric (category)

- policy: Central banks, interest rates, fiscal policy, regulation.
- economy: Macro indicators such as GDP, inflation, employment, growth.
- business: Company results, strategy, management, M&A.
- markets: Stocks, bonds, currencies, commodities, indices.
- trade: Exports, imports, tariffs, supply chains.
- finance: Banking, lending, deposits, insurance, fintech.

Pick the single category that best describes the main subject."""

TIME_HORIZON_RUBRIC = """## Time horizon rubric (so_what.time_horizon)

- short: Effects play out within about a week.
- medium: Effects play out over one to three months.
- long: Effects last a year or more (structural change)."""
