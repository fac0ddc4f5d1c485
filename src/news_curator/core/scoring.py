"""Recency bonus and composite ranking keys."""

from datetime import datetime, timezone
from typing import Optional

# (max hours since publication, bonus); first matching step wins
RECENCY_STEPS: tuple[tuple[float, float], ...] = (
    (1.0, 20.0),
    (3.0, 15.0),
    (6.0, 10.0),
    (12.0, 5.0),
    (24.0, 2.0),
)
MAX_RECENCY_BONUS = RECENCY_STEPS[0][1]


def recency_bonus(published_at: Optional[datetime], now: Optional[datetime] = None) -> float:
    """Step-decaying bonus for fresh items, bounded in [0, MAX_RECENCY_BONUS]."""
    if published_at is None:
        return 0.0

    now = now or datetime.now(timezone.utc)
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    hours = max(0.0, (now - published_at).total_seconds() / 3600)
    for max_hours, bonus in RECENCY_STEPS:
        if hours <= max_hours:
            return bonus
    return 0.0


def composite_score(score: float, published_at: Optional[datetime], now: Optional[datetime] = None) -> float:
    """Content score plus recency bonus."""
    return score + recency_bonus(published_at, now)
