"""Tests for the title shortlist stage."""

import re
from datetime import timedelta

import pytest

from conftest import ScriptedGenerator, batch_scores, make_candidate
from news_curator.core.errors import (
    AuthenticationError,
    ExhaustedRetries,
    ResponseValidationError,
    TransientError,
)
from news_curator.pipeline import TitleFilter


def indexes_in(user: str) -> list[int]:
    return [int(i) for i in re.findall(r"^\[(\d+)\]", user, re.MULTILINE)]


@pytest.mark.asyncio
async def test_small_input_bypasses_scoring(now) -> None:
    generator = ScriptedGenerator(lambda **_: pytest.fail("should not be called"))
    candidates = [make_candidate(n) for n in range(5)]

    result = await TitleFilter(generator, shortlist_size=30).filter(candidates, now)

    assert [c.link for c in result] == [c.link for c in candidates]
    assert all(c.title_score == 100.0 for c in result)
    assert generator.calls == []


@pytest.mark.asyncio
async def test_exactly_shortlist_size_bypasses_scoring(now) -> None:
    generator = ScriptedGenerator(lambda **_: pytest.fail("should not be called"))

    result = await TitleFilter(generator, shortlist_size=3).filter([make_candidate(n) for n in range(3)], now)

    assert len(result) == 3


@pytest.mark.asyncio
async def test_keeps_top_scored_with_global_indexes(now) -> None:
    def handler(user, **_):
        # Score grows with the global index
        return batch_scores({i: float(i) for i in indexes_in(user)})

    generator = ScriptedGenerator(handler)
    candidates = [make_candidate(n) for n in range(10)]

    result = await TitleFilter(generator, shortlist_size=3, batch_size=4).filter(candidates, now)

    assert len(generator.calls) == 3
    assert indexes_in(generator.calls[1]["user"]) == [4, 5, 6, 7]
    assert [c.link for c in result] == [candidates[i].link for i in (9, 8, 7)]
    assert generator.calls[0]["temperature"] == 0.3
    assert generator.calls[0]["max_tokens"] == 2000


@pytest.mark.asyncio
async def test_recency_bonus_breaks_near_ties(now) -> None:
    fresh = make_candidate(1, published_at=now - timedelta(minutes=5))
    stale = [make_candidate(n, published_at=now - timedelta(days=3)) for n in range(2, 5)]
    generator = ScriptedGenerator(lambda **_: batch_scores({0: 70, 1: 80, 2: 60, 3: 50}))

    result = await TitleFilter(generator, shortlist_size=2).filter([fresh, *stale], now)

    # 70 + 20 beats 80 + 0
    assert [c.link for c in result] == [fresh.link, stale[0].link]


@pytest.mark.asyncio
async def test_missing_indexes_score_zero(now) -> None:
    generator = ScriptedGenerator(lambda **_: batch_scores({0: 10, 2: 30}))
    candidates = [make_candidate(n) for n in range(3)]

    result = await TitleFilter(generator, shortlist_size=2).filter(candidates, now)

    assert [c.title_score for c in result] == [30.0, 10.0]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ResponseValidationError("BatchScoreResponse", "bad json"),
        ExhaustedRetries(3, TransientError("503")),
    ],
)
async def test_unusable_batch_gets_neutral_scores(now, error) -> None:
    generator = ScriptedGenerator(lambda **_: error)
    candidates = [make_candidate(n) for n in range(4)]

    result = await TitleFilter(generator, shortlist_size=2).filter(candidates, now)

    assert len(result) == 2
    assert all(c.title_score == 50.0 for c in result)


@pytest.mark.asyncio
async def test_fatal_error_propagates(now) -> None:
    generator = ScriptedGenerator(lambda **_: AuthenticationError("bad key", 401))

    with pytest.raises(AuthenticationError):
        await TitleFilter(generator, shortlist_size=2).filter([make_candidate(n) for n in range(4)], now)
