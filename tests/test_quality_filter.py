"""Tests for the image-first quality shortlist."""

import re

import pytest

from conftest import ScriptedGenerator, batch_scores, make_candidate
from news_curator.core.entities import EnrichedCandidate, ScoredCandidate
from news_curator.core.errors import ResponseValidationError
from news_curator.pipeline import QualityFilter


def enriched(n: int, image: bool, description: str = "Body") -> EnrichedCandidate:
    scored = ScoredCandidate.from_candidate(make_candidate(n, description=description), 60.0, "")
    return EnrichedCandidate.from_scored(scored, f"https://img.example.com/{n}.jpg" if image else None)


def score_by_number(user: str):
    """Score each prompt entry by the article number in its title."""
    scores = {}
    for index, number in re.findall(r'^\[(\d+)\] "Market update number (\d+)"', user, re.MULTILINE):
        scores[int(index)] = float(number)
    return batch_scores(scores)


@pytest.mark.asyncio
async def test_enough_images_never_scores_the_rest(now) -> None:
    generator = ScriptedGenerator(lambda user, **_: score_by_number(user))
    items = [enriched(n, image=n < 4) for n in range(8)]

    result = await QualityFilter(generator, shortlist_size=3).filter(items, now)

    assert len(generator.calls) == 1
    assert [c.link for c in result] == [items[i].link for i in (3, 2, 1)]
    assert all(c.has_valid_image for c in result)


@pytest.mark.asyncio
async def test_fills_from_imageless_items(now) -> None:
    generator = ScriptedGenerator(lambda user, **_: score_by_number(user))
    items = [enriched(1, True), enriched(5, False), enriched(2, True), enriched(9, False), enriched(7, False)]

    result = await QualityFilter(generator, shortlist_size=4).filter(items, now)

    assert len(generator.calls) == 2
    # Image-bearing first, then the best imageless ones
    assert [c.link.rsplit("/", 1)[1] for c in result] == ["2", "1", "9", "7"]
    assert [c.has_valid_image for c in result] == [True, True, False, False]
    assert result[0].quality_score == 2.0


@pytest.mark.asyncio
async def test_no_image_group_when_none_have_images(now) -> None:
    generator = ScriptedGenerator(lambda user, **_: score_by_number(user))
    items = [enriched(n, image=False) for n in range(3)]

    result = await QualityFilter(generator, shortlist_size=2).filter(items, now)

    # Empty image group makes no call
    assert len(generator.calls) == 1
    assert len(result) == 2


@pytest.mark.asyncio
async def test_description_is_truncated(now) -> None:
    generator = ScriptedGenerator(lambda **_: batch_scores({0: 50}))
    items = [enriched(0, True, description="x" * 500)]

    await QualityFilter(generator, shortlist_size=1).filter(items, now)

    assert "x" * 200 in generator.calls[0]["user"]
    assert "x" * 201 not in generator.calls[0]["user"]


@pytest.mark.asyncio
async def test_invalid_reply_gives_neutral_scores(now) -> None:
    generator = ScriptedGenerator(lambda **_: ResponseValidationError("BatchScoreResponse", "bad"))
    items = [enriched(n, True) for n in range(3)]

    result = await QualityFilter(generator, shortlist_size=2).filter(items, now)

    assert len(result) == 2
    assert all(c.quality_score == 50.0 for c in result)
