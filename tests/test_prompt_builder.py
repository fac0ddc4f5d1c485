"""Tests for analysis prompt assembly."""

from unittest.mock import AsyncMock

import pytest

from conftest import make_analysis, make_candidate
from news_curator.core.entities import Exemplar
from news_curator.core.errors import StorageError
from news_curator.pipeline import PromptBuilder
from news_curator.pipeline.prompt_builder import (
    BuiltPrompt,
    check_token_budget,
    estimate_complexity,
    estimate_tokens,
    select_static_examples,
)
from news_curator.prompts.chain_of_thought import HIGH_COMPLEXITY_TEMPLATE, LOW_COMPLEXITY_TEMPLATE


def test_complexity_levels() -> None:
    long_dense = "Inflation rose 3% while the policy outlook shifted. " * 10
    assert estimate_complexity(make_candidate(description=long_dense)) == "high"
    assert estimate_complexity(make_candidate(description="Plain words only. " * 10)) == "medium"
    assert estimate_complexity(make_candidate(title="Short", description="Tiny")) == "low"


def test_long_title_with_numbers_is_medium() -> None:
    candidate = make_candidate(title="Retail sales climbed 4% in the latest monthly data", description=None)

    assert estimate_complexity(candidate) == "medium"


def test_korean_text_costs_more_tokens() -> None:
    assert estimate_tokens("") == 0
    assert estimate_tokens("가" * 100) > estimate_tokens("a" * 100)


def test_token_budget() -> None:
    prompt = BuiltPrompt(system="a" * 350, user="")

    within = check_token_budget(prompt, max_tokens=1000)
    over = check_token_budget(prompt, max_tokens=10)

    assert within.within_budget is True
    assert within.remaining == 1000 - within.estimated_tokens
    assert over.within_budget is False
    assert over.remaining < 0


def test_static_examples_category_then_region() -> None:
    examples = select_static_examples(make_candidate(title="Fed holds rates steady", region="US"))

    assert [ex.category for ex in examples] == ["policy", "business"]


def test_static_examples_region_only() -> None:
    examples = select_static_examples(make_candidate(title="Something happened", region="KR"))

    assert [ex.category for ex in examples] == ["markets"]


def test_static_examples_default() -> None:
    examples = select_static_examples(make_candidate(title="Something happened", region=None))

    assert len(examples) == 1


@pytest.mark.asyncio
async def test_stored_exemplars_take_priority() -> None:
    store = AsyncMock()
    store.get_examples_for_prompt.return_value = [
        Exemplar(
            title="Reviewed rate story",
            description="desc",
            source="CNBC",
            region="US",
            category="policy",
            analysis=make_analysis(),
            quality_rating=5,
        )
    ]

    examples = await PromptBuilder(store).select_examples(make_candidate())

    assert [ex.title for ex in examples] == ["Reviewed rate story"]
    assert examples[0].reasoning == "Reviewed analysis rated 5/5"
    store.get_examples_for_prompt.assert_awaited_once()


@pytest.mark.asyncio
async def test_store_failure_falls_back_to_static() -> None:
    store = AsyncMock()
    store.get_examples_for_prompt.side_effect = StorageError("unreadable")

    examples = await PromptBuilder(store).select_examples(make_candidate(title="Fed holds rates"))

    assert examples[0].category == "policy"


@pytest.mark.asyncio
async def test_empty_store_falls_back_to_static() -> None:
    store = AsyncMock()
    store.get_examples_for_prompt.return_value = []

    examples = await PromptBuilder(store).select_examples(make_candidate(title="Fed holds rates"))

    assert examples[0].category == "policy"


@pytest.mark.asyncio
async def test_build_contains_rubrics_steps_and_article() -> None:
    candidate = make_candidate(title="Short", description="Tiny", source="Yahoo Finance", region=None)

    prompt = await PromptBuilder().build(candidate)

    assert "Importance score rubric" in prompt.system
    assert LOW_COMPLEXITY_TEMPLATE in prompt.system
    assert HIGH_COMPLEXITY_TEMPLATE not in prompt.system
    assert "Reference examples" in prompt.system
    assert "**Title:** Short" in prompt.user
    assert "**Source:** Yahoo Finance" in prompt.user
    assert "**Region:** Unknown" in prompt.user
