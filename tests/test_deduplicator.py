"""Tests for stored-link deduplication."""

from unittest.mock import AsyncMock

import pytest

from conftest import make_candidate
from news_curator.core.errors import StorageError
from news_curator.pipeline import Deduplicator


@pytest.mark.asyncio
async def test_drops_stored_links() -> None:
    store = AsyncMock()
    store.existing_links.return_value = {"https://news.example.com/articles/1"}
    candidates = [make_candidate(n) for n in range(3)]

    result = await Deduplicator(store).filter(candidates)

    assert [c.link for c in result] == [
        "https://news.example.com/articles/0",
        "https://news.example.com/articles/2",
    ]
    store.existing_links.assert_awaited_once()


@pytest.mark.asyncio
async def test_collapses_in_batch_duplicates() -> None:
    store = AsyncMock()
    store.existing_links.return_value = set()
    first = make_candidate(1, title="First copy")
    second = make_candidate(1, title="Second copy")

    result = await Deduplicator(store).filter([first, second, make_candidate(2)])

    assert len(result) == 2
    assert result[0].title == "First copy"
    store.existing_links.assert_awaited_once_with(
        ["https://news.example.com/articles/1", "https://news.example.com/articles/2"]
    )


@pytest.mark.asyncio
async def test_store_failure_passes_batch_through() -> None:
    store = AsyncMock()
    store.existing_links.side_effect = StorageError("disk gone")
    candidates = [make_candidate(n) for n in range(3)]

    result = await Deduplicator(store).filter(candidates)

    assert result == candidates


@pytest.mark.asyncio
async def test_empty_input_skips_lookup() -> None:
    store = AsyncMock()

    assert await Deduplicator(store).filter([]) == []
    store.existing_links.assert_not_called()
