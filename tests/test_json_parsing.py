"""Tests for JSON parsing in Claude client."""

import json

import pytest

from news_curator.adapters.llm import ClaudeClient
from news_curator.config import Settings


@pytest.fixture
def claude_client() -> ClaudeClient:
    """Create Claude client instance for testing."""
    settings = Settings(anthropic_api_key="test-key")
    return ClaudeClient(settings)


def test_extract_json_from_markdown(claude_client: ClaudeClient) -> None:
    """Test extracting JSON from markdown code block."""
    text = '```json\n{"index": 0, "score": 80}\n```'
    result = claude_client._extract_json(text)
    parsed = json.loads(result)
    assert parsed["score"] == 80


def test_extract_json_from_markdown_without_language(claude_client: ClaudeClient) -> None:
    """Test extracting JSON from markdown code block without language tag."""
    text = '```\n{"index": 1, "score": 20}\n```'
    result = claude_client._extract_json(text)
    parsed = json.loads(result)
    assert parsed["index"] == 1


def test_extract_json_from_text_with_prefix(claude_client: ClaudeClient) -> None:
    """Test extracting JSON when there's text before it."""
    text = 'Here is the analysis:\n{"relevanceScore": 9, "reasoning": "direct match"}'
    result = claude_client._extract_json(text)
    parsed = json.loads(result)
    assert parsed["relevanceScore"] == 9


def test_extract_nested_json(claude_client: ClaudeClient) -> None:
    """Nested objects are extracted whole."""
    text = 'Result: {"so_what": {"time_horizon": "short", "inner": {"x": [1, 2]}}} done'
    parsed = json.loads(claude_client._extract_json(text))
    assert parsed["so_what"]["inner"]["x"] == [1, 2]


def test_extract_json_array(claude_client: ClaudeClient) -> None:
    """Test extracting JSON array."""
    text = 'Here are the keywords:\n["rates", "bonds", "stocks"]'
    result = claude_client._extract_json(text)
    parsed = json.loads(result)
    assert isinstance(parsed, list)
    assert len(parsed) == 3


def test_fix_trailing_commas(claude_client: ClaudeClient) -> None:
    """Test fixing trailing commas."""
    text = '{"articles": [{"index": 0, "score": 50,},],}'
    parsed = json.loads(claude_client._extract_json(text))
    assert parsed["articles"][0]["score"] == 50


def test_unparseable_text_returned_as_is(claude_client: ClaudeClient) -> None:
    assert claude_client._extract_json("  no json here  ") == "no json here"
