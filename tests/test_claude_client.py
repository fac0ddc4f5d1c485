"""Tests for Claude client."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from news_curator.adapters.llm import ClaudeClient
from news_curator.config import Settings
from news_curator.core.errors import (
    AuthenticationError,
    ExhaustedRetries,
    MalformedRequestError,
    QuotaExceededError,
    ResponseValidationError,
)
from news_curator.core.retry import RetryPolicy
from news_curator.core.schemas import BatchScoreResponse


@pytest.fixture
def mock_settings() -> Settings:
    """Create mock settings."""
    settings = Settings(anthropic_api_key="test-key")
    settings.claude.max_retries = 3
    return settings


@pytest.fixture
def client(mock_settings: Settings) -> ClaudeClient:
    # Zero delays keep retry tests fast
    return ClaudeClient(mock_settings, RetryPolicy(max_attempts=3, base_delay=0.0, max_delay=0.0))


def make_response(status_code: int, text: str = "", stop_reason: str = "end_turn") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    response.json.return_value = {
        "content": [{"type": "text", "text": text}],
        "stop_reason": stop_reason,
    }
    return response


SCORES = json.dumps({"articles": [{"index": 0, "score": 85, "reason": "Rate decision"}]})


async def generate(client: ClaudeClient) -> BatchScoreResponse:
    return await client.generate(
        system="Score these",
        user="[0] Fed holds rates",
        schema=BatchScoreResponse,
        max_tokens=2000,
        temperature=0.3,
    )


@pytest.mark.asyncio
async def test_generate_success(client: ClaudeClient) -> None:
    """Test successful schema-validated generation."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.__aenter__.return_value = mock_client
        mock_client.post.return_value = make_response(200, SCORES)
        mock_client_class.return_value = mock_client

        result = await generate(client)

        assert result.articles[0].score == 85
        assert result.articles[0].reason == "Rate decision"

        payload = mock_client.post.call_args.kwargs["json"]
        assert payload["max_tokens"] == 2000
        assert payload["temperature"] == 0.3
        assert "JSON Schema" in payload["system"]
        headers = mock_client.post.call_args.kwargs["headers"]
        assert headers["x-api-key"] == "test-key"


@pytest.mark.asyncio
async def test_generate_retry_on_429(client: ClaudeClient) -> None:
    """Test retry logic on 429 error."""
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post.side_effect = [make_response(429, "rate limited"), make_response(200, SCORES)]
        mock_client_class.return_value = mock_client

        result = await generate(client)

        assert result.articles[0].index == 0
        assert mock_client.post.call_count == 2


@pytest.mark.asyncio
async def test_generate_retries_network_errors(client: ClaudeClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post.side_effect = [httpx.ConnectError("refused"), make_response(200, SCORES)]
        mock_client_class.return_value = mock_client

        result = await generate(client)

        assert len(result.articles) == 1


@pytest.mark.asyncio
async def test_generate_exhausts_on_server_errors(client: ClaudeClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post.return_value = make_response(503, "overloaded")
        mock_client_class.return_value = mock_client

        with pytest.raises(ExhaustedRetries):
            await generate(client)

        assert mock_client.post.call_count == 3


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("status", "body", "error"),
    [
        (401, "invalid x-api-key", AuthenticationError),
        (403, "forbidden", AuthenticationError),
        (400, "Your credit balance is too low", QuotaExceededError),
        (400, "messages: field required", MalformedRequestError),
    ],
)
async def test_fatal_statuses_fail_immediately(client: ClaudeClient, status, body, error) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post.return_value = make_response(status, body)
        mock_client_class.return_value = mock_client

        with pytest.raises(error):
            await generate(client)

        assert mock_client.post.call_count == 1


@pytest.mark.asyncio
async def test_schema_violation_is_validation_error(client: ClaudeClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post.return_value = make_response(200, '{"articles": [{"index": 0, "score": 150}]}')
        mock_client_class.return_value = mock_client

        with pytest.raises(ResponseValidationError) as exc_info:
            await generate(client)

        assert exc_info.value.schema_name == "BatchScoreResponse"
        # Validation failures are not retried
        assert mock_client.post.call_count == 1


@pytest.mark.asyncio
async def test_invalid_json_is_validation_error(client: ClaudeClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post.return_value = make_response(200, "I could not score these articles.")
        mock_client_class.return_value = mock_client

        with pytest.raises(ResponseValidationError, match="invalid JSON"):
            await generate(client)


@pytest.mark.asyncio
async def test_aclose_releases_http_client(client: ClaudeClient) -> None:
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.post.return_value = make_response(200, SCORES)
        mock_client_class.return_value = mock_client

        async with client:
            await generate(client)

        mock_client.aclose.assert_awaited_once()
