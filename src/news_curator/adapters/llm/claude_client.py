"""Claude API client for schema-constrained generation."""

import json
import logging
import re
from typing import Any, Optional

import httpx
from pydantic import BaseModel, ValidationError

from news_curator.config import Settings
from news_curator.core.errors import (
    AuthenticationError,
    MalformedRequestError,
    QuotaExceededError,
    RateLimitError,
    ResponseValidationError,
    TransientError,
)
from news_curator.core.interfaces import ModelT, TextGenerator
from news_curator.core.retry import RetryPolicy, execute

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("credit", "quota", "billing")


class ClaudeClient(TextGenerator):
    """Claude API client implementation.

    Holds one ``httpx.AsyncClient`` created on first use; close it with
    ``aclose()`` or by using the client as an async context manager.
    """

    def __init__(self, settings: Settings, retry_policy: Optional[RetryPolicy] = None) -> None:
        self.api_key = settings.anthropic_api_key
        self.model = settings.claude.model
        self.base_url = "https://api.anthropic.com/v1"
        self.request_timeout = settings.claude.request_timeout
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.claude.max_retries,
            base_delay=settings.claude.base_retry_delay,
            max_delay=settings.claude.max_retry_delay,
        )
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ClaudeClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.request_timeout)
        return self._client

    async def generate(
        self,
        *,
        system: str,
        user: str,
        schema: type[ModelT],
        max_tokens: int,
        temperature: float,
        timeout: Optional[float] = None,
    ) -> ModelT:
        """Generate a reply and validate it against ``schema``."""
        system_prompt = self._with_schema(system, schema)

        async def _attempt() -> str:
            return await self._call_api(
                prompt=user,
                system=system_prompt,
                max_tokens=max_tokens,
                temperature=temperature,
                timeout=timeout or self.request_timeout,
            )

        response = await execute(
            _attempt,
            self.retry_policy,
            description=f"{schema.__name__} generation",
        )
        return self._parse(response, schema)

    def _with_schema(self, system: str, schema: type[BaseModel]) -> str:
        json_schema = json.dumps(schema.model_json_schema(), ensure_ascii=False)
        return (
            f"{system}\n\n"
            "Respond with a single JSON object only, no prose. "
            f"It must validate against this JSON Schema:\n{json_schema}"
        )

    def _parse(self, response: str, schema: type[ModelT]) -> ModelT:
        json_text = self._extract_json(response)
        try:
            data = json.loads(json_text)
        except json.JSONDecodeError as e:
            logger.warning("Claude returned invalid JSON for %s: %s", schema.__name__, e)
            logger.debug("Raw response: %s", response[:500])
            raise ResponseValidationError(schema.__name__, f"invalid JSON: {e}", response) from e

        try:
            return schema.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "Claude response failed %s validation (%d errors)",
                schema.__name__,
                e.error_count(),
            )
            raise ResponseValidationError(schema.__name__, str(e), response) from e

    async def _call_api(
        self,
        prompt: str,
        system: str,
        max_tokens: int,
        temperature: float,
        timeout: float,
    ) -> str:
        """Make one Messages API call and return the reply text."""
        client = self._get_client()
        try:
            response = await client.post(
                f"{self.base_url}/messages",
                headers={
                    "x-api-key": self.api_key,
                    "anthropic-version": "2023-06-01",
                    "content-type": "application/json",
                },
                json={
                    "model": self.model,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                    "system": system,
                    "messages": [
                        {"role": "user", "content": prompt}
                    ],
                },
                timeout=timeout,
            )
        except httpx.TransportError as e:
            raise TransientError(f"Network error calling Claude: {e}") from e

        if response.status_code == 200:
            data = response.json()
            if data.get("stop_reason") == "max_tokens":
                logger.warning("Claude reply hit max_tokens=%d; JSON may be truncated", max_tokens)
            return self._reply_text(data)

        self._raise_for_status(response)
        raise MalformedRequestError(f"Unexpected status {response.status_code}", response.status_code)

    @staticmethod
    def _reply_text(data: dict[str, Any]) -> str:
        for block in data.get("content", []):
            if block.get("type", "text") == "text":
                return block.get("text", "")
        return ""

    def _raise_for_status(self, response: httpx.Response) -> None:
        """Map an error response onto the retry taxonomy."""
        status = response.status_code
        body = response.text[:500]

        if status == 429:
            raise RateLimitError(f"Rate limit hit: {body}", status)
        if status >= 500:
            raise TransientError(f"Server error {status}: {body}", status)
        if status in (401, 403):
            raise AuthenticationError(f"Authentication failed: {body}", status)
        if status == 402 or any(marker in body.lower() for marker in QUOTA_MARKERS):
            raise QuotaExceededError(f"Quota exceeded: {body}", status)
        if 400 <= status < 500:
            raise MalformedRequestError(f"Request rejected ({status}): {body}", status)

    def _fix_json(self, text: str) -> str:
        """Try to fix common JSON issues."""
        # Remove trailing commas before } or ]
        text = re.sub(r',(\s*[}\]])', r'\1', text)
        return text

    def _extract_json(self, text: str) -> str:
        """Extract JSON from markdown code block or raw text."""
        # Strategy 1: JSON in a markdown code block
        code_block_match = re.search(r'```(?:json)?\s*\n(.*?)\n```', text, re.DOTALL)
        if code_block_match:
            return self._fix_json(code_block_match.group(1).strip())

        # Strategy 2: outermost object, allowing arbitrary nesting
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            candidate = self._fix_json(text[start:end + 1])
            try:
                json.loads(candidate)
                return candidate
            except json.JSONDecodeError:
                pass

        # Strategy 3: outermost array
        start, end = text.find("["), text.rfind("]")
        if start != -1 and end > start:
            candidate = self._fix_json(text[start:end + 1])
            try:
                json.loads(candidate)
                return candidate
            except json.JSONDecodeError:
                pass

        # Strategy 4: return as is (last resort)
        return self._fix_json(text.strip())
