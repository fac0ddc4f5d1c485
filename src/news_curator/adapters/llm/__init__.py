"""Text-generation adapters."""

from news_curator.adapters.llm.claude_client import ClaudeClient

__all__ = ["ClaudeClient"]
