"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any, Optional, TypeVar

from pydantic import BaseModel

from news_curator.core.entities import (
    AnalyzedItem,
    ArticleRecord,
    Candidate,
    DailyDigest,
    Exemplar,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


class TextGenerator(ABC):
    """Interface for schema-constrained text generation."""

    @abstractmethod
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
        """Generate a reply and validate it against ``schema``.

        Raises:
            ResponseValidationError: reply does not satisfy the schema.
            FatalError: non-retryable transport or provider failure.
            ExhaustedRetries: every attempt failed with a retryable error.
        """


class CandidateSource(ABC):
    """Interface for fetching candidate articles."""

    @abstractmethod
    async def fetch_candidates(self) -> list[Candidate]:
        """Fetch the current batch of candidates."""


class PageFetcher(ABC):
    """Interface for fetching article pages."""

    @abstractmethod
    async def fetch(self, url: str) -> Optional[str]:
        """Return page HTML, or None on timeout, non-2xx or transport error."""


class ArticleStore(ABC):
    """Persistence for analyzed articles and daily digests."""

    @abstractmethod
    async def existing_links(self, links: list[str]) -> set[str]:
        """Return the subset of ``links`` that is already stored."""

    @abstractmethod
    async def upsert_article(self, item: AnalyzedItem) -> Optional[ArticleRecord]:
        """Persist an analyzed item; None if its link is already stored."""

    @abstractmethod
    async def articles_between(self, start: datetime, end: datetime) -> list[ArticleRecord]:
        """Articles created in ``[start, end)``, importance desc then newest."""

    @abstractmethod
    async def upsert_digest(self, report_date: date, digest: DailyDigest) -> str:
        """Insert or replace the digest for ``report_date``; returns its id."""

    @abstractmethod
    async def get_digest(self, report_date: date) -> Optional[dict[str, Any]]:
        """Stored digest for ``report_date`` as plain data."""


class ExemplarStore(ABC):
    """Human feedback on analyses, reused as few-shot examples."""

    @abstractmethod
    async def get_examples_for_prompt(self, candidate: Candidate, limit: int = 2) -> list[Exemplar]:
        """Best rated analyses to show when analyzing ``candidate``."""

    @abstractmethod
    async def rate_article(self, article_id: int, rating: int, notes: Optional[str] = None) -> None:
        """Record a 1-5 quality rating."""

    @abstractmethod
    async def mark_as_exemplar(self, article_id: int, rating: int = 5, notes: Optional[str] = None) -> None:
        """Rate an article and flag it as a few-shot exemplar."""

    @abstractmethod
    async def feedback_stats(self) -> dict[str, Any]:
        """Totals over reviewed articles."""


class DigestRenderer(ABC):
    """Interface for rendering digests."""

    @abstractmethod
    def render(self, digest: DailyDigest) -> str:
        """Render digest as text."""
