"""Core domain layer."""

from news_curator.core.entities import (
    AnalyzedItem,
    ArticleRecord,
    Candidate,
    DailyDigest,
    EnrichedCandidate,
    Exemplar,
    PipelineMetrics,
    QualifiedCandidate,
    ScoredCandidate,
)
from news_curator.core.errors import (
    ConfigurationError,
    ExhaustedRetries,
    FatalError,
    NewsCuratorError,
    ResponseValidationError,
    StageError,
    StorageError,
    TextGenerationError,
    TransientError,
)
from news_curator.core.interfaces import (
    ArticleStore,
    CandidateSource,
    DigestRenderer,
    ExemplarStore,
    PageFetcher,
    TextGenerator,
)

__all__ = [
    "Candidate",
    "ScoredCandidate",
    "EnrichedCandidate",
    "QualifiedCandidate",
    "AnalyzedItem",
    "ArticleRecord",
    "Exemplar",
    "DailyDigest",
    "PipelineMetrics",
    "NewsCuratorError",
    "ConfigurationError",
    "StorageError",
    "StageError",
    "TextGenerationError",
    "TransientError",
    "FatalError",
    "ExhaustedRetries",
    "ResponseValidationError",
    "TextGenerator",
    "CandidateSource",
    "PageFetcher",
    "ArticleStore",
    "ExemplarStore",
    "DigestRenderer",
]
