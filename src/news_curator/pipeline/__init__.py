"""Selection and enrichment stages."""

from news_curator.pipeline.deduplicator import Deduplicator
from news_curator.pipeline.detail_analyzer import DetailAnalyzer
from news_curator.pipeline.image_enricher import ImageEnricher
from news_curator.pipeline.prompt_builder import PromptBuilder
from news_curator.pipeline.quality_filter import QualityFilter
from news_curator.pipeline.title_filter import TitleFilter

__all__ = [
    "Deduplicator",
    "TitleFilter",
    "ImageEnricher",
    "QualityFilter",
    "PromptBuilder",
    "DetailAnalyzer",
]
