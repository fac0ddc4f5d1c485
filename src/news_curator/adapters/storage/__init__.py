"""Storage adapters."""

from news_curator.adapters.storage.yaml_store import YamlArticleStore

__all__ = ["YamlArticleStore"]
