"""Source adapters for fetching candidates."""

from news_curator.adapters.sources.rss_source import RSSFeedSource

__all__ = ["RSSFeedSource"]
