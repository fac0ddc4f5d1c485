"""Web page fetching adapters."""

from news_curator.adapters.web.page_fetcher import HttpPageFetcher

__all__ = ["HttpPageFetcher"]
