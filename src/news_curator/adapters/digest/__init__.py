"""Digest renderers."""

from news_curator.adapters.digest.markdown_generator import MarkdownDigestRenderer

__all__ = ["MarkdownDigestRenderer"]
