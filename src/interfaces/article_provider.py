"""Abstract base class for article-extraction service providers.

Turns a web page URL into clean article text that can be ingested into a
tenant's knowledge base.  The gateway treats this as a black box: URL in,
title and text out.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ArticleContent:
    """Extracted content from a web article.

    Attributes
    ----------
    title:
        The article headline, or the URL host when the page has none.
    content:
        Body text with whitespace collapsed to single spaces.
    excerpt:
        A short summary, or the first 200 characters of *content*.
    url:
        The source URL the content was extracted from.
    """

    title: str
    content: str
    excerpt: str
    url: str = ""

    @property
    def length(self) -> int:
        return len(self.content)


class IArticleProvider(ABC):
    """Contract for services that extract readable content from web URLs."""

    @abstractmethod
    async def extract_content(self, url: str) -> ArticleContent:
        """Fetch and extract readable content from *url*.

        Raises
        ------
        src.utils.errors.InvalidRequestError
            If *url* is not an absolute http(s) URL.
        src.utils.errors.ContentExtractionError
            If the fetch fails, the response is not HTML, or no article text
            could be extracted.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"web_scraper"``."""
