"""Web scraper article provider using httpx and trafilatura.

Extracts clean article text from web pages by fetching HTML via httpx
and parsing with trafilatura's content extraction engine.  The result feeds
URL ingestion and the ``/api/scrape`` preview endpoint.
"""

from __future__ import annotations

import json
import re
from urllib.parse import urlparse

import httpx
import structlog
import trafilatura

from src.interfaces.article_provider import ArticleContent, IArticleProvider
from src.utils.errors import ContentExtractionError, InvalidRequestError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 10.0
_DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (compatible; NyxBot/1.0; +https://nyx.chat)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
_HTML_CONTENT_TYPES = ("text/html", "application/xhtml")
_EXCERPT_LENGTH = 200
_WHITESPACE_RE = re.compile(r"\s+")


def validate_url(url: str) -> str:
    """Return the host of *url*, or raise if it is not absolute http(s)."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidRequestError(message="Invalid URL", provider_name="web_scraper")
    return parsed.hostname or parsed.netloc


class WebScraperProvider(IArticleProvider):
    """Article extraction backed by httpx + trafilatura.

    Fetches raw HTML from a URL and uses trafilatura to extract the
    main article content, stripping navigation, ads, and boilerplate.
    """

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(_DEFAULT_TIMEOUT),
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # IArticleProvider implementation
    # ------------------------------------------------------------------

    async def extract_content(self, url: str) -> ArticleContent:
        """Fetch *url* and extract readable article text via trafilatura."""
        host = validate_url(url)

        try:
            response = await self._client.get(
                url, headers=_DEFAULT_HEADERS, follow_redirects=True
            )
        except httpx.TimeoutException as exc:
            raise ContentExtractionError(
                message=f"Timeout fetching {url}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise ContentExtractionError(
                message=f"Failed to fetch URL: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.is_success:
            raise ContentExtractionError(
                message=f"Failed to fetch URL: {response.status_code} {response.reason_phrase}",
                provider_name=self.get_provider_name(),
            )

        content_type = response.headers.get("content-type", "")
        if not any(t in content_type for t in _HTML_CONTENT_TYPES):
            raise ContentExtractionError(
                message="URL must point to an HTML page",
                provider_name=self.get_provider_name(),
            )

        extracted = trafilatura.extract(
            response.text,
            url=url,
            include_comments=False,
            include_tables=True,
            output_format="json",
            with_metadata=True,
        )
        if not extracted:
            logger.warning("trafilatura_extraction_empty", url=url)
            raise ContentExtractionError(
                message="Could not extract readable content from URL",
                provider_name=self.get_provider_name(),
            )

        article = json.loads(extracted)
        content = _WHITESPACE_RE.sub(" ", article.get("text") or "").strip()
        if not content:
            raise ContentExtractionError(
                message="Could not extract readable content from URL",
                provider_name=self.get_provider_name(),
            )

        title = (article.get("title") or "").strip() or host
        excerpt = (article.get("excerpt") or "").strip() or (
            content[:_EXCERPT_LENGTH] + "..."
        )

        logger.info("article_extracted", url=url, title=title, text_length=len(content))
        return ArticleContent(title=title, content=content, excerpt=excerpt, url=url)

    def get_provider_name(self) -> str:
        return "web_scraper"
