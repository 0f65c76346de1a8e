"""Article extraction providers.

WebScraperProvider fetches a page with httpx and extracts the readable
article with trafilatura.
"""

from src.providers.article.web_scraper_provider import WebScraperProvider

__all__ = ["WebScraperProvider"]
