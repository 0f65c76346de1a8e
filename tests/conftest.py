"""Shared pytest fixtures for the nyxchat test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.config.settings import Settings
from src.interfaces.article_provider import ArticleContent, IArticleProvider
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.providers.knowledge.sqlite_knowledge_store import SQLiteKnowledgeStore

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def make_settings(**overrides) -> Settings:
    """Settings with every credential empty unless overridden."""
    defaults = {
        "openai_api_key": "",
        "openai_base_url": "",
        "anthropic_api_key": "",
        "anthropic_base_url": "https://api.anthropic.test",
        "google_ai_api_key": "",
        "google_base_url": "https://generativelanguage.test",
        "knowledge_db_path": "",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def settings_factory():  # noqa: ANN201
    """Return :func:`make_settings` for tests that need custom settings."""
    return make_settings


# ---------------------------------------------------------------------------
# Embeddings
# ---------------------------------------------------------------------------

_VOCABULARY = ("refund", "shipping", "hours", "pizza", "warranty")


class KeywordEmbeddingProvider(IEmbeddingProvider):
    """Deterministic embedder: one dimension per vocabulary word.

    Texts sharing keywords get high cosine similarity; texts with no
    vocabulary words get the zero vector.
    """

    def __init__(self, available: bool = True, fail_on: str | None = None) -> None:
        self._available = available
        self._fail_on = fail_on
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float] | None:
        self.calls.append(text)
        if not self._available:
            return None
        if self._fail_on is not None and self._fail_on in text:
            return None
        lowered = text.lower()
        return [float(lowered.count(word)) for word in _VOCABULARY]

    def get_dimension(self) -> int:
        return len(_VOCABULARY)

    def get_provider_name(self) -> str:
        return "keyword_test"

    def is_available(self) -> bool:
        return self._available


@pytest.fixture
def keyword_embedder() -> KeywordEmbeddingProvider:
    return KeywordEmbeddingProvider()


@pytest.fixture
def embedder_factory():  # noqa: ANN201
    """Return the KeywordEmbeddingProvider class for custom configurations."""
    return KeywordEmbeddingProvider


# ---------------------------------------------------------------------------
# Knowledge store
# ---------------------------------------------------------------------------


@pytest.fixture
async def knowledge_store(tmp_path: Path) -> SQLiteKnowledgeStore:
    """An initialized SQLite store on a temporary file."""
    store = SQLiteKnowledgeStore(db_path=tmp_path / "knowledge.db")
    await store.initialize()
    return store


# ---------------------------------------------------------------------------
# Article extraction
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_article_provider() -> IArticleProvider:
    """Mock IArticleProvider returning a short fixed article."""
    mock = MagicMock(spec=IArticleProvider)
    mock.get_provider_name.return_value = "mock-scraper"
    mock.extract_content = AsyncMock(
        return_value=ArticleContent(
            title="About Acme",
            content="Acme ships pizza ovens worldwide. Our refund window is 30 days.",
            excerpt="Acme ships pizza ovens worldwide.",
            url="https://acme.example/about",
        )
    )
    return mock
