"""nyxchat FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from the environment (and ``.env``), configures
structured logging, and builds every component once in the lifespan.

Nothing here caches clients at module level: everything built from the
settings lives on ``app.state`` for the lifetime of the application.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.settings import Settings
from src.interfaces.knowledge_store import IKnowledgeStore
from src.providers.article.web_scraper_provider import WebScraperProvider
from src.providers.chat.anthropic_provider import AnthropicChatProvider
from src.providers.chat.google_provider import GoogleChatProvider
from src.providers.chat.openai_provider import OpenAIChatProvider
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from src.providers.knowledge.sqlite_knowledge_store import SQLiteKnowledgeStore
from src.services.chat_gateway import ChatGateway
from src.services.fallback_responder import FallbackResponder
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.ingestion_service import IngestionService
from src.services.model_routing import ProviderKind
from src.services.retriever import Retriever
from src.services.stream_registry import StreamRegistry
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_knowledge_store(app_settings: Settings) -> IKnowledgeStore | None:
    """Return the SQLite store, or ``None`` when no database path is set."""
    if not app_settings.knowledge_db_path:
        return None
    return SQLiteKnowledgeStore(db_path=app_settings.knowledge_db_path)


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(app_settings.upstream_timeout_seconds, connect=5.0)
    )

    # -- Chat providers --
    chat_providers = {
        ProviderKind.OPENAI: OpenAIChatProvider(settings=app_settings),
        ProviderKind.ANTHROPIC: AnthropicChatProvider(
            settings=app_settings, http_client=http_client
        ),
        ProviderKind.GOOGLE: GoogleChatProvider(settings=app_settings, http_client=http_client),
    }

    # -- Knowledge base --
    embedding_provider = OpenAIEmbeddingProvider(settings=app_settings)
    knowledge_store = _build_knowledge_store(app_settings)
    article_provider = WebScraperProvider(http_client=http_client)

    retriever = Retriever(
        embedding_provider=embedding_provider,
        store=knowledge_store,
        threshold=app_settings.rag_similarity_threshold,
        top_k=app_settings.rag_top_k,
    )
    ingestion_service = None
    if knowledge_store is not None:
        ingestion_service = IngestionService(
            chunker=TextChunker(
                max_tokens=app_settings.chunk_max_tokens,
                overlap_words=app_settings.chunk_overlap_words,
            ),
            embedding_provider=embedding_provider,
            store=knowledge_store,
            article_provider=article_provider,
        )

    # -- Gateway --
    chat_gateway = ChatGateway(
        settings=app_settings,
        providers=chat_providers,
        retriever=retriever,
        fallback=FallbackResponder(),
        registry=StreamRegistry(),
    )

    return {
        "settings": app_settings,
        "http_client": http_client,
        "chat_providers": chat_providers,
        "embedding_provider": embedding_provider,
        "knowledge_store": knowledge_store,
        "article_provider": article_provider,
        "ingestion_service": ingestion_service,
        "chat_gateway": chat_gateway,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    knowledge_store: IKnowledgeStore | None = components["knowledge_store"]
    if knowledge_store is not None:
        await knowledge_store.initialize()

    _logger.info(
        "app_startup",
        version="0.1.0",
        environment=settings.app_env,
        chat_providers=settings.get_configured_chat_providers(),
        knowledge_store=knowledge_store is not None,
        embeddings=components["embedding_provider"].is_available(),
    )

    yield

    # -- Shutdown: close shared httpx client --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="nyxchat API",
        version="0.1.0",
        description=(
            "Multi-tenant chat gateway for embeddable website widgets: routes "
            "each conversation to OpenAI, Anthropic or Google, grounds answers "
            "in the tenant's knowledge base, and streams the reply."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.cors_allowed_origins)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
