"""FastAPI API routes for the nyxchat gateway.

Provides the chat streaming endpoint, knowledge-base document management,
URL content extraction, and the health check.  Service dependencies are
resolved from ``app.state`` via FastAPI's ``Depends`` using the
``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                 Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/chat                POST    Chat turn → SSE stream or demo JSON reply
# /api/documents           POST    Ingest a document (text or URL)
# /api/documents?tenantId  GET     List a tenant's documents, newest first
# /api/documents?id        DELETE  Delete a document and its chunks
# /api/scrape              POST    Extract readable text from a URL
# /api/health              GET     Health check + provider status
#
# DEPENDENCY INJECTION PATTERN:
# Each route declares its dependencies as type-annotated params.  FastAPI
# resolves them via Depends() helpers that read from app.state (populated
# at startup in main.py's _build_all).
#
# ERROR SHAPE:
# Bodies are parsed inside the handlers so that malformed input gets the
# same {"error": ...} body as every other failure, never FastAPI's 422.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import ValidationError

from src.api.schemas import (
    DeleteResponse,
    DocumentCreateRequest,
    DocumentCreateResponse,
    DocumentListResponse,
    DocumentSummaryResponse,
    ErrorResponse,
    HealthResponse,
    ScrapeRequest,
    ScrapeResponse,
)
from src.interfaces.article_provider import IArticleProvider
from src.models.chat import ChatRequest, DemoReply
from src.services.chat_gateway import ChatGateway
from src.services.ingestion.ingestion_service import MISSING_FIELDS_MESSAGE, IngestionService
from src.services.stream_framing import STREAM_HEADERS
from src.utils.errors import (
    ContentExtractionError,
    IngestionError,
    InvalidRequestError,
    KnowledgeStoreError,
)
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api")

_VERSION = "0.1.0"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())


def _ok(model: Any) -> JSONResponse:
    return JSONResponse(content=model.model_dump(mode="json", by_alias=True))


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_chat_gateway(request: Request) -> ChatGateway:
    return request.app.state.chat_gateway


def _get_ingestion_service(request: Request) -> IngestionService | None:
    return getattr(request.app.state, "ingestion_service", None)


def _get_article_provider(request: Request) -> IArticleProvider:
    return request.app.state.article_provider


GatewayDep = Annotated[ChatGateway, Depends(_get_chat_gateway)]
IngestionDep = Annotated[IngestionService | None, Depends(_get_ingestion_service)]
ArticleDep = Annotated[IArticleProvider, Depends(_get_article_provider)]

_STORE_MISSING = "Knowledge store not configured"
_STORE_FAILED = "Knowledge store error"


def _store_error(exc: KnowledgeStoreError, operation: str) -> JSONResponse:
    # The SQLite detail stays in the log.
    _logger.error("knowledge_store_failed", operation=operation, error=str(exc))
    return _error(500, _STORE_FAILED)


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


@router.post("/chat", summary="Send a chat turn")
async def chat(request: Request, gateway: GatewayDep) -> Response:
    """Answer one conversation turn.

    Returns a ``text/event-stream`` of ``{"content": ...}`` events ending in
    ``[DONE]`` when a provider is reachable, otherwise a JSON demo reply.
    """
    try:
        body = await request.json()
        chat_request = ChatRequest.model_validate(body)
        reply = await gateway.handle(chat_request)
    except Exception as exc:
        _logger.error("chat_request_failed", error_type=type(exc).__name__, error=str(exc))
        return _error(500, "Internal server error")

    if isinstance(reply, DemoReply):
        return JSONResponse(content=reply.model_dump())

    _logger.info("chat_stream_started", provider=reply.provider, model=reply.model_id)
    return StreamingResponse(
        reply.events,
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post("/documents", summary="Ingest a document")
async def create_document(request: Request, ingestion: IngestionDep) -> Response:
    if ingestion is None:
        return _error(503, _STORE_MISSING)

    try:
        body = DocumentCreateRequest.model_validate(await request.json())
    except (ValidationError, ValueError):
        return _error(400, MISSING_FIELDS_MESSAGE)

    try:
        result = await ingestion.ingest(
            tenant_id=body.tenant_id,
            name=body.name,
            content=body.content,
            source_type=body.source_type,
            source_url=body.source_url,
        )
    except InvalidRequestError as exc:
        return _error(400, exc.message)
    except ContentExtractionError as exc:
        return _error(400, exc.message)
    except IngestionError as exc:
        return _error(502, exc.message)
    except KnowledgeStoreError as exc:
        return _store_error(exc, "create")

    return _ok(DocumentCreateResponse.from_result(result))


@router.get("/documents", summary="List a tenant's documents")
async def list_documents(
    ingestion: IngestionDep,
    tenant_id: Annotated[str | None, Query(alias="tenantId")] = None,
    chatbot_id: Annotated[str | None, Query(alias="chatbotId")] = None,
) -> Response:
    if ingestion is None:
        return _error(503, _STORE_MISSING)
    tenant = tenant_id or chatbot_id
    if not tenant:
        return _error(400, "tenantId required")

    try:
        summaries = await ingestion.list_documents(tenant)
    except KnowledgeStoreError as exc:
        return _store_error(exc, "list")

    return _ok(
        DocumentListResponse(
            documents=[DocumentSummaryResponse.from_summary(s) for s in summaries]
        )
    )


@router.delete("/documents", summary="Delete a document and its chunks")
async def delete_document(
    ingestion: IngestionDep,
    document_id: Annotated[str | None, Query(alias="id")] = None,
) -> Response:
    if ingestion is None:
        return _error(503, _STORE_MISSING)
    if not document_id:
        return _error(400, "Document id required")

    try:
        deleted = await ingestion.delete_document(document_id)
    except KnowledgeStoreError as exc:
        return _store_error(exc, "delete")
    if not deleted:
        return _error(404, "Document not found")
    return _ok(DeleteResponse(success=True))


# ---------------------------------------------------------------------------
# Scrape
# ---------------------------------------------------------------------------


@router.post("/scrape", summary="Extract readable text from a URL")
async def scrape(request: Request, article_provider: ArticleDep) -> Response:
    try:
        body = ScrapeRequest.model_validate(await request.json())
    except (ValidationError, ValueError):
        return _error(400, "URL is required")
    if not body.url:
        return _error(400, "URL is required")

    try:
        article = await article_provider.extract_content(body.url)
    except (InvalidRequestError, ContentExtractionError) as exc:
        return _error(400, exc.message)
    except Exception as exc:
        _logger.error("scrape_failed", url=body.url, error=str(exc))
        return _error(500, "Failed to scrape URL")

    return _ok(
        ScrapeResponse(
            title=article.title,
            content=article.content,
            excerpt=article.excerpt,
            length=article.length,
        )
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability.

    ``degraded`` means no chat provider has a default key, so chat answers
    in demo mode unless the widget sends its own key.
    """
    settings = request.app.state.settings
    chat_providers = settings.get_configured_chat_providers()
    embedding_provider = getattr(request.app.state, "embedding_provider", None)

    providers: dict[str, Any] = {
        "chat": chat_providers,
        "knowledge_store": getattr(request.app.state, "knowledge_store", None) is not None,
        "embeddings": bool(embedding_provider and embedding_provider.is_available()),
    }
    return HealthResponse(
        status="healthy" if chat_providers else "degraded",
        version=_VERSION,
        providers=providers,
    )
