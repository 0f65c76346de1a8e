"""Pydantic request/response schemas for the nyxchat API.

Defines the public contract for the document, scrape and health endpoints.
The chat endpoint takes :class:`src.models.chat.ChatRequest` directly.

# ─── HOW SCHEMAS WORK ─────────────────────────────────────────────────
#
# The widget and dashboard speak camelCase JSON, so response schemas use a
# camelCase alias generator and are always dumped with ``by_alias=True``.
# Request schemas accept both the camelCase names and the older widget
# names (``chatbotId`` for ``tenantId``).
#
# Every error body, whatever the endpoint, is ``{"error": "<text>"}``.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.knowledge import Document, DocumentSummary, IngestionResult, SourceType


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(BaseModel):
    """Uniform error body."""

    error: str


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class DocumentCreateRequest(BaseModel):
    """Body of ``POST /api/documents``.

    ``content`` may be omitted for a URL document, in which case the text is
    extracted from ``sourceUrl``.
    """

    model_config = ConfigDict(populate_by_name=True)

    tenant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("tenantId", "chatbotId", "tenant_id")
    )
    name: str | None = None
    content: str | None = None
    source_type: SourceType = Field(
        default=SourceType.TEXT, validation_alias=AliasChoices("sourceType", "source_type")
    )
    source_url: str | None = Field(
        default=None, validation_alias=AliasChoices("sourceUrl", "source_url")
    )


class DocumentResponse(_CamelModel):
    """A stored document."""

    id: str
    tenant_id: str
    name: str
    content: str
    source_type: SourceType
    source_url: str | None = None
    created_at: datetime

    @classmethod
    def from_document(cls, document: Document) -> DocumentResponse:
        return cls(**document.model_dump())


class DocumentSummaryResponse(_CamelModel):
    """A document listing entry."""

    id: str
    tenant_id: str
    name: str
    source_type: SourceType
    source_url: str | None = None
    created_at: datetime
    chunk_count: int

    @classmethod
    def from_summary(cls, summary: DocumentSummary) -> DocumentSummaryResponse:
        return cls(**summary.model_dump())


class DocumentCreateResponse(_CamelModel):
    """Result of ingesting one document."""

    document: DocumentResponse
    chunks_created: int
    embeddings_generated: int

    @classmethod
    def from_result(cls, result: IngestionResult) -> DocumentCreateResponse:
        return cls(
            document=DocumentResponse.from_document(result.document),
            chunks_created=result.chunks_created,
            embeddings_generated=result.embeddings_generated,
        )


class DocumentListResponse(_CamelModel):
    documents: list[DocumentSummaryResponse]


class DeleteResponse(_CamelModel):
    success: bool


# ---------------------------------------------------------------------------
# Scrape
# ---------------------------------------------------------------------------


class ScrapeRequest(BaseModel):
    url: str | None = None


class ScrapeResponse(_CamelModel):
    """Readable article extracted from a URL."""

    success: bool = True
    title: str
    content: str
    excerpt: str
    length: int


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]
