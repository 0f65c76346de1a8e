"""Knowledge-base data models: documents, chunks, retrieval and ingestion results.

Each tenant owns a set of Documents.  Ingestion splits a document into
Chunks, embeds each one, and stores them; at chat time the Retriever finds
the chunks most similar to the user's last message and their text is added
to the system prompt.

Invariants held by the store and ingestion service:

* Chunk indices for one document run 0, 1, 2, ... with no gaps.
* Deleting a document deletes its chunks (``ON DELETE CASCADE``).
* A chunk's embedding is ``None`` only when no embedding service was
  configured at ingestion time, never because one call failed.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)  # noqa: UP017


class SourceType(str, Enum):
    """Where a document's text came from."""

    TEXT = "text"
    PDF = "pdf"
    URL = "url"


class Document(BaseModel):
    """A tenant-owned source document."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier (UUID) for this document.")
    tenant_id: str = Field(description="Tenant (chatbot) that owns the document.")
    name: str
    content: str = Field(description="Full document text.")
    source_type: SourceType = SourceType.TEXT
    source_url: str | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class DocumentSummary(BaseModel):
    """Document listing entry with the chunk count instead of full content."""

    model_config = ConfigDict(frozen=True)

    id: str
    tenant_id: str
    name: str
    source_type: SourceType
    source_url: str | None = None
    created_at: datetime
    chunk_count: int = Field(default=0, ge=0)


class Chunk(BaseModel):
    """A passage of a document, optionally carrying its embedding vector."""

    model_config = ConfigDict(frozen=True)

    id: str
    document_id: str
    tenant_id: str
    content: str
    index: int = Field(ge=0, description="Zero-based position within the document.")
    embedding: list[float] | None = None
    created_at: datetime = Field(default_factory=_utcnow)


class RetrievedChunk(BaseModel):
    """A chunk returned from a similarity search with its cosine score."""

    model_config = ConfigDict(frozen=True)

    content: str
    document_id: str
    index: int
    similarity: float


class IngestionResult(BaseModel):
    """Outcome of ingesting one document."""

    model_config = ConfigDict(frozen=True)

    document: Document
    chunks_created: int = Field(ge=0)
    embeddings_generated: int = Field(ge=0)
