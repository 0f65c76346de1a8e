"""Abstract base class for the tenant knowledge store.

The store owns two tables, documents and chunks, plus one query: nearest
neighbour chunk search under a tenant.  Chunks reference their document with
a cascading delete so they can never outlive it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from src.models.knowledge import Chunk, Document, DocumentSummary, RetrievedChunk


# Concrete implementation: SQLiteKnowledgeStore (src/providers/knowledge/)
class IKnowledgeStore(ABC):
    """Contract for persisting documents/chunks and answering similarity queries.

    All methods are async.  Read and write failures raise
    :class:`~src.utils.errors.KnowledgeStoreError`.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables and indices if they don't exist.  Idempotent."""

    @abstractmethod
    async def create_document(self, document: Document) -> Document:
        """Insert *document* and return it as stored."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Document | None:
        """Return the document with *document_id*, or ``None``."""

    @abstractmethod
    async def list_documents(self, tenant_id: str) -> list[DocumentSummary]:
        """Return the tenant's documents, most recently created first."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> bool:
        """Delete a document and, by cascade, all of its chunks.

        Returns ``True`` if a document row was removed.
        """

    @abstractmethod
    async def insert_chunks(self, chunks: Sequence[Chunk]) -> int:
        """Insert all *chunks* in one transaction; all or none are written.

        Returns the number of rows written.
        """

    @abstractmethod
    async def list_chunks(self, document_id: str) -> list[Chunk]:
        """Return a document's chunks in ascending index order."""

    @abstractmethod
    async def similarity_search(
        self,
        tenant_id: str,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
    ) -> list[RetrievedChunk]:
        """Return up to *limit* tenant chunks with cosine similarity >= *threshold*.

        Results are ordered by similarity, highest first.  Chunks stored
        without an embedding are never returned.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"sqlite_knowledge"``."""
