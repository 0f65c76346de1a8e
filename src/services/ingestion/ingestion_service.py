"""Orchestrator for the document ingestion pipeline.

Pipeline stages: **extract -> store document -> chunk -> embed -> store chunks**.

The :class:`IngestionService` coordinates four collaborators (article
extractor, chunker, embedding provider, knowledge store) without any of them
knowing about each other:

    1. IArticleProvider  -- only for URL documents posted without text
    2. IKnowledgeStore   -- the document row is written first
    3. TextChunker       -- ~500-token overlapping word windows
    4. IEmbeddingProvider -- one vector per chunk, in chunk order
    5. IKnowledgeStore   -- all chunks in one transaction

Once the document row exists, any later failure (cancellation included)
deletes it again (the chunks follow by cascade), so a tenant never sees a
document with missing or partially embedded chunks.  That compensating
delete is not atomic with the document insert: a reader listing documents
in between can briefly see the document before it disappears.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import TYPE_CHECKING

import structlog

from src.models.knowledge import Chunk, Document, DocumentSummary, IngestionResult, SourceType
from src.services.ingestion.chunker import TextChunker
from src.utils.errors import IngestionError, InvalidRequestError, KnowledgeStoreError

if TYPE_CHECKING:
    from src.interfaces.article_provider import IArticleProvider
    from src.interfaces.embedding_provider import IEmbeddingProvider
    from src.interfaces.knowledge_store import IKnowledgeStore

logger = structlog.get_logger(logger_name=__name__)

MISSING_FIELDS_MESSAGE = "tenantId, name, and content required"


class IngestionService:
    """Turns raw documents into stored, embedded chunks.

    Parameters
    ----------
    chunker:
        Splits document text into overlapping token-sized windows.
    embedding_provider:
        Generates embedding vectors for chunk text.  When it is not
        available, chunks are stored without vectors.
    store:
        Persists documents and chunks.
    article_provider:
        Optional content extractor used for URL documents without text.
    """

    def __init__(
        self,
        chunker: TextChunker,
        embedding_provider: IEmbeddingProvider,
        store: IKnowledgeStore,
        article_provider: IArticleProvider | None = None,
    ) -> None:
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._store = store
        self._article_provider = article_provider

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ingest(
        self,
        tenant_id: str | None,
        name: str | None,
        content: str | None = None,
        source_type: SourceType = SourceType.TEXT,
        source_url: str | None = None,
    ) -> IngestionResult:
        """Store a document and its chunks for *tenant_id*.

        Raises
        ------
        InvalidRequestError
            If ``tenant_id``, ``name`` or the content is missing.
        ContentExtractionError
            If a URL document's text could not be extracted.
        IngestionError
            If the embedding service is available but a chunk could not be
            embedded.  The document has been deleted again.
        KnowledgeStoreError
            If the document or its chunks could not be written.  A document
            that was already written has been deleted again.
        """
        if not content and source_type == SourceType.URL and source_url and tenant_id and name:
            content = await self._extract(source_url)

        if not tenant_id or not name or not content:
            raise InvalidRequestError(message=MISSING_FIELDS_MESSAGE)

        start = time.monotonic()
        document = await self._store.create_document(
            Document(
                id=str(uuid.uuid4()),
                tenant_id=tenant_id,
                name=name,
                content=content,
                source_type=source_type,
                source_url=source_url,
            )
        )

        try:
            chunks, embedded = await self._build_chunks(document)
            await self._store.insert_chunks(chunks)
        except BaseException as exc:
            # Cancellation included: the delete must finish even when the
            # request task is cancelled mid-embedding.
            logger.warning(
                "ingestion_failed_rolling_back",
                document_id=document.id,
                tenant_id=tenant_id,
                error_type=type(exc).__name__,
                error=str(exc),
            )
            await asyncio.shield(self._compensate(document.id))
            raise

        logger.info(
            "document_ingested",
            document_id=document.id,
            tenant_id=tenant_id,
            chunks=len(chunks),
            embeddings=embedded,
            elapsed_s=round(time.monotonic() - start, 3),
        )
        return IngestionResult(
            document=document,
            chunks_created=len(chunks),
            embeddings_generated=embedded,
        )

    async def list_documents(self, tenant_id: str) -> list[DocumentSummary]:
        return await self._store.list_documents(tenant_id)

    async def delete_document(self, document_id: str) -> bool:
        return await self._store.delete_document(document_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _extract(self, url: str) -> str:
        if self._article_provider is None:
            raise InvalidRequestError(message=MISSING_FIELDS_MESSAGE)
        article = await self._article_provider.extract_content(url)
        logger.info("url_content_extracted", url=url, length=article.length)
        return article.content

    async def _build_chunks(self, document: Document) -> tuple[list[Chunk], int]:
        """Chunk and embed *document*, returning the chunks and the vector count."""
        texts = self._chunker.chunk(document.content)
        embed = self._embedding_provider.is_available()

        chunks: list[Chunk] = []
        embedded = 0
        # One embedding request in flight per document.
        for index, text in enumerate(texts):
            vector = None
            if embed:
                vector = await self._embedding_provider.embed(text)
                if vector is None:
                    raise IngestionError(
                        message=f"Embedding failed for chunk {index} of {len(texts)}",
                        provider_name=self._embedding_provider.get_provider_name(),
                    )
                embedded += 1
            chunks.append(
                Chunk(
                    id=str(uuid.uuid4()),
                    document_id=document.id,
                    tenant_id=document.tenant_id,
                    content=text,
                    index=index,
                    embedding=vector,
                )
            )
        return chunks, embedded

    async def _compensate(self, document_id: str) -> None:
        try:
            await self._store.delete_document(document_id)
        except KnowledgeStoreError as exc:
            logger.error("compensating_delete_failed", document_id=document_id, error=str(exc))
