"""SQLite-backed tenant knowledge store.

Persists documents and their chunks to a local SQLite database (default
``data/knowledge.db``) using ``aiosqlite`` for async I/O.

# ─── SCHEMA ────────────────────────────────────────────────────────────
#
#   documents (id PK, tenant_id, name, content, source_type, source_url,
#              created_at)
#   chunks    (id PK, document_id FK → documents.id ON DELETE CASCADE,
#              tenant_id, content, chunk_index, embedding, created_at)
#
# SQLite only enforces foreign keys when ``PRAGMA foreign_keys=ON`` is set
# on the connection, so every connection opened here sets it first.
#
# Embeddings are stored as JSON arrays.  Similarity search loads the
# tenant's embedded chunks and scores them with numpy; a tenant knowledge
# base is small enough that a linear scan is fast.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path

import aiosqlite
import numpy as np
import structlog

from src.interfaces.knowledge_store import IKnowledgeStore
from src.models.knowledge import (
    Chunk,
    Document,
    DocumentSummary,
    RetrievedChunk,
    SourceType,
)
from src.utils.errors import KnowledgeStoreError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/knowledge.db")

_CREATE_TABLES_SQL = [
    """\
CREATE TABLE IF NOT EXISTS documents (
    id           TEXT PRIMARY KEY,
    tenant_id    TEXT NOT NULL,
    name         TEXT NOT NULL,
    content      TEXT NOT NULL,
    source_type  TEXT NOT NULL DEFAULT 'text',
    source_url   TEXT,
    created_at   TEXT NOT NULL
);
""",
    """\
CREATE TABLE IF NOT EXISTS chunks (
    id           TEXT PRIMARY KEY,
    document_id  TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    tenant_id    TEXT NOT NULL,
    content      TEXT NOT NULL,
    chunk_index  INTEGER NOT NULL,
    embedding    TEXT,
    created_at   TEXT NOT NULL,
    UNIQUE(document_id, chunk_index)
);
""",
]

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_tenant ON documents(tenant_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_chunks_document ON chunks(document_id);",
    "CREATE INDEX IF NOT EXISTS idx_chunks_tenant ON chunks(tenant_id);",
]

_INSERT_DOCUMENT_SQL = """\
INSERT INTO documents (id, tenant_id, name, content, source_type, source_url, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?);
"""

_INSERT_CHUNK_SQL = """\
INSERT INTO chunks (id, document_id, tenant_id, content, chunk_index, embedding, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?);
"""

_LIST_DOCUMENTS_SQL = """\
SELECT d.id, d.tenant_id, d.name, d.source_type, d.source_url, d.created_at,
       COUNT(c.id) AS chunk_count
FROM documents d
LEFT JOIN chunks c ON c.document_id = d.id
WHERE d.tenant_id = ?
GROUP BY d.id
ORDER BY d.created_at DESC;
"""


def _row_to_document(row: aiosqlite.Row) -> Document:
    return Document(
        id=row["id"],
        tenant_id=row["tenant_id"],
        name=row["name"],
        content=row["content"],
        source_type=SourceType(row["source_type"]),
        source_url=row["source_url"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def _row_to_chunk(row: aiosqlite.Row) -> Chunk:
    raw = row["embedding"]
    return Chunk(
        id=row["id"],
        document_id=row["document_id"],
        tenant_id=row["tenant_id"],
        content=row["content"],
        index=row["chunk_index"],
        embedding=json.loads(raw) if raw else None,
        created_at=datetime.fromisoformat(row["created_at"]),
    )


def cosine_similarity(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of every row of *matrix* against *query*.

    Rows (or a query) with zero norm score 0.0.
    """
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(norms > 0, dots / norms, 0.0)
    return scores


class SQLiteKnowledgeStore(IKnowledgeStore):
    """aiosqlite implementation of the knowledge store."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys=ON;")
            yield db

    async def initialize(self) -> None:
        """Create tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with self._connect() as db:
                await db.execute("PRAGMA journal_mode=WAL;")
                for table_sql in _CREATE_TABLES_SQL:
                    await db.execute(table_sql)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Failed to initialize knowledge store: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("knowledge_db_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def create_document(self, document: Document) -> Document:
        try:
            async with self._connect() as db:
                await db.execute(
                    _INSERT_DOCUMENT_SQL,
                    (
                        document.id,
                        document.tenant_id,
                        document.name,
                        document.content,
                        document.source_type.value,
                        document.source_url,
                        document.created_at.isoformat(),
                    ),
                )
                await db.commit()
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Failed to create document: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "document_created",
            document_id=document.id,
            tenant_id=document.tenant_id,
            source_type=document.source_type.value,
        )
        return document

    async def get_document(self, document_id: str) -> Document | None:
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    "SELECT * FROM documents WHERE id = ?", (document_id,)
                )
                row = await cursor.fetchone()
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Failed to read document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return _row_to_document(row) if row else None

    async def list_documents(self, tenant_id: str) -> list[DocumentSummary]:
        try:
            async with self._connect() as db:
                cursor = await db.execute(_LIST_DOCUMENTS_SQL, (tenant_id,))
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Failed to list documents for tenant {tenant_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [
            DocumentSummary(
                id=r["id"],
                tenant_id=r["tenant_id"],
                name=r["name"],
                source_type=SourceType(r["source_type"]),
                source_url=r["source_url"],
                created_at=datetime.fromisoformat(r["created_at"]),
                chunk_count=r["chunk_count"],
            )
            for r in rows
        ]

    async def delete_document(self, document_id: str) -> bool:
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    "DELETE FROM documents WHERE id = ?", (document_id,)
                )
                await db.commit()
                deleted = cursor.rowcount > 0
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Failed to delete document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("document_deleted", document_id=document_id, found=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Chunks
    # ------------------------------------------------------------------

    async def insert_chunks(self, chunks: Sequence[Chunk]) -> int:
        if not chunks:
            return 0
        rows = [
            (
                c.id,
                c.document_id,
                c.tenant_id,
                c.content,
                c.index,
                json.dumps(c.embedding) if c.embedding is not None else None,
                c.created_at.isoformat(),
            )
            for c in chunks
        ]
        try:
            async with self._connect() as db:
                # executemany runs inside one implicit transaction; nothing
                # is visible until the commit.
                await db.executemany(_INSERT_CHUNK_SQL, rows)
                await db.commit()
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Failed to insert {len(rows)} chunks: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.debug("chunks_inserted", document_id=chunks[0].document_id, count=len(rows))
        return len(rows)

    async def list_chunks(self, document_id: str) -> list[Chunk]:
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    "SELECT * FROM chunks WHERE document_id = ? ORDER BY chunk_index ASC",
                    (document_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Failed to read chunks of document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [_row_to_chunk(r) for r in rows]

    async def similarity_search(
        self,
        tenant_id: str,
        query_embedding: Sequence[float],
        threshold: float,
        limit: int,
    ) -> list[RetrievedChunk]:
        if limit <= 0 or not query_embedding:
            return []

        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    "SELECT document_id, chunk_index, content, embedding FROM chunks "
                    "WHERE tenant_id = ? AND embedding IS NOT NULL",
                    (tenant_id,),
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as exc:
            raise KnowledgeStoreError(
                message=f"Similarity search failed for tenant {tenant_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        query = np.asarray(query_embedding, dtype=np.float64)
        candidates: list[aiosqlite.Row] = []
        vectors: list[list[float]] = []
        for row in rows:
            vector = json.loads(row["embedding"])
            # Vectors from a different embedding model can't be compared.
            if len(vector) != query.shape[0]:
                continue
            candidates.append(row)
            vectors.append(vector)

        if not vectors:
            return []

        scores = cosine_similarity(np.asarray(vectors, dtype=np.float64), query)
        order = np.argsort(-scores, kind="stable")

        results: list[RetrievedChunk] = []
        for i in order:
            score = float(scores[i])
            if score < threshold:
                break
            row = candidates[i]
            results.append(
                RetrievedChunk(
                    content=row["content"],
                    document_id=row["document_id"],
                    index=row["chunk_index"],
                    similarity=score,
                )
            )
            if len(results) >= limit:
                break
        return results

    def get_provider_name(self) -> str:
        return "sqlite_knowledge"
