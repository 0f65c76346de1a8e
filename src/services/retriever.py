"""Knowledge-base retrieval for chat requests.

Embeds the user's latest message and asks the knowledge store for the
tenant's most similar chunks.  Retrieval only ever improves an answer, so
every failure here (no embedding service, no store, an embedding or query
error) yields an empty list and the chat carries on without context.
"""

from __future__ import annotations

import structlog

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.knowledge_store import IKnowledgeStore

logger = structlog.get_logger(logger_name=__name__)

KNOWLEDGE_HEADER = "## Relevant Knowledge Base Information:"
KNOWLEDGE_SEPARATOR = "\n\n---\n\n"
KNOWLEDGE_FOOTER = "Use this information to help answer the user's question when relevant."


def build_knowledge_section(chunks: list[str]) -> str:
    """Format retrieved chunk texts for appending to the system prompt."""
    return f"\n\n{KNOWLEDGE_HEADER}\n{KNOWLEDGE_SEPARATOR.join(chunks)}\n\n{KNOWLEDGE_FOOTER}"


class Retriever:
    """Finds tenant chunks relevant to a query.

    Parameters
    ----------
    embedding_provider:
        Must be the same provider ingestion used, so vectors are comparable.
    store:
        The knowledge store, or ``None`` when none is configured.
    threshold:
        Minimum cosine similarity for a chunk to be returned.
    top_k:
        Maximum number of chunks returned.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        store: IKnowledgeStore | None,
        threshold: float = 0.5,
        top_k: int = 5,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._store = store
        self._threshold = threshold
        self._top_k = top_k

    def is_available(self) -> bool:
        return self._store is not None and self._embedding_provider.is_available()

    async def retrieve(self, tenant_id: str, query: str, limit: int | None = None) -> list[str]:
        """Return up to *limit* chunk texts, most similar first."""
        if not self.is_available() or not query.strip():
            return []

        try:
            vector = await self._embedding_provider.embed(query)
            if vector is None:
                return []
            results = await self._store.similarity_search(
                tenant_id,
                vector,
                threshold=self._threshold,
                limit=limit or self._top_k,
            )
        except Exception as exc:
            logger.warning("retrieval_failed", tenant_id=tenant_id, error=str(exc))
            return []

        logger.info(
            "retrieval_complete",
            tenant_id=tenant_id,
            chunks=len(results),
            top_similarity=round(results[0].similarity, 4) if results else None,
        )
        return [r.content for r in results]
