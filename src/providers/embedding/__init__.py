"""Embedding provider implementations.

Embeddings convert text into numeric vectors that capture semantic meaning.
Chunk vectors are stored in the knowledge store next to the chunk text and
compared against the query vector at chat time.

OpenAIEmbeddingProvider is the only implementation: text-embedding-3-small
(1536 dims) by default, through the OpenAI default key.
"""

from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["OpenAIEmbeddingProvider"]
