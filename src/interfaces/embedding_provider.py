"""Abstract base class for text-embedding service providers.

Ingestion and retrieval both go through one designated embedding provider so
that stored chunk vectors and query vectors live in the same space.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: OpenAIEmbeddingProvider (src/providers/embedding/)
class IEmbeddingProvider(ABC):
    """Contract for turning text into a fixed-length vector."""

    @abstractmethod
    async def embed(self, text: str) -> list[float] | None:
        """Return the embedding vector for *text*.

        Returns ``None`` when the provider is not configured or the upstream
        call fails.  Failures are logged, never raised, so a broken
        embedding service degrades retrieval instead of aborting a chat.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors (e.g. ``1536``)."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"openai_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if credentials are configured (no network call)."""
