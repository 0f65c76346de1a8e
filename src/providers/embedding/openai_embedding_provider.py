"""OpenAI-compatible embedding provider adapter.

Wraps the ``openai`` async client to implement :class:`IEmbeddingProvider`.
Works with OpenAI itself and with any OpenAI-compatible endpoint set through
``openai_base_url``.

One text goes in per call.  Ingestion embeds chunks one after another, and
retrieval embeds the user's last message.  An upstream failure is logged and
turns into ``None``, so the caller decides whether a missing vector matters.
"""

from __future__ import annotations

from typing import Any

import openai
import structlog

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider

logger = structlog.get_logger(logger_name=__name__)

# Known embedding model dimensions.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

_DEFAULT_MODEL = "text-embedding-3-small"


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by an OpenAI-compatible embeddings API.

    Uses ``text-embedding-3-small`` (1536 dims) by default.  Without an
    ``openai_api_key`` no client is built and :meth:`embed` always returns
    ``None``.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.openai_embedding_model or _DEFAULT_MODEL
        self._dimension = _MODEL_DIMENSIONS.get(self._model, 1536)
        self._provider_label = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )

        self._client: openai.AsyncOpenAI | None = None
        if self._api_key:
            client_kwargs: dict[str, Any] = {
                "api_key": self._api_key,
                "timeout": settings.upstream_timeout_seconds,
            }
            if settings.openai_base_url:
                client_kwargs["base_url"] = settings.openai_base_url
            self._client = openai.AsyncOpenAI(**client_kwargs)

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float] | None:
        """Generate the embedding vector for *text*.

        Parameters
        ----------
        text:
            The text to embed.  Empty or whitespace-only input is not sent.

        Returns
        -------
        list[float] | None
            The vector, or ``None`` when unconfigured or on any API error.
        """
        if self._client is None or not text.strip():
            return None

        try:
            response = await self._client.embeddings.create(model=self._model, input=text)
        except openai.APIError as exc:
            logger.warning(
                "embedding_request_failed",
                provider=self._provider_label,
                model=self._model,
                error=str(exc),
            )
            return None

        if not response.data:
            logger.warning("embedding_response_empty", model=self._model)
            return None
        return list(response.data[0].embedding)

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._provider_label

    def is_available(self) -> bool:
        return self._client is not None
