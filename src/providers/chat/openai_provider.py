"""OpenAI chat provider adapter.

Wraps the ``openai`` async client to implement :class:`IChatProvider`.
The system prompt travels as the first message of the conversation, and the
SDK's streamed ``ChatCompletionChunk`` objects are unwrapped into plain text
deltas as they arrive.

When ``openai_base_url`` is set, the client points at that OpenAI-compatible
endpoint instead.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any

import openai
import structlog

from src.config.settings import Settings
from src.interfaces.chat_provider import IChatProvider
from src.models.chat import ChatTurn
from src.services.model_routing import resolve_api_model
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


class OpenAIChatProvider(IChatProvider):
    """Chat provider backed by the OpenAI chat completions streaming API.

    The client for the process-wide key is built once here and reused by
    every request.  A request carrying its own key gets a short-lived client
    that is closed together with its stream.
    """

    def __init__(self, settings: Settings) -> None:
        self._default_key = settings.openai_api_key
        self._base_url = settings.openai_base_url
        self._max_tokens = settings.max_output_tokens
        self._timeout = openai.Timeout(settings.upstream_timeout_seconds, connect=5.0)
        self._default_client: openai.AsyncOpenAI | None = (
            self._build_client(self._default_key) if self._default_key else None
        )

    def _build_client(self, api_key: str) -> openai.AsyncOpenAI:
        client_kwargs: dict[str, Any] = {"api_key": api_key, "timeout": self._timeout}
        if self._base_url:
            client_kwargs["base_url"] = self._base_url
        return openai.AsyncOpenAI(**client_kwargs)

    def _client_for(self, api_key: str | None) -> openai.AsyncOpenAI | None:
        if api_key:
            return self._build_client(api_key)
        return self._default_client

    # ------------------------------------------------------------------
    # IChatProvider implementation
    # ------------------------------------------------------------------

    async def open_stream(
        self,
        turns: Sequence[ChatTurn],
        model_id: str,
        system_prompt: str,
        api_key: str | None = None,
    ) -> AsyncIterator[str] | None:
        client = self._client_for(api_key)
        if client is None:
            return None
        # A per-request client lives exactly as long as its stream.
        owned_client = client if client is not self._default_client else None

        api_model = resolve_api_model(model_id)
        messages = [{"role": "system", "content": system_prompt}]
        messages.extend({"role": t.role.value, "content": t.content} for t in turns)

        try:
            stream = await client.chat.completions.create(
                model=api_model,
                messages=messages,
                stream=True,
                max_tokens=self._max_tokens,
            )
        except openai.APIError as exc:
            if owned_client is not None:
                await owned_client.close()
            raise LLMError(
                message=f"OpenAI API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("openai_stream_opened", model=api_model, turns=len(turns))
        return self._iter_deltas(stream, owned_client)

    async def _iter_deltas(
        self, stream: Any, owned_client: openai.AsyncOpenAI | None = None
    ) -> AsyncIterator[str]:
        try:
            async for chunk in stream:
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                content = getattr(delta, "content", None)
                if content:
                    yield content
        finally:
            # Releases the upstream response when the consumer stops early.
            await stream.close()
            if owned_client is not None:
                await owned_client.close()

    def has_credentials(self, api_key: str | None = None) -> bool:
        return bool(api_key or self._default_key)

    def get_provider_name(self) -> str:
        return "openai"
