"""Anthropic chat provider adapter.

Talks to the Claude Messages API over a raw streamed HTTP call (httpx), not
the SDK.  Key differences from the OpenAI adapter:

    - System prompt is the top-level ``system`` field, not a message
    - Credentials go in ``x-api-key`` with a pinned ``anthropic-version``
    - The response is a server-sent event stream; text arrives in
      ``content_block_delta`` events whose ``delta.type`` is ``text_delta``
    - An ``error`` event can arrive after text has already streamed
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Sequence

import httpx
import structlog

from src.config.settings import Settings
from src.interfaces.chat_provider import IChatProvider
from src.models.chat import ChatTurn
from src.providers.chat.sse import iter_sse_events
from src.services.model_routing import resolve_api_model
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)

_ANTHROPIC_VERSION = "2023-06-01"


class AnthropicChatProvider(IChatProvider):
    """Chat provider backed by the Anthropic Messages streaming API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._default_key = settings.anthropic_api_key
        self._url = f"{settings.anthropic_base_url.rstrip('/')}/v1/messages"
        self._max_tokens = settings.max_output_tokens
        self._client = http_client

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
        key = api_key or self._default_key
        if not key:
            return None

        api_model = resolve_api_model(model_id)
        payload = {
            "model": api_model,
            "max_tokens": self._max_tokens,
            "system": system_prompt,
            "messages": [{"role": t.role.value, "content": t.content} for t in turns],
            "stream": True,
        }
        request = self._client.build_request(
            "POST",
            self._url,
            json=payload,
            headers={
                "x-api-key": key,
                "anthropic-version": _ANTHROPIC_VERSION,
                "content-type": "application/json",
            },
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise LLMError(
                message=f"Anthropic request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400:
            body = await response.aread()
            await response.aclose()
            raise LLMError(
                message=f"Anthropic HTTP {response.status_code}: {body[:200]!r}",
                provider_name=self.get_provider_name(),
            )

        logger.info("anthropic_stream_opened", model=api_model, turns=len(turns))
        return self._iter_deltas(response)

    async def _iter_deltas(self, response: httpx.Response) -> AsyncIterator[str]:
        try:
            async for event in iter_sse_events(response.aiter_lines()):
                if event.event == "message_stop":
                    break
                if event.event == "error":
                    raise LLMError(
                        message=f"Anthropic stream error: {event.data[:200]}",
                        provider_name=self.get_provider_name(),
                    )
                if event.event != "content_block_delta":
                    continue
                try:
                    data = json.loads(event.data)
                except json.JSONDecodeError:
                    logger.debug("anthropic_event_unparsable", length=len(event.data))
                    continue
                delta = data.get("delta") or {}
                if delta.get("type") == "text_delta" and delta.get("text"):
                    yield delta["text"]
        finally:
            await response.aclose()

    def has_credentials(self, api_key: str | None = None) -> bool:
        return bool(api_key or self._default_key)

    def get_provider_name(self) -> str:
        return "anthropic"
