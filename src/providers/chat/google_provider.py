"""Google Gemini chat provider adapter.

Calls ``streamGenerateContent`` over raw HTTP (httpx).  Gemini has its own
conversation shape:

    - Roles are ``user`` and ``model``; assistant turns are relabelled
    - Each turn's text goes in ``parts: [{"text": ...}]``
    - The system prompt is a separate ``systemInstruction``
    - The API key is a query parameter, so the URL must never be logged

The body is a series of JSON objects, one per line.  Reads are fed through
:class:`~src.providers.chat.json_lines.JSONLineParser`, which holds partial
lines until they complete.  Text is taken from the first part of the first
candidate of each object.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from typing import Any

import httpx
import structlog

from src.config.settings import Settings
from src.interfaces.chat_provider import IChatProvider
from src.models.chat import ChatRole, ChatTurn
from src.providers.chat.json_lines import JSONLineParser
from src.services.model_routing import resolve_api_model
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


def to_gemini_contents(turns: Sequence[ChatTurn]) -> list[dict[str, Any]]:
    """Convert chat turns to Gemini ``contents`` entries."""
    return [
        {
            "role": "model" if t.role == ChatRole.ASSISTANT else "user",
            "parts": [{"text": t.content}],
        }
        for t in turns
    ]


def extract_text(obj: dict[str, Any]) -> str | None:
    """Return ``candidates[0].content.parts[0].text`` if present."""
    try:
        text = obj["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text if isinstance(text, str) and text else None


class GoogleChatProvider(IChatProvider):
    """Chat provider backed by the Gemini ``streamGenerateContent`` API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._default_key = settings.google_ai_api_key
        self._base_url = settings.google_base_url.rstrip("/")
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
            "contents": to_gemini_contents(turns),
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "generationConfig": {"maxOutputTokens": self._max_tokens},
        }
        request = self._client.build_request(
            "POST",
            f"{self._base_url}/v1beta/models/{api_model}:streamGenerateContent",
            params={"alt": "sse", "key": key},
            json=payload,
        )

        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            # httpx puts the request URL (with the key) in some messages.
            raise LLMError(
                message=f"Google request failed: {type(exc).__name__}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code >= 400:
            await response.aread()
            await response.aclose()
            raise LLMError(
                message=f"Google HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
            )

        logger.info("google_stream_opened", model=api_model, turns=len(turns))
        return self._iter_deltas(response)

    async def _iter_deltas(self, response: httpx.Response) -> AsyncIterator[str]:
        parser = JSONLineParser()
        try:
            async for text in response.aiter_text():
                for obj in parser.feed(text):
                    delta = extract_text(obj)
                    if delta:
                        yield delta
            for obj in parser.flush():
                delta = extract_text(obj)
                if delta:
                    yield delta
        finally:
            await response.aclose()
            if parser.skipped:
                logger.debug("google_lines_skipped", count=parser.skipped)

    def has_credentials(self, api_key: str | None = None) -> bool:
        return bool(api_key or self._default_key)

    def get_provider_name(self) -> str:
        return "google"
