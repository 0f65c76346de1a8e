"""Chat gateway: turns one widget request into a stream or a demo reply.

Each request moves through five stages:

    NORMALIZE  -- fill missing config fields from the defaults
    RETRIEVE   -- with a tenant id, append the tenant's most relevant
                  knowledge chunks to the system prompt
    INVOKE     -- pick the provider from the model id and open its stream
    FALLBACK   -- no credential (checked before retrieval, so a demo reply
                  never costs an embedding call), or the provider refused
                  before streaming: answer with the rule-based demo reply
    EMIT       -- frame provider deltas as server-sent events

Once streaming has started nothing can fall back any more: a mid-stream
upstream failure ends the stream without the terminal sentinel.

With a ``session_id``, a newer request for the same session abandons the
older stream still in flight (see :mod:`src.services.stream_registry`).
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass

import structlog

from src.config.settings import Settings
from src.interfaces.chat_provider import IChatProvider
from src.models.chat import ChatConfig, ChatRequest, DemoReply, NormalizedChatConfig
from src.services.fallback_responder import FallbackResponder
from src.services.model_routing import ProviderKind, select_provider
from src.services.retriever import Retriever, build_knowledge_section
from src.services.stream_framing import frame_stream
from src.services.stream_registry import StreamRegistry
from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


@dataclass
class StreamReply:
    """A live reply: framed server-sent events from one provider."""

    events: AsyncIterator[str]
    provider: str
    model_id: str


class ChatGateway:
    """Routes chat requests to providers with retrieval and demo fallback.

    Parameters
    ----------
    settings:
        Supplies the defaults used during normalization.
    providers:
        One adapter per provider kind.
    retriever:
        Knowledge retrieval, or ``None`` to skip the retrieve stage.
    fallback:
        Rule-based responder for demo replies.
    registry:
        Tracks in-flight streams per session.
    """

    def __init__(
        self,
        settings: Settings,
        providers: Mapping[ProviderKind, IChatProvider],
        retriever: Retriever | None = None,
        fallback: FallbackResponder | None = None,
        registry: StreamRegistry | None = None,
    ) -> None:
        self._settings = settings
        self._providers = dict(providers)
        self._retriever = retriever
        self._fallback = fallback or FallbackResponder()
        self._registry = registry or StreamRegistry()

    def normalize(self, config: ChatConfig) -> NormalizedChatConfig:
        """Apply defaults to every field the widget left empty."""
        return NormalizedChatConfig(
            system_prompt=config.system_prompt or self._settings.default_system_prompt,
            business_name=config.business_name or self._settings.default_business_name,
            model_id=config.model_id or self._settings.default_model,
            api_key=config.api_key or None,
        )

    async def build_system_prompt(self, request: ChatRequest, base_prompt: str) -> str:
        """Return *base_prompt* with the tenant's knowledge section appended."""
        if not request.tenant_id or self._retriever is None:
            return base_prompt
        chunks = await self._retriever.retrieve(request.tenant_id, request.last_message)
        if not chunks:
            return base_prompt
        return base_prompt + build_knowledge_section(chunks)

    def demo_reply(self, request: ChatRequest, config: NormalizedChatConfig) -> DemoReply:
        return DemoReply(content=self._fallback.reply(request.last_message, config.business_name))

    async def handle(self, request: ChatRequest) -> StreamReply | DemoReply:
        """Run one request through the gateway stages."""
        config = self.normalize(request.config)

        if not request.turns:
            logger.info("chat_no_turns_demo_reply", tenant_id=request.tenant_id)
            return self.demo_reply(request, config)

        kind = select_provider(config.model_id)
        provider = self._providers[kind]

        if not provider.has_credentials(config.api_key):
            logger.info(
                "chat_no_credentials_demo_reply",
                provider=provider.get_provider_name(),
                model=config.model_id,
            )
            return self.demo_reply(request, config)

        system_prompt = await self.build_system_prompt(request, config.system_prompt)

        try:
            deltas = await provider.open_stream(
                request.turns,
                config.model_id,
                system_prompt,
                api_key=config.api_key,
            )
        except LLMError as exc:
            logger.warning(
                "chat_provider_failed_demo_reply",
                provider=provider.get_provider_name(),
                model=config.model_id,
                error=str(exc),
            )
            return self.demo_reply(request, config)

        if deltas is None:
            logger.info(
                "chat_no_credentials_demo_reply",
                provider=provider.get_provider_name(),
                model=config.model_id,
            )
            return self.demo_reply(request, config)

        return StreamReply(
            events=self._emit(deltas, request.session_id, provider.get_provider_name()),
            provider=provider.get_provider_name(),
            model_id=config.model_id,
        )

    async def _emit(
        self,
        deltas: AsyncIterator[str],
        session_id: str | None,
        provider_name: str,
    ) -> AsyncIterator[str]:
        abandoned = None
        if session_id:
            abandoned = self._registry.claim(session_id)
            logger.debug(
                "chat_stream_claimed", session_id=session_id, active_streams=len(self._registry)
            )
        try:
            async for event in frame_stream(deltas, abandoned=abandoned, provider=provider_name):
                yield event
        finally:
            if session_id and abandoned is not None:
                self._registry.release(session_id, abandoned)
