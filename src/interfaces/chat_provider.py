"""Abstract base class for streaming chat providers.

Each concrete adapter owns exactly one upstream wire protocol:

    OpenAIChatProvider     -- openai SDK, native streamed chunk objects
    AnthropicChatProvider  -- raw HTTP, server-sent events
    GoogleChatProvider     -- raw HTTP, newline-delimited JSON objects

They share nothing but this contract.  The gateway picks one with
:func:`src.services.model_routing.select_provider` and never looks at the
wire format itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Sequence

from src.models.chat import ChatTurn


# Concrete implementations: src/providers/chat/
class IChatProvider(ABC):
    """Contract for sending a conversation upstream and streaming text back."""

    @abstractmethod
    async def open_stream(
        self,
        turns: Sequence[ChatTurn],
        model_id: str,
        system_prompt: str,
        api_key: str | None = None,
    ) -> AsyncIterator[str] | None:
        """Start a streamed completion and return its text deltas.

        The upstream request is issued before this coroutine returns, so a
        refused request surfaces here rather than mid-stream.

        Parameters
        ----------
        turns:
            The conversation so far, oldest first.
        model_id:
            The widget-level model identifier (e.g. ``"claude-sonnet-4"``);
            adapters map it to the vendor's API model name.
        system_prompt:
            The fully assembled system prompt (retrieved passages included).
        api_key:
            Per-request credential.  Overrides the process-wide default.

        Returns
        -------
        AsyncIterator[str] or None
            A single-pass iterator of non-empty text deltas, or ``None`` when
            no credential is available (neither *api_key* nor a default).

        Raises
        ------
        src.utils.errors.LLMError
            If the upstream refuses the request before streaming starts.
            Errors after the first delta propagate out of the iterator.
        """

    @abstractmethod
    def has_credentials(self, api_key: str | None = None) -> bool:
        """Return ``True`` if *api_key* or a default key is available."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return ``"openai"``, ``"anthropic"`` or ``"google"``."""
