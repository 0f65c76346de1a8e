"""Chat provider adapters.

Three concrete implementations of IChatProvider (src/interfaces/chat_provider.py):
    - OpenAIChatProvider    -- openai SDK streaming (gpt-*, o1*)
    - AnthropicChatProvider -- raw HTTP + server-sent events (claude-*)
    - GoogleChatProvider    -- raw HTTP + newline-delimited JSON (gemini-*)

main.py builds all three once at startup; the gateway chooses per request
from the widget's model id.
"""

from src.providers.chat.anthropic_provider import AnthropicChatProvider
from src.providers.chat.google_provider import GoogleChatProvider
from src.providers.chat.openai_provider import OpenAIChatProvider

__all__ = ["AnthropicChatProvider", "GoogleChatProvider", "OpenAIChatProvider"]
