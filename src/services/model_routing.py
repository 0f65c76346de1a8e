"""Model identifier routing.

A widget stores a ``model`` string such as ``"claude-sonnet-4"`` in its
embed snippet.  This module turns that string into (a) which provider adapter
handles it and (b) the vendor's actual API model name.

Both are pure functions of the identifier.  ``MODEL_ALIASES`` is a
compatibility table: deployed widgets reference its keys indefinitely, so
entries may be added or re-pointed but never removed.
"""

from __future__ import annotations

from enum import Enum


class ProviderKind(str, Enum):
    """Upstream chat protocol families."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"
    GOOGLE = "google"


DEFAULT_PROVIDER = ProviderKind.OPENAI

# Checked in order; the first matching prefix wins.
_PREFIX_RULES: tuple[tuple[tuple[str, ...], ProviderKind], ...] = (
    (("gpt-", "o1"), ProviderKind.OPENAI),
    (("claude-",), ProviderKind.ANTHROPIC),
    (("gemini-",), ProviderKind.GOOGLE),
)

# Widget model id -> vendor API model name.
MODEL_ALIASES: dict[str, str] = {
    # OpenAI
    "gpt-5.2": "gpt-5.2",
    "gpt-5.2-mini": "gpt-5.2-mini",
    # Anthropic
    "claude-haiku-4.5": "claude-3-5-haiku-latest",
    "claude-sonnet-4": "claude-sonnet-4-20250514",
    # Google
    "gemini-3-flash": "gemini-2.0-flash",
    "gemini-3-pro": "gemini-2.0-pro",
}


def select_provider(model_id: str) -> ProviderKind:
    """Return the provider family for *model_id*; unknown ids go to OpenAI."""
    for prefixes, kind in _PREFIX_RULES:
        if model_id.startswith(prefixes):
            return kind
    return DEFAULT_PROVIDER


def resolve_api_model(model_id: str) -> str:
    """Map a widget model id to the vendor model name, passing unknown ids through."""
    return MODEL_ALIASES.get(model_id, model_id)
