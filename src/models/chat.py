"""Chat request data models.

A conversation request is what the embeddable widget posts on every turn:
the tenant whose knowledge base should be searched, the full list of turns so
far, and the widget configuration.  The gateway keeps no memory between
requests, so everything it needs must be in this body.

The widget has shipped with two sets of field names over time, so the
models accept both:

    tenantId  ← chatbotId
    turns     ← messages
    modelId   ← model

Models are frozen (immutable) once validated.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class ChatRole(str, Enum):
    """Speaker of a chat turn."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseModel):
    """One message in the conversation."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str = ""


class ChatConfig(BaseModel):
    """Per-widget configuration sent alongside every chat request.

    Every field is optional on the wire; the gateway fills gaps from the
    configured defaults during normalization.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    system_prompt: str | None = Field(
        default=None, validation_alias=AliasChoices("systemPrompt", "system_prompt")
    )
    business_name: str | None = Field(
        default=None, validation_alias=AliasChoices("businessName", "business_name")
    )
    model_id: str | None = Field(
        default=None, validation_alias=AliasChoices("model", "modelId", "model_id")
    )
    # Client-supplied credential; overrides the process-wide default key.
    api_key: str | None = Field(
        default=None, validation_alias=AliasChoices("apiKey", "api_key"), repr=False
    )


class ChatRequest(BaseModel):
    """A full conversation turn as posted to the chat endpoint."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    tenant_id: str | None = Field(
        default=None, validation_alias=AliasChoices("tenantId", "chatbotId", "tenant_id")
    )
    turns: list[ChatTurn] = Field(
        default_factory=list, validation_alias=AliasChoices("turns", "messages")
    )
    config: ChatConfig = Field(default_factory=ChatConfig)
    # Identifies the logical conversation so a newer request can supersede
    # an older stream still in flight.
    session_id: str | None = Field(
        default=None, validation_alias=AliasChoices("sessionId", "session_id")
    )

    @field_validator("config", mode="before")
    @classmethod
    def _null_config_means_defaults(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def last_message(self) -> str:
        """Content of the final turn, or an empty string for no turns."""
        if not self.turns:
            return ""
        return self.turns[-1].content


class NormalizedChatConfig(BaseModel):
    """Chat configuration after defaults have been applied."""

    model_config = ConfigDict(frozen=True)

    system_prompt: str
    business_name: str
    model_id: str
    api_key: str | None = Field(default=None, repr=False)


class DemoReply(BaseModel):
    """Non-streamed reply produced by the rule-based responder."""

    model_config = ConfigDict(frozen=True)

    content: str
    mode: str = "demo"
