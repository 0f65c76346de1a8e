"""nyxchat domain models -- re-exports all public model classes.

    - chat.py       -- conversation request, turns, widget config, demo reply
    - knowledge.py  -- documents, chunks, retrieval hits, ingestion results
"""

from __future__ import annotations

from src.models.chat import (
    ChatConfig,
    ChatRequest,
    ChatRole,
    ChatTurn,
    DemoReply,
    NormalizedChatConfig,
)
from src.models.knowledge import (
    Chunk,
    Document,
    DocumentSummary,
    IngestionResult,
    RetrievedChunk,
    SourceType,
)

__all__ = [
    "ChatConfig",
    "ChatRequest",
    "ChatRole",
    "ChatTurn",
    "Chunk",
    "DemoReply",
    "Document",
    "DocumentSummary",
    "IngestionResult",
    "NormalizedChatConfig",
    "RetrievedChunk",
    "SourceType",
]
