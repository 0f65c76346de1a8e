"""Utility modules for nyxchat.

- **errors** -- Domain-specific exception hierarchy rooted at NyxChatError;
  each layer raises its own subclass so callers can handle failures
  granularly.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production, with
  credential redaction in both.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ContentExtractionError,
    IngestionError,
    InvalidRequestError,
    KnowledgeStoreError,
    LLMError,
    NyxChatError,
)

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "ContentExtractionError",
    "IngestionError",
    "InvalidRequestError",
    "KnowledgeStoreError",
    "LLMError",
    "NyxChatError",
    "configure_logging",
    "get_logger",
]
