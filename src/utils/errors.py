"""Custom exception hierarchy for nyxchat.

All application exceptions inherit from :class:`NyxChatError`, which carries
an optional ``provider_name`` so handlers can tell which upstream service
("openai", "anthropic", "google", "sqlite_knowledge") caused the failure.

    NyxChatError  (base)
    +-- InvalidRequestError     (client sent an incomplete or malformed body)
    +-- LLMError                (chat provider call failed)
    +-- KnowledgeStoreError     (document / chunk storage failed)
    +-- IngestionError          (document could not be ingested as a whole)
    +-- ContentExtractionError  (URL could not be turned into article text)

Embedding and retrieval failures are absorbed where they happen, and an
LLMError raised before streaming starts turns into the demo reply.  The
others map to HTTP statuses in src/api/routes.py.
"""


class NyxChatError(Exception):
    """Base exception for all nyxchat errors.

    ``__str__`` prefixes the provider name in brackets for log scanning,
    e.g. ``[anthropic] HTTP 529 from upstream``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class InvalidRequestError(NyxChatError):
    """Raised when a request body is missing required fields."""

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(NyxChatError):
    """Raised when a chat provider call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class KnowledgeStoreError(NyxChatError):
    """Raised when a knowledge-store read or write fails."""

    def __init__(
        self,
        message: str = "Knowledge store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IngestionError(NyxChatError):
    """Raised when a document cannot be ingested with consistent chunks."""

    def __init__(
        self,
        message: str = "Document ingestion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ContentExtractionError(NyxChatError):
    """Raised when a URL cannot be fetched or yields no readable article."""

    def __init__(
        self,
        message: str = "Could not extract readable content from URL",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
