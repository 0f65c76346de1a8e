"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# Values are read from, in priority order:
#
#   1. Environment variables (OPENAI_API_KEY=sk-..., KNOWLEDGE_DB_PATH=...)
#   2. The project-root .env file (local development only, never committed)
#   3. The defaults declared below
#
# An empty credential means "not configured".  Nothing in the gateway treats
# that as an error: the chat route answers in demo mode and retrieval returns
# no passages.  The same goes for an empty KNOWLEDGE_DB_PATH.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """nyxchat application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Chat providers (process-wide default credentials) ===
    # A per-request apiKey in the chat body always wins over these.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint override
    anthropic_api_key: str = ""
    anthropic_base_url: str = "https://api.anthropic.com"
    google_ai_api_key: str = ""
    google_base_url: str = "https://generativelanguage.googleapis.com"

    # === Embeddings ===
    # Embeddings always go through the OpenAI default key; without it the
    # knowledge base stores chunks with no vector (demo mode).
    openai_embedding_model: str = "text-embedding-3-small"

    # === Knowledge store ===
    knowledge_db_path: str = "data/knowledge.db"

    # === Retrieval / chunking defaults ===
    rag_similarity_threshold: float = 0.5
    rag_top_k: int = 5
    chunk_max_tokens: int = 500
    chunk_overlap_words: int = 20

    # === Upstream calls ===
    max_output_tokens: int = 1000
    upstream_timeout_seconds: float = 30.0

    # === Chat defaults (used when the widget config omits a field) ===
    default_system_prompt: str = "You are a helpful assistant."
    default_business_name: str = "Our Business"
    default_model: str = "gemini-3-flash"

    # === App Config ===
    cors_allowed_origins: list[str] = ["*"]
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_configured_chat_providers(self) -> list[str]:
        """Return the chat provider names that have a default API key configured."""
        providers: list[str] = []
        if self.openai_api_key:
            providers.append("openai")
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.google_ai_api_key:
            providers.append("google")
        return providers
