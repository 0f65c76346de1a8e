"""Public interface definitions for all external service providers.

Every upstream API or storage engine is reached only through the abstract
base classes in this package.  Concrete adapters implement them and are
wired together once at startup in ``src/main.py``; tests inject fakes.

CONCRETE PROVIDER MAP:
    Interface            →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    IChatProvider        →  OpenAIChatProvider, AnthropicChatProvider,
                            GoogleChatProvider
    IEmbeddingProvider   →  OpenAIEmbeddingProvider
    IKnowledgeStore      →  SQLiteKnowledgeStore
    IArticleProvider     →  WebScraperProvider
"""

from src.interfaces.article_provider import ArticleContent, IArticleProvider
from src.interfaces.chat_provider import IChatProvider
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.knowledge_store import IKnowledgeStore

__all__ = [
    "ArticleContent",
    "IArticleProvider",
    "IChatProvider",
    "IEmbeddingProvider",
    "IKnowledgeStore",
]
