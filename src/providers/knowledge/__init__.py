"""Knowledge store implementations.

SQLiteKnowledgeStore is the only implementation: documents and chunks in one
aiosqlite database, chunk vectors stored as JSON and scored with numpy.
"""

from src.providers.knowledge.sqlite_knowledge_store import SQLiteKnowledgeStore

__all__ = ["SQLiteKnowledgeStore"]
