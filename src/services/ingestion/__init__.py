"""Document ingestion pipeline for tenant knowledge bases.

Orchestrates: **extract -> store document -> chunk -> embed -> store chunks**.

1. **Chunk** (chunker.py / TextChunker) -- Splits document text into
   ~500-token windows, carrying the last 20 words of each window into the
   next so a sentence cut at a boundary still appears whole somewhere.

2. **Ingest** (ingestion_service.py / IngestionService) -- Writes the
   document, embeds each chunk, writes all chunks at once, and deletes the
   document again if anything after its creation fails.
"""

from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.ingestion_service import IngestionService

__all__ = [
    "IngestionService",
    "TextChunker",
]
