# =============================================================================
# src/cli/ingest.py -- CLI Ingest Command (Knowledge Base Management)
# =============================================================================
#
# Standalone CLI for managing tenant knowledge bases without going through
# the HTTP API.  It builds the same store, chunker, embedding provider and
# ingestion service as the web app, from the same settings.
#
# Supported subcommands:
#
#   text    -- Ingest a plain-text file as one document
#   url     -- Fetch a web page, extract the article and ingest it
#   list    -- List a tenant's documents, newest first
#   delete  -- Delete a document and its chunks
#
# Usage examples:
#   python -m src.cli.ingest text --tenant acme --file faq.txt --name "FAQ"
#   python -m src.cli.ingest url --tenant acme --url https://acme.example/about
#   python -m src.cli.ingest list --tenant acme
#   python -m src.cli.ingest delete --id 3f2c...
# =============================================================================

"""Standalone CLI for managing tenant knowledge bases.

Usage::

    python -m src.cli.ingest text --tenant acme --file faq.txt --name "FAQ"

    python -m src.cli.ingest url --tenant acme --url https://acme.example/about

    python -m src.cli.ingest list --tenant acme

    python -m src.cli.ingest delete --id <document-id>
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import httpx

from src.config.settings import Settings
from src.models.knowledge import SourceType
from src.providers.article.web_scraper_provider import WebScraperProvider
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from src.providers.knowledge.sqlite_knowledge_store import SQLiteKnowledgeStore
from src.services.ingestion.chunker import TextChunker
from src.services.ingestion.ingestion_service import IngestionService
from src.utils.errors import NyxChatError
from src.utils.logging import configure_logging


def _build_ingestion_service(
    app_settings: Settings, http_client: httpx.AsyncClient
) -> tuple[IngestionService, SQLiteKnowledgeStore]:
    """Build the ingestion service exactly as ``main.py`` does."""
    store = SQLiteKnowledgeStore(db_path=app_settings.knowledge_db_path)
    service = IngestionService(
        chunker=TextChunker(
            max_tokens=app_settings.chunk_max_tokens,
            overlap_words=app_settings.chunk_overlap_words,
        ),
        embedding_provider=OpenAIEmbeddingProvider(settings=app_settings),
        store=store,
        article_provider=WebScraperProvider(http_client=http_client),
    )
    return service, store


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_text(args: argparse.Namespace, service: IngestionService) -> int:
    """Ingest a plain-text file."""
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    name = args.name or path.stem
    print(f"Ingesting {path} as '{name}' for tenant {args.tenant}")
    result = await service.ingest(
        tenant_id=args.tenant,
        name=name,
        content=path.read_text(encoding="utf-8"),
    )
    _print_result(result)
    return 0


async def _handle_url(args: argparse.Namespace, service: IngestionService) -> int:
    """Extract and ingest a web page."""
    print(f"Ingesting {args.url} for tenant {args.tenant}")
    result = await service.ingest(
        tenant_id=args.tenant,
        name=args.name or args.url,
        source_type=SourceType.URL,
        source_url=args.url,
    )
    _print_result(result)
    return 0


async def _handle_list(args: argparse.Namespace, service: IngestionService) -> int:
    """List a tenant's documents."""
    documents = await service.list_documents(args.tenant)
    if not documents:
        print(f"No documents for tenant {args.tenant}")
        return 0

    print(f"{len(documents)} document(s) for tenant {args.tenant}:")
    for doc in documents:
        print(
            f"  {doc.id}  {doc.created_at:%Y-%m-%d %H:%M}  "
            f"{doc.source_type.value:<4}  {doc.chunk_count:>4} chunks  {doc.name}"
        )
    return 0


async def _handle_delete(args: argparse.Namespace, service: IngestionService) -> int:
    """Delete a document and its chunks."""
    if await service.delete_document(args.id):
        print(f"Deleted document {args.id}")
        return 0
    print(f"Error: document not found: {args.id}", file=sys.stderr)
    return 1


def _print_result(result) -> None:  # noqa: ANN001
    print("\nIngestion complete:")
    print(f"  Document ID:      {result.document.id}")
    print(f"  Chunks created:   {result.chunks_created}")
    print(f"  Embeddings:       {result.embeddings_generated}")


_HANDLERS = {
    "text": _handle_text,
    "url": _handle_url,
    "list": _handle_list,
    "delete": _handle_delete,
}


async def _run(args: argparse.Namespace, app_settings: Settings) -> int:
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(app_settings.upstream_timeout_seconds, connect=5.0)
    ) as http_client:
        service, store = _build_ingestion_service(app_settings, http_client)
        await store.initialize()
        try:
            return await _HANDLERS[args.command](args, service)
        except NyxChatError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the ingestion CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.ingest",
        description="Manage nyxchat tenant knowledge bases.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Knowledge base commands")

    # -- text --
    text_parser = subparsers.add_parser("text", help="Ingest a plain-text file")
    text_parser.add_argument("--tenant", required=True, help="Tenant (chatbot) id")
    text_parser.add_argument("--file", required=True, help="Path to the text file")
    text_parser.add_argument("--name", help="Document name (default: file name)")

    # -- url --
    url_parser = subparsers.add_parser("url", help="Ingest a web page")
    url_parser.add_argument("--tenant", required=True, help="Tenant (chatbot) id")
    url_parser.add_argument("--url", required=True, help="Page URL")
    url_parser.add_argument("--name", help="Document name (default: the URL)")

    # -- list --
    list_parser = subparsers.add_parser("list", help="List a tenant's documents")
    list_parser.add_argument("--tenant", required=True, help="Tenant (chatbot) id")

    # -- delete --
    delete_parser = subparsers.add_parser("delete", help="Delete a document")
    delete_parser.add_argument("--id", required=True, help="Document id")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """CLI entry point for the ingestion tool."""
    parser = _build_parser()
    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    app_settings = Settings()
    configure_logging(log_level=app_settings.log_level)

    if not app_settings.knowledge_db_path:
        print("Error: KNOWLEDGE_DB_PATH is not set", file=sys.stderr)
        sys.exit(1)

    sys.exit(asyncio.run(_run(args, app_settings)))


if __name__ == "__main__":
    main()
