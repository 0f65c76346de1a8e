# =============================================================================
# src/cli/__main__.py -- Package Entry Point
# =============================================================================
#
# Running the package itself (`python -m src.cli`) delegates to the
# knowledge base CLI in ingest.py, the only CLI tool.
# =============================================================================

"""Allow ``python -m src.cli`` execution."""

from src.cli.ingest import main

main()
