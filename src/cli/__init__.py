"""CLI tools for nyxchat.

- ``python -m src.cli.ingest`` -- ingest text files and web pages into a
  tenant's knowledge base, list documents, and delete them.

argparse only; each command builds its own store and services from the
settings, since CLI runs are one-shot.
"""
