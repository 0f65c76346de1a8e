"""Incremental parser for newline-delimited JSON response bodies.

Google's streaming endpoint sends one JSON object per line, either bare with
array punctuation around it or prefixed with ``data:`` when ``alt=sse`` is
requested.  Network reads split those lines at arbitrary points, so the
parser keeps a buffer:

    feed(text)  → append to buffer
                → for every complete line (terminated by "\\n"):
                      strip whitespace, a "data:" prefix and the array
                      punctuation "[", "]", ","
                      try json.loads; keep dicts, skip anything unparsable
                → keep the unterminated tail for the next feed
    flush()     → give the tail one last parse attempt at end of stream

A line is only consumed once it is terminated, so a partial object is never
dropped.  A malformed complete line is skipped without error.
"""

from __future__ import annotations

import json
from typing import Any

import structlog

logger = structlog.get_logger(logger_name=__name__)

_PUNCTUATION = "[],"


class JSONLineParser:
    """Buffering parser that yields complete JSON objects from text fragments."""

    def __init__(self) -> None:
        self._buffer = ""
        self._skipped = 0

    @property
    def pending(self) -> str:
        """Unterminated text waiting for more input."""
        return self._buffer

    @property
    def skipped(self) -> int:
        """Number of complete lines that could not be parsed."""
        return self._skipped

    def feed(self, text: str) -> list[dict[str, Any]]:
        """Add *text* and return every object completed by it."""
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        return [obj for obj in map(self._parse_line, lines) if obj is not None]

    def flush(self) -> list[dict[str, Any]]:
        """Parse whatever remains in the buffer and clear it."""
        tail, self._buffer = self._buffer, ""
        obj = self._parse_line(tail)
        return [obj] if obj is not None else []

    def _parse_line(self, line: str) -> dict[str, Any] | None:
        candidate = line.strip()
        if candidate.startswith("data:"):
            candidate = candidate[len("data:") :].strip()
        if candidate == "[DONE]":
            return None
        candidate = candidate.strip(_PUNCTUATION).strip()
        if not candidate:
            return None
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError:
            self._skipped += 1
            logger.debug("json_line_skipped", length=len(candidate))
            return None
        if not isinstance(parsed, dict):
            self._skipped += 1
            return None
        return parsed
