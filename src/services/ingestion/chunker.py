"""Word-window text chunking with a fixed word overlap.

Splits document text into passages of at most ~500 estimated tokens.  The
token estimate is ``ceil(len(word) / 4)`` per word, which is cheap and, more
importantly, reproduces the chunk boundaries of documents already stored in
existing knowledge bases.  Do not swap in a real tokenizer here.

When the next word would push the running estimate over the budget, the
current chunk is closed and the next one is seeded with its last 20 words,
so a phrase straddling a boundary appears whole in at least one chunk.  The
overlap is counted in words, not tokens.

A single word larger than the whole budget is emitted in a chunk of its own
rather than being split.
"""

from __future__ import annotations

import math

import structlog

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_MAX_TOKENS = 500
DEFAULT_OVERLAP_WORDS = 20


def estimate_tokens(word: str) -> int:
    """Approximate token count of a single word (4 characters per token)."""
    return math.ceil(len(word) / 4)


class TextChunker:
    """Splits text into overlapping word windows bounded by a token estimate.

    Parameters
    ----------
    max_tokens:
        Token budget per chunk (default 500).
    overlap_words:
        Number of trailing words carried into the next chunk (default 20).
    """

    def __init__(
        self,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        overlap_words: int = DEFAULT_OVERLAP_WORDS,
    ) -> None:
        if max_tokens < 1:
            raise ValueError(f"max_tokens must be positive, got {max_tokens}")
        if overlap_words < 0:
            raise ValueError(f"overlap_words must be non-negative, got {overlap_words}")
        self._max_tokens = max_tokens
        self._overlap_words = overlap_words

    @property
    def max_tokens(self) -> int:
        return self._max_tokens

    def chunk(self, text: str) -> list[str]:
        """Split *text* into an ordered list of chunk strings.

        Deterministic: the same text and settings always give the same list.
        Empty or whitespace-only input returns an empty list.
        """
        words = text.split()
        chunks: list[str] = []
        current: list[str] = []
        current_tokens: float = 0

        for word in words:
            word_tokens = estimate_tokens(word)
            if current_tokens + word_tokens > self._max_tokens and current:
                chunks.append(" ".join(current))
                current = current[-self._overlap_words :] if self._overlap_words else []
                # Seed estimate is character based, not per-word ceil, to
                # match stored boundaries.
                current_tokens = len(" ".join(current)) / 4
            current.append(word)
            current_tokens += word_tokens

        if current:
            chunks.append(" ".join(current))

        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            num_words=len(words),
            max_tokens=self._max_tokens,
        )
        return chunks
