"""Outward server-sent-event framing for chat streams.

Whatever the provider, the widget receives the same framing:

    data: {"content": "<delta>"}\\n\\n      (one per delta)
    data: [DONE]\\n\\n                       (always last on completion)

The terminal sentinel is written even when the upstream produced no text.
If the upstream breaks mid-stream the error propagates and the sentinel is
never written, so the caller sees a truncated stream rather than a fake
clean finish.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

import structlog

logger = structlog.get_logger(logger_name=__name__)

DONE_EVENT = "data: [DONE]\n\n"

STREAM_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(content: str) -> str:
    """Frame one text delta as a server-sent event."""
    return f"data: {json.dumps({'content': content})}\n\n"


async def frame_stream(
    deltas: AsyncIterator[str],
    *,
    abandoned: asyncio.Event | None = None,
    provider: str = "",
) -> AsyncIterator[str]:
    """Wrap provider *deltas* in the outward event framing.

    Parameters
    ----------
    deltas:
        Text deltas from a chat provider adapter.
    abandoned:
        Set by the stream registry when a newer request for the same session
        arrives.  The stream then stops quietly without a sentinel.
    provider:
        Provider name for log context.
    """
    count = 0
    try:
        async for delta in deltas:
            if abandoned is not None and abandoned.is_set():
                logger.info("chat_stream_superseded", provider=provider, deltas=count)
                return
            if not delta:
                continue
            count += 1
            yield format_event(delta)
    finally:
        # Release the upstream connection even when the consumer walked away.
        aclose = getattr(deltas, "aclose", None)
        if aclose is not None:
            await aclose()

    logger.info("chat_stream_complete", provider=provider, deltas=count)
    yield DONE_EVENT
