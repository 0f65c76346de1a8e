"""Tracks the in-flight stream for each conversation session.

When a user sends a new message while the previous answer is still
streaming, only the newest answer should reach them.  Each stream claims its
session here and receives an ``asyncio.Event``; claiming a session that
already has a stream sets the older stream's event, and
:func:`src.services.stream_framing.frame_stream` stops on its next delta.

All access happens on the event loop thread, so no lock is needed.
"""

from __future__ import annotations

import asyncio

import structlog

logger = structlog.get_logger(logger_name=__name__)


class StreamRegistry:
    """Maps session ids to the abandonment flag of their current stream."""

    def __init__(self) -> None:
        self._active: dict[str, asyncio.Event] = {}

    def claim(self, session_id: str) -> asyncio.Event:
        """Register a new stream for *session_id*, abandoning any older one."""
        previous = self._active.get(session_id)
        if previous is not None:
            previous.set()
            logger.debug("stream_abandoned", session_id=session_id)
        event = asyncio.Event()
        self._active[session_id] = event
        return event

    def release(self, session_id: str, event: asyncio.Event) -> None:
        """Forget *event* if it is still the session's current stream."""
        if self._active.get(session_id) is event:
            del self._active[session_id]

    def __len__(self) -> int:
        return len(self._active)
