"""Minimal server-sent-events reader for upstream provider streams.

Consumes decoded lines (as produced by ``httpx.Response.aiter_lines``) and
groups them into events: ``event:`` sets the type, ``data:`` lines are joined
with newlines, and a blank line dispatches the event.  Comment lines starting
with ``:`` are ignored.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass


@dataclass(frozen=True)
class SSEEvent:
    event: str
    data: str


async def iter_sse_events(lines: AsyncIterator[str]) -> AsyncIterator[SSEEvent]:
    """Group *lines* into :class:`SSEEvent` objects."""
    event_type = "message"
    data_lines: list[str] = []

    async for raw in lines:
        line = raw.rstrip("\r")
        if not line:
            if data_lines:
                yield SSEEvent(event=event_type, data="\n".join(data_lines))
            event_type = "message"
            data_lines = []
            continue
        if line.startswith(":"):
            continue
        field, _, value = line.partition(":")
        value = value.removeprefix(" ")
        if field == "event":
            event_type = value
        elif field == "data":
            data_lines.append(value)

    # Stream ended without the trailing blank line.
    if data_lines:
        yield SSEEvent(event=event_type, data="\n".join(data_lines))
