"""Unit tests for outward SSE framing and per-session stream supersession."""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator

import pytest

from src.services.stream_framing import DONE_EVENT, STREAM_HEADERS, format_event, frame_stream
from src.services.stream_registry import StreamRegistry


async def _gen(deltas: list[str]) -> AsyncIterator[str]:
    for delta in deltas:
        yield delta


async def _collect(stream: AsyncIterator[str]) -> list[str]:
    return [event async for event in stream]


class TestFormatEvent:
    def test_shape(self) -> None:
        assert format_event("Hi") == 'data: {"content": "Hi"}\n\n'

    def test_special_characters_are_json_escaped(self) -> None:
        event = format_event('line1\nsaid "hi"')
        payload = json.loads(event.removeprefix("data: ").strip())
        assert payload == {"content": 'line1\nsaid "hi"'}
        assert event.count("\n\n") == 1


class TestFrameStream:
    async def test_deltas_then_done(self) -> None:
        events = await _collect(frame_stream(_gen(["Hel", "lo"])))
        assert events == [format_event("Hel"), format_event("lo"), DONE_EVENT]

    async def test_empty_upstream_still_done(self) -> None:
        assert await _collect(frame_stream(_gen([]))) == [DONE_EVENT]

    async def test_empty_deltas_skipped(self) -> None:
        events = await _collect(frame_stream(_gen(["", "a", ""])))
        assert events == [format_event("a"), DONE_EVENT]

    async def test_mid_stream_failure_has_no_done(self) -> None:
        events: list[str] = []
        with pytest.raises(RuntimeError):
            async for event in frame_stream(_gen_failing(["a", "b", "c"], fail_after=2)):
                events.append(event)
        assert events == [format_event("a"), format_event("b")]
        assert DONE_EVENT not in events

    async def test_abandoned_stream_stops_without_done(self) -> None:
        abandoned = asyncio.Event()
        events: list[str] = []
        async for event in frame_stream(_gen(["a", "b", "c"]), abandoned=abandoned):
            events.append(event)
            abandoned.set()
        assert events == [format_event("a")]

    def test_headers(self) -> None:
        assert STREAM_HEADERS["Cache-Control"] == "no-cache, no-transform"
        assert STREAM_HEADERS["Connection"] == "keep-alive"
        assert STREAM_HEADERS["X-Accel-Buffering"] == "no"


async def _gen_failing(deltas: list[str], fail_after: int) -> AsyncIterator[str]:
    for i, delta in enumerate(deltas):
        if i == fail_after:
            raise RuntimeError("upstream broke")
        yield delta


class TestStreamRegistry:
    def test_claim_abandons_previous(self) -> None:
        registry = StreamRegistry()
        first = registry.claim("s1")
        second = registry.claim("s1")

        assert first.is_set()
        assert not second.is_set()
        assert len(registry) == 1

    def test_sessions_are_independent(self) -> None:
        registry = StreamRegistry()
        a = registry.claim("a")
        registry.claim("b")
        assert not a.is_set()
        assert len(registry) == 2

    def test_release_only_current(self) -> None:
        registry = StreamRegistry()
        first = registry.claim("s1")
        second = registry.claim("s1")

        registry.release("s1", first)
        assert len(registry) == 1
        registry.release("s1", second)
        assert len(registry) == 0
