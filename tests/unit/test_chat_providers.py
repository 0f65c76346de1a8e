"""Unit tests for chat provider adapters -- OpenAI, Anthropic, Google.

Raw-HTTP adapters are exercised against ``httpx.MockTransport``; the OpenAI
adapter against a patched SDK client.
"""

from __future__ import annotations

import json
from collections.abc import AsyncIterator, Callable
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from src.models.chat import ChatRole, ChatTurn
from src.providers.chat.anthropic_provider import AnthropicChatProvider
from src.providers.chat.google_provider import (
    GoogleChatProvider,
    extract_text,
    to_gemini_contents,
)
from src.providers.chat.openai_provider import OpenAIChatProvider
from src.utils.errors import LLMError

_TURNS = [
    ChatTurn(role=ChatRole.USER, content="Hi"),
    ChatTurn(role=ChatRole.ASSISTANT, content="Hello!"),
    ChatTurn(role=ChatRole.USER, content="What do you sell?"),
]


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _collect(stream: AsyncIterator[str] | None) -> list[str]:
    assert stream is not None
    return [delta async for delta in stream]


def _sse(*events: tuple[str, dict]) -> bytes:
    return "".join(
        f"event: {name}\ndata: {json.dumps(data)}\n\n" for name, data in events
    ).encode()


# ======================================================================
# Anthropic
# ======================================================================


class TestAnthropicChatProvider:
    async def test_no_key_returns_none(self, settings_factory) -> None:
        handler = MagicMock()
        provider = AnthropicChatProvider(settings_factory(), _client(handler))

        assert await provider.open_stream(_TURNS, "claude-sonnet-4", "sys") is None
        handler.assert_not_called()
        assert provider.has_credentials() is False
        assert provider.has_credentials("sk-client") is True

    async def test_request_shape_and_deltas(self, settings_factory) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            body = _sse(
                ("message_start", {"type": "message_start"}),
                ("content_block_start", {"type": "content_block_start"}),
                ("content_block_delta", {"delta": {"type": "text_delta", "text": "We sell "}}),
                ("ping", {"type": "ping"}),
                ("content_block_delta", {"delta": {"type": "text_delta", "text": "ovens."}}),
                ("message_stop", {"type": "message_stop"}),
            )
            return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})

        provider = AnthropicChatProvider(
            settings_factory(anthropic_api_key="sk-ant-default"), _client(handler)
        )
        deltas = await _collect(
            await provider.open_stream(_TURNS, "claude-sonnet-4", "Be brief.")
        )

        assert deltas == ["We sell ", "ovens."]
        assert seen["url"] == "https://api.anthropic.test/v1/messages"
        assert seen["headers"]["x-api-key"] == "sk-ant-default"
        assert seen["headers"]["anthropic-version"] == "2023-06-01"
        assert seen["body"]["model"] == "claude-sonnet-4-20250514"
        assert seen["body"]["system"] == "Be brief."
        assert seen["body"]["stream"] is True
        assert seen["body"]["max_tokens"] == 1000
        assert seen["body"]["messages"][1] == {"role": "assistant", "content": "Hello!"}

    async def test_request_key_overrides_default(self, settings_factory) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers["x-api-key"]
            return httpx.Response(200, content=_sse(("message_stop", {})))

        provider = AnthropicChatProvider(
            settings_factory(anthropic_api_key="sk-default"), _client(handler)
        )
        await _collect(
            await provider.open_stream(_TURNS, "claude-sonnet-4", "sys", api_key="sk-client")
        )
        assert seen["key"] == "sk-client"

    async def test_http_error_before_streaming_raises(self, settings_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"error": {"message": "bad key"}})

        provider = AnthropicChatProvider(
            settings_factory(anthropic_api_key="sk-bad"), _client(handler)
        )
        with pytest.raises(LLMError) as exc_info:
            await provider.open_stream(_TURNS, "claude-sonnet-4", "sys")
        assert exc_info.value.provider_name == "anthropic"

    async def test_transport_error_raises(self, settings_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        provider = AnthropicChatProvider(
            settings_factory(anthropic_api_key="sk"), _client(handler)
        )
        with pytest.raises(LLMError):
            await provider.open_stream(_TURNS, "claude-sonnet-4", "sys")

    async def test_error_event_mid_stream_raises(self, settings_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = _sse(
                ("content_block_delta", {"delta": {"type": "text_delta", "text": "Par"}}),
                ("error", {"type": "error", "error": {"type": "overloaded_error"}}),
            )
            return httpx.Response(200, content=body)

        provider = AnthropicChatProvider(settings_factory(anthropic_api_key="sk"), _client(handler))
        stream = await provider.open_stream(_TURNS, "claude-sonnet-4", "sys")

        received: list[str] = []
        with pytest.raises(LLMError):
            async for delta in stream:
                received.append(delta)
        assert received == ["Par"]


# ======================================================================
# Google
# ======================================================================


def _gemini_line(text: str) -> str:
    return json.dumps({"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]})


class TestGoogleHelpers:
    def test_contents_relabel_assistant_as_model(self) -> None:
        contents = to_gemini_contents(_TURNS)
        assert [c["role"] for c in contents] == ["user", "model", "user"]
        assert contents[2]["parts"] == [{"text": "What do you sell?"}]

    def test_extract_text(self) -> None:
        assert extract_text(json.loads(_gemini_line("hey"))) == "hey"
        assert extract_text({"candidates": []}) is None
        assert extract_text({"usageMetadata": {}}) is None


class TestGoogleChatProvider:
    async def test_no_key_returns_none(self, settings_factory) -> None:
        provider = GoogleChatProvider(settings_factory(), _client(MagicMock()))
        assert await provider.open_stream(_TURNS, "gemini-3-flash", "sys") is None

    async def test_request_shape_and_deltas(self, settings_factory) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            seen["body"] = json.loads(request.content)
            body = f"data: {_gemini_line('Ovens ')}\r\n\r\ndata: {_gemini_line('and pans.')}\r\n\r\n"
            return httpx.Response(200, content=body.encode())

        provider = GoogleChatProvider(
            settings_factory(google_ai_api_key="g-key"), _client(handler)
        )
        deltas = await _collect(await provider.open_stream(_TURNS, "gemini-3-flash", "Be kind."))

        assert deltas == ["Ovens ", "and pans."]
        assert seen["url"].path == "/v1beta/models/gemini-2.0-flash:streamGenerateContent"
        assert seen["url"].params["key"] == "g-key"
        assert seen["url"].params["alt"] == "sse"
        assert seen["body"]["systemInstruction"] == {"parts": [{"text": "Be kind."}]}
        assert seen["body"]["generationConfig"] == {"maxOutputTokens": 1000}
        assert seen["body"]["contents"][1]["role"] == "model"

    async def test_array_body_without_sse_framing(self, settings_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = f"[{_gemini_line('one')}\n,{_gemini_line('two')}\n]"
            return httpx.Response(200, content=body.encode())

        provider = GoogleChatProvider(settings_factory(google_ai_api_key="k"), _client(handler))
        deltas = await _collect(await provider.open_stream(_TURNS, "gemini-3-pro", "sys"))
        assert deltas == ["one", "two"]

    async def test_malformed_line_skipped(self, settings_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            body = f"data: {_gemini_line('ok')}\n\ndata: {{broken\n\n"
            return httpx.Response(200, content=body.encode())

        provider = GoogleChatProvider(settings_factory(google_ai_api_key="k"), _client(handler))
        deltas = await _collect(await provider.open_stream(_TURNS, "gemini-3-flash", "sys"))
        assert deltas == ["ok"]

    async def test_http_error_raises_without_leaking_key(self, settings_factory) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(403, json={"error": {"message": "forbidden"}})

        provider = GoogleChatProvider(
            settings_factory(google_ai_api_key="secret-key"), _client(handler)
        )
        with pytest.raises(LLMError) as exc_info:
            await provider.open_stream(_TURNS, "gemini-3-flash", "sys")
        assert "secret-key" not in str(exc_info.value)


# ======================================================================
# OpenAI
# ======================================================================


def _chunk(content: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=content))])


class _SDKStream:
    """Stands in for the SDK's ``AsyncStream``: async iterable with ``close()``."""

    def __init__(self, chunks: list[SimpleNamespace]) -> None:
        self._chunks = chunks
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[SimpleNamespace]:
        for chunk in self._chunks:
            yield chunk

    async def close(self) -> None:
        self.closed = True


def _mock_client(**create_kwargs) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(**create_kwargs)
    client.close = AsyncMock()
    return client


class TestOpenAIChatProvider:
    def test_no_key_returns_none_without_client(self, settings_factory) -> None:
        provider = OpenAIChatProvider(settings_factory())
        assert provider.has_credentials() is False

    async def test_no_key_open_stream_returns_none(self, settings_factory) -> None:
        provider = OpenAIChatProvider(settings_factory())
        assert await provider.open_stream(_TURNS, "gpt-5.2", "sys") is None

    async def test_streams_deltas_with_system_first(self, settings_factory) -> None:
        sdk_stream = _SDKStream([_chunk("Hel"), _chunk(None), _chunk("lo")])
        mock_client = _mock_client(return_value=sdk_stream)
        with patch(
            "src.providers.chat.openai_provider.openai.AsyncOpenAI", return_value=mock_client
        ):
            provider = OpenAIChatProvider(settings_factory(openai_api_key="sk-test"))
            deltas = await _collect(await provider.open_stream(_TURNS, "gpt-5.2-mini", "Sys."))

        assert deltas == ["Hel", "lo"]
        assert sdk_stream.closed is True
        # The shared default client outlives the stream.
        mock_client.close.assert_not_awaited()
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-5.2-mini"
        assert kwargs["stream"] is True
        assert kwargs["max_tokens"] == 1000
        assert kwargs["messages"][0] == {"role": "system", "content": "Sys."}
        assert kwargs["messages"][1:] == [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello!"},
            {"role": "user", "content": "What do you sell?"},
        ]

    async def test_early_stop_closes_sdk_stream(self, settings_factory) -> None:
        sdk_stream = _SDKStream([_chunk("a"), _chunk("b"), _chunk("c")])
        mock_client = _mock_client(return_value=sdk_stream)
        with patch(
            "src.providers.chat.openai_provider.openai.AsyncOpenAI", return_value=mock_client
        ):
            provider = OpenAIChatProvider(settings_factory(openai_api_key="sk-test"))
            deltas = await provider.open_stream(_TURNS, "gpt-5.2", "sys")
            assert await deltas.__anext__() == "a"
            await deltas.aclose()

        assert sdk_stream.closed is True

    async def test_request_key_client_closed_with_stream(self, settings_factory) -> None:
        sdk_stream = _SDKStream([_chunk("ok")])
        mock_client = _mock_client(return_value=sdk_stream)
        with patch(
            "src.providers.chat.openai_provider.openai.AsyncOpenAI", return_value=mock_client
        ) as factory:
            provider = OpenAIChatProvider(settings_factory())
            stream = await provider.open_stream(_TURNS, "gpt-5.2", "sys", api_key="sk-client")
            assert await _collect(stream) == ["ok"]

        assert factory.call_args.kwargs["api_key"] == "sk-client"
        assert sdk_stream.closed is True
        mock_client.close.assert_awaited_once()

    async def test_request_key_client_closed_on_refusal(self, settings_factory) -> None:
        mock_client = _mock_client(
            side_effect=openai.APIConnectionError(
                request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
            )
        )
        with patch(
            "src.providers.chat.openai_provider.openai.AsyncOpenAI", return_value=mock_client
        ):
            provider = OpenAIChatProvider(settings_factory())
            with pytest.raises(LLMError):
                await provider.open_stream(_TURNS, "gpt-5.2", "sys", api_key="sk-client")

        mock_client.close.assert_awaited_once()

    async def test_api_error_becomes_llm_error(self, settings_factory) -> None:
        mock_client = _mock_client(
            side_effect=openai.APIConnectionError(
                request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
            )
        )
        with patch(
            "src.providers.chat.openai_provider.openai.AsyncOpenAI", return_value=mock_client
        ):
            provider = OpenAIChatProvider(settings_factory(openai_api_key="sk-test"))
            with pytest.raises(LLMError) as exc_info:
                await provider.open_stream(_TURNS, "gpt-5.2", "sys")
        assert exc_info.value.provider_name == "openai"
        mock_client.close.assert_not_awaited()
