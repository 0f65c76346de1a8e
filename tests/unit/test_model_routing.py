"""Unit tests for model id → provider routing and API model resolution."""

from __future__ import annotations

import pytest

from src.services.model_routing import (
    MODEL_ALIASES,
    ProviderKind,
    resolve_api_model,
    select_provider,
)


class TestSelectProvider:
    @pytest.mark.parametrize(
        ("model_id", "expected"),
        [
            ("gpt-5.2", ProviderKind.OPENAI),
            ("gpt-4o-mini", ProviderKind.OPENAI),
            ("o1-preview", ProviderKind.OPENAI),
            ("claude-sonnet-4", ProviderKind.ANTHROPIC),
            ("claude-haiku-4.5", ProviderKind.ANTHROPIC),
            ("gemini-3-flash", ProviderKind.GOOGLE),
            ("gemini-1.5-pro", ProviderKind.GOOGLE),
        ],
    )
    def test_prefix_routing(self, model_id: str, expected: ProviderKind) -> None:
        assert select_provider(model_id) == expected

    @pytest.mark.parametrize("model_id", ["llama-3", "mistral-large", "", "Claude-sonnet"])
    def test_unknown_ids_go_to_openai(self, model_id: str) -> None:
        assert select_provider(model_id) == ProviderKind.OPENAI


class TestResolveApiModel:
    def test_known_aliases(self) -> None:
        assert resolve_api_model("claude-haiku-4.5") == "claude-3-5-haiku-latest"
        assert resolve_api_model("claude-sonnet-4") == "claude-sonnet-4-20250514"
        assert resolve_api_model("gemini-3-flash") == "gemini-2.0-flash"
        assert resolve_api_model("gemini-3-pro") == "gemini-2.0-pro"
        assert resolve_api_model("gpt-5.2") == "gpt-5.2"

    def test_unknown_id_passes_through(self) -> None:
        assert resolve_api_model("gpt-4o") == "gpt-4o"
        assert resolve_api_model("some-new-model") == "some-new-model"

    def test_deployed_widget_ids_stay_in_table(self) -> None:
        deployed = {
            "gpt-5.2",
            "gpt-5.2-mini",
            "claude-haiku-4.5",
            "claude-sonnet-4",
            "gemini-3-flash",
            "gemini-3-pro",
        }
        assert deployed <= set(MODEL_ALIASES)

    def test_every_alias_routes_to_a_known_family(self) -> None:
        families = {
            ProviderKind.OPENAI: ("gpt-", "o1"),
            ProviderKind.ANTHROPIC: ("claude-",),
            ProviderKind.GOOGLE: ("gemini-",),
        }
        for model_id in MODEL_ALIASES:
            assert model_id.startswith(families[select_provider(model_id)])
