"""Unit tests for structlog configuration and credential redaction."""

from __future__ import annotations

import json

from src.utils.logging import _redact_secrets, configure_logging, get_logger


class TestRedactSecrets:
    def test_credential_keys_masked(self) -> None:
        event = {
            "event": "chat_request",
            "api_key": "sk-live",
            "apiKey": "sk-widget",
            "Authorization": "Bearer abc",
            "x-api-key": "ant-key",
            "tenant_id": "acme",
        }
        result = _redact_secrets(None, "info", event)

        assert result["api_key"] == "***"
        assert result["apiKey"] == "***"
        assert result["Authorization"] == "***"
        assert result["x-api-key"] == "***"
        assert result["tenant_id"] == "acme"

    def test_empty_values_untouched(self) -> None:
        assert _redact_secrets(None, "info", {"api_key": None})["api_key"] is None


class TestConfigureLogging:
    def test_json_output_redacts(self, capsys) -> None:
        configure_logging(log_level="INFO", json_output=True)
        get_logger("test").info("provider_call", api_key="sk-secret", model="gpt-5.2")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        payload = json.loads(line)
        assert payload["event"] == "provider_call"
        assert payload["api_key"] == "***"
        assert payload["model"] == "gpt-5.2"
        assert "sk-secret" not in line
