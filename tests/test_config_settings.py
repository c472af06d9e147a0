"""
Tests for config.schema and config.settings modules.

Tests cover:
- Defaults and clamping of numeric settings
- Provider normalization and model reset on provider switch
- camelCase persistence format
- JSON file store: missing, corrupt and unwritable files
- Every setter persists immediately
"""

import json
import logging

import pytest

from llm_rpa.config.constants import CONFIG_DIR_ENV_VAR
from llm_rpa.config.schema import LLMSettingsData
from llm_rpa.config.settings import (
    InMemorySettingsStore,
    JsonFileSettingsStore,
    LLMSettings,
    default_settings_path,
)


@pytest.fixture
def store():
    return InMemorySettingsStore()


@pytest.fixture
def settings(store):
    return LLMSettings(store)


class TestLLMSettingsData:
    """Test suite for the settings schema."""

    def test_defaults(self):
        data = LLMSettingsData()

        assert data.selected_provider == "anthropic"
        assert data.selected_model_id == "claude-3-5-sonnet-20240620"
        assert data.max_tokens == 4096
        assert data.temperature == 0.7
        assert data.request_timeout == 30.0
        assert data.max_attempts == 1
        assert data.custom_endpoint == ""

    @pytest.mark.parametrize(
        "given,expected", [(50, 100), (1_000_000, 32000), (2048, 2048)]
    )
    def test_max_tokens_clamped(self, given, expected):
        assert LLMSettingsData(max_tokens=given).max_tokens == expected

    @pytest.mark.parametrize("given,expected", [(-1, 0.0), (5.0, 2.0), (1.1, 1.1)])
    def test_temperature_clamped(self, given, expected):
        assert LLMSettingsData(temperature=given).temperature == expected

    def test_request_timeout_and_attempts_clamped(self):
        data = LLMSettingsData(request_timeout=0, max_attempts=99)

        assert data.request_timeout == 1.0
        assert data.max_attempts == 5

    def test_assignment_is_clamped(self):
        data = LLMSettingsData()
        data.max_tokens = 10

        assert data.max_tokens == 100

    @pytest.mark.parametrize(
        "given,expected",
        [("OPENAI", "openai"), (" together ", "together"), ("gemini", "anthropic")],
    )
    def test_provider_normalized(self, given, expected):
        assert LLMSettingsData(selected_provider=given).selected_provider == expected

    def test_camel_case_round_trip(self):
        data = LLMSettingsData(selected_provider="openai", openai_api_key="sk-x")

        dumped = data.model_dump(by_alias=True)

        assert dumped["selectedProvider"] == "openai"
        assert dumped["openaiApiKey"] == "sk-x"
        assert LLMSettingsData.model_validate(dumped) == data

    def test_unknown_keys_ignored(self):
        data = LLMSettingsData.model_validate({"maxTokens": 500, "theme": "dark"})

        assert data.max_tokens == 500

    def test_api_key_for(self):
        data = LLMSettingsData(together_api_key="tg")

        assert data.api_key_for("together") == "tg"
        assert data.api_key_for("custom") == ""


class TestLLMSettings:
    """Test suite for the settings object."""

    def test_loads_defaults_lazily(self, settings, store):
        assert settings.selected_provider == "anthropic"
        assert store.save_count == 0

    def test_set_provider_resets_model(self, settings):
        settings.set_provider("openai")

        assert settings.selected_provider == "openai"
        assert settings.selected_model_id == "gpt-4o"

    def test_set_provider_together(self, settings):
        settings.set_provider("together")

        assert settings.selected_model_id == (
            "meta-llama/Meta-Llama-3.1-405B-Instruct-Turbo"
        )

    def test_set_custom_provider_clears_model(self, settings):
        settings.set_provider("custom")

        assert settings.selected_model_id == ""

    def test_clamping_through_setters(self, settings):
        settings.set_max_tokens(50)
        assert settings.max_tokens == 100

        settings.set_max_tokens(1_000_000)
        assert settings.max_tokens == 32000

        settings.set_temperature(-1)
        assert settings.temperature == 0.0

        settings.set_temperature(5.0)
        assert settings.temperature == 2.0

    def test_every_setter_persists(self, settings, store):
        settings.set_provider("openai")
        settings.set_model("gpt-4o-mini")
        settings.set_api_key("openai", "sk-1")
        settings.set_custom_endpoint("https://rpa.example")
        settings.set_max_tokens(1000)
        settings.set_temperature(0.5)
        settings.set_request_timeout(60)
        settings.set_max_attempts(2)

        assert store.save_count == 8
        assert store.data.selected_model_id == "gpt-4o-mini"
        assert store.data.max_attempts == 2

    def test_api_key_blank_is_none(self, settings):
        settings.set_api_key("openai", "   ")

        assert settings.api_key("openai") is None

    def test_api_key_trimmed(self, settings):
        settings.set_api_key("openai", "  sk-abc  ")

        assert settings.api_key("openai") == "sk-abc"

    def test_has_valid_api_key_tracks_active_provider(self, settings):
        settings.set_api_key("openai", "sk-abc")
        assert not settings.has_valid_api_key()

        settings.set_provider("openai")
        assert settings.has_valid_api_key()

    def test_api_key_set_is_not_logged(self, settings, caplog):
        caplog.set_level(logging.DEBUG)

        settings.set_api_key("anthropic", "sk-ant-hidden-value")

        assert "sk-ant-hidden-value" not in caplog.text

    def test_snapshot_is_detached(self, settings):
        snapshot = settings.snapshot()
        settings.set_max_tokens(500)

        assert snapshot.max_tokens == 4096

    def test_reload_from_store(self, store):
        first = LLMSettings(store)
        first.set_provider("openai")

        second = LLMSettings(store)

        assert second.selected_provider == "openai"


class TestJsonFileSettingsStore:
    """Test suite for file persistence."""

    def test_default_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv(CONFIG_DIR_ENV_VAR, str(tmp_path))

        assert default_settings_path() == tmp_path / "llm-settings.json"

    def test_default_path_without_env(self, monkeypatch):
        monkeypatch.delenv(CONFIG_DIR_ENV_VAR, raising=False)

        path = default_settings_path()

        assert path.parts[-3:] == (".llm-rpa", "config", "llm-settings.json")

    def test_missing_file_yields_none(self, tmp_path):
        assert JsonFileSettingsStore(tmp_path / "none.json").load() is None

    def test_save_creates_directories_and_uses_camel_case(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "llm-settings.json"
        settings = LLMSettings(JsonFileSettingsStore(path))

        settings.set_provider("openai")

        raw = json.loads(path.read_text(encoding="utf-8"))
        assert raw["selectedProvider"] == "openai"
        assert raw["selectedModelId"] == "gpt-4o"
        assert raw["maxTokens"] == 4096

    def test_round_trip(self, tmp_path):
        path = tmp_path / "llm-settings.json"
        LLMSettings(JsonFileSettingsStore(path)).set_temperature(1.3)

        reloaded = LLMSettings(JsonFileSettingsStore(path))

        assert reloaded.temperature == 1.3

    def test_corrupt_file_yields_defaults(self, tmp_path, caplog):
        caplog.set_level(logging.WARNING)
        path = tmp_path / "llm-settings.json"
        path.write_text('{"anthropicApiKey": "sk-ant-leak", ', encoding="utf-8")

        settings = LLMSettings(JsonFileSettingsStore(path))

        assert settings.selected_provider == "anthropic"
        assert "Failed to read settings" in caplog.text
        assert "sk-ant-leak" not in caplog.text

    def test_invalid_utf8_yields_defaults(self, tmp_path, caplog):
        caplog.set_level(logging.WARNING)
        path = tmp_path / "llm-settings.json"
        path.write_bytes(b'{"maxTokens": 500, "x": "\xff\xfe"}')

        settings = LLMSettings(JsonFileSettingsStore(path))

        assert settings.max_tokens == 4096
        assert "UnicodeDecodeError" in caplog.text

    def test_invalid_types_yield_defaults(self, tmp_path):
        path = tmp_path / "llm-settings.json"
        path.write_text('{"maxTokens": "lots"}', encoding="utf-8")

        assert JsonFileSettingsStore(path).load() is None

    def test_unknown_provider_in_file_falls_back(self, tmp_path):
        path = tmp_path / "llm-settings.json"
        path.write_text('{"selectedProvider": "GEMINI"}', encoding="utf-8")

        data = JsonFileSettingsStore(path).load()

        assert data.selected_provider == "anthropic"

    def test_save_failure_is_swallowed(self, tmp_path, caplog):
        caplog.set_level(logging.WARNING)
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file", encoding="utf-8")
        settings = LLMSettings(JsonFileSettingsStore(blocker / "llm-settings.json"))

        settings.set_max_tokens(2000)

        assert settings.max_tokens == 2000
        assert "Failed to save settings" in caplog.text
