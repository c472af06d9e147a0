"""
Tests for llm_runner.catalog module.

Tests cover:
- Provider set and ordering
- Per-provider model catalogs
- Model lookup across providers
- Display names
"""

import pytest

from llm_rpa.llm_runner.catalog import (
    ANTHROPIC_MODELS,
    DEFAULT_PROVIDER,
    PROVIDERS,
    LLMModel,
    find_model,
    models_for,
    provider_display_name,
)


class TestProviders:
    """Test suite for the provider set."""

    def test_provider_order(self):
        assert PROVIDERS == ("anthropic", "openai", "together", "custom")

    def test_default_provider(self):
        assert DEFAULT_PROVIDER == "anthropic"

    @pytest.mark.parametrize(
        "provider,expected",
        [
            ("anthropic", "Anthropic"),
            ("openai", "OpenAI"),
            ("together", "Together AI"),
            ("custom", "Custom API"),
        ],
    )
    def test_display_names(self, provider, expected):
        assert provider_display_name(provider) == expected

    def test_unknown_display_name_falls_back_to_id(self):
        assert provider_display_name("mystery") == "mystery"


class TestModelsFor:
    """Test suite for models_for()."""

    def test_anthropic_catalog_order(self):
        ids = [m.id for m in models_for("anthropic")]

        assert ids == [
            "claude-opus-4-20250514",
            "claude-sonnet-4-20250514",
            "claude-3-7-sonnet-20250219",
            "claude-3-5-sonnet-20240620",
            "claude-3-5-haiku-20241022",
        ]

    def test_anthropic_context_windows(self):
        assert all(m.context_window == 200000 for m in models_for("anthropic"))

    def test_openai_catalog(self):
        models = models_for("openai")

        assert [m.id for m in models] == [
            "gpt-4o",
            "gpt-4o-mini",
            "gpt-4-turbo",
            "gpt-3.5-turbo",
        ]
        assert models[-1].context_window == 16000

    def test_together_catalog(self):
        models = models_for("together")

        assert models[0].id == "meta-llama/Meta-Llama-3.1-405B-Instruct-Turbo"
        assert models[2].context_window == 65536

    def test_custom_has_no_models(self):
        assert models_for("custom") == []

    def test_unknown_provider_has_no_models(self):
        assert models_for("nope") == []

    def test_returns_a_copy(self):
        """Mutating the returned list must not affect the catalog."""
        models = models_for("anthropic")
        models.clear()

        assert len(models_for("anthropic")) == len(ANTHROPIC_MODELS)

    def test_every_model_belongs_to_its_provider(self):
        for provider in PROVIDERS:
            for model in models_for(provider):
                assert model.provider == provider


class TestFindModel:
    """Test suite for find_model()."""

    def test_find_anthropic_model(self):
        model = find_model("claude-3-5-haiku-20241022")

        assert model == LLMModel(
            "claude-3-5-haiku-20241022", "Claude 3.5 Haiku", "anthropic", 200000
        )

    def test_find_together_model(self):
        model = find_model("mistralai/Mixtral-8x22B-Instruct-v0.1")

        assert model is not None
        assert model.provider == "together"

    def test_unknown_model(self):
        assert find_model("gpt-99") is None

    def test_models_are_frozen(self):
        model = find_model("gpt-4o")

        with pytest.raises(AttributeError):
            model.id = "changed"
