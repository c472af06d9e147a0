"""
Tests for CLI module - commands, output modes and exit codes.

Commands:
    - generate: Mock plans without credentials, JSON output, exit codes
    - providers: Catalog listing
    - config: show / set-* commands persisting to the settings file
    - main callback: --version and bare invocation

Every test points LLM_RPA_CONFIG_DIR at a temporary directory, so no
real settings file is read or written.
"""

import json
import logging

import pytest
from typer.testing import CliRunner

from llm_rpa.cli import (
    EXIT_COMPLETE_FAILURE,
    EXIT_CONFIG_ERROR,
    EXIT_PARTIAL_FAILURE,
    EXIT_SUCCESS,
    app,
)
from llm_rpa.config.settings import LLMSettings
from llm_rpa.llm_runner.models import LLMRpaResponse, RpaActionConfig, SelectorInfo
from llm_rpa.utils.console import output_mode

# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def cli_runner():
    """Return CliRunner for testing Typer apps."""
    return CliRunner()


@pytest.fixture(autouse=True)
def config_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("LLM_RPA_CONFIG_DIR", str(tmp_path))
    return tmp_path


@pytest.fixture(autouse=True)
def restore_global_state():
    """The CLI reconfigures logging and the global output mode."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    original_format = output_mode.format
    original_quiet = output_mode.quiet

    yield

    root.handlers[:] = handlers
    root.setLevel(level)
    output_mode.format = original_format
    output_mode.quiet = original_quiet
    output_mode._json_buffer.clear()


def read_settings_file(config_dir) -> dict:
    return json.loads((config_dir / "llm-settings.json").read_text(encoding="utf-8"))


# ============================================================================
# generate
# ============================================================================


class TestGenerateCommand:
    def test_mock_plan_without_credentials(self, cli_runner):
        result = cli_runner.invoke(app, ["generate", "Click the login button"])

        assert result.exit_code == EXIT_SUCCESS
        assert "Example: Click the login button" in result.stdout
        assert "1/1 plans ready" in result.stdout

    def test_json_output(self, cli_runner):
        result = cli_runner.invoke(
            app,
            [
                "generate",
                "Click login",
                "Fill the form",
                "--url",
                "https://shop.example",
                "--format",
                "json",
            ],
        )

        assert result.exit_code == EXIT_SUCCESS
        data = json.loads(result.stdout)
        assert data["ready"] == 2
        assert data["total"] == 2
        assert [g["instruction"] for g in data["generations"]] == [
            "Click login",
            "Fill the form",
        ]
        assert data["generations"][0]["source_url"] == "https://shop.example"
        assert data["generations"][0]["actions"][0]["type"] == "wait"
        assert "No API key configured" in data["warning"]

    def test_quiet_output(self, cli_runner):
        result = cli_runner.invoke(app, ["generate", "Click", "--quiet"])

        assert result.exit_code == EXIT_SUCCESS
        fields = result.stdout.strip().splitlines()[-1].split("\t")
        assert fields[1:] == ["ready", "wait", "none", "", "1000"]

    def test_blank_instruction(self, cli_runner):
        result = cli_runner.invoke(app, ["generate", "   "])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_invalid_format(self, cli_runner):
        result = cli_runner.invoke(app, ["generate", "Click", "--format", "xml"])

        assert result.exit_code == EXIT_CONFIG_ERROR

    def test_all_failed(self, cli_runner, monkeypatch):
        async def failing(self, request):
            return LLMRpaResponse(
                configuration=[], status="error", message="API call failed: down"
            )

        monkeypatch.setattr(
            "llm_rpa.llm_runner.completion_client.CompletionClient.complete", failing
        )

        result = cli_runner.invoke(app, ["generate", "a", "b", "--format", "json"])

        assert result.exit_code == EXIT_COMPLETE_FAILURE
        data = json.loads(result.stdout)
        assert data["ready"] == 0
        assert data["generations"][0]["error"] == "API call failed: down"

    def test_partial_failure(self, cli_runner, monkeypatch):
        async def half(self, request):
            instruction = request.actions[0].instruction
            if instruction == "bad":
                return LLMRpaResponse(configuration=[], status="error", message="x")
            return LLMRpaResponse(
                configuration=[
                    RpaActionConfig(
                        name="Click",
                        type="click",
                        selector=SelectorInfo(type="css", value="#go"),
                    )
                ],
                status="success",
            )

        monkeypatch.setattr(
            "llm_rpa.llm_runner.completion_client.CompletionClient.complete", half
        )

        result = cli_runner.invoke(app, ["generate", "good", "bad", "--format", "json"])

        assert result.exit_code == EXIT_PARTIAL_FAILURE


# ============================================================================
# providers
# ============================================================================


class TestProvidersCommand:
    def test_json_lists_catalog(self, cli_runner):
        result = cli_runner.invoke(app, ["providers", "--format", "json"])

        assert result.exit_code == EXIT_SUCCESS
        rows = json.loads(result.stdout)["providers"]
        assert {r["provider"] for r in rows} == {
            "anthropic",
            "openai",
            "together",
            "custom",
        }
        selected = [r["model_id"] for r in rows if r["selected"]]
        assert selected == ["claude-3-5-sonnet-20240620"]

    def test_human_output(self, cli_runner):
        result = cli_runner.invoke(app, ["providers"])

        assert result.exit_code == EXIT_SUCCESS
        assert "gpt-4o" in result.stdout


# ============================================================================
# config
# ============================================================================


class TestConfigCommands:
    def test_set_provider_resets_model(self, cli_runner, config_dir):
        result = cli_runner.invoke(app, ["config", "set-provider", "openai"])

        assert result.exit_code == EXIT_SUCCESS
        raw = read_settings_file(config_dir)
        assert raw["selectedProvider"] == "openai"
        assert raw["selectedModelId"] == "gpt-4o"

    def test_set_provider_unknown(self, cli_runner, config_dir):
        result = cli_runner.invoke(app, ["config", "set-provider", "gemini"])

        assert result.exit_code == EXIT_CONFIG_ERROR
        assert not (config_dir / "llm-settings.json").exists()

    def test_set_model(self, cli_runner):
        cli_runner.invoke(app, ["config", "set-provider", "openai"])

        result = cli_runner.invoke(app, ["config", "set-model", "gpt-4o-mini"])

        assert result.exit_code == EXIT_SUCCESS
        assert LLMSettings().selected_model_id == "gpt-4o-mini"

    def test_set_key_and_show_masks_it(self, cli_runner):
        cli_runner.invoke(
            app, ["config", "set-key", "anthropic", "sk-ant-REDACTED"]
        )

        result = cli_runner.invoke(app, ["config", "show", "--format", "json"])

        settings = json.loads(result.stdout)["settings"]
        assert settings["anthropic_api_key"] == "****1234"
        assert settings["openai_api_key"] == "(not set)"
        assert "abcdefghijklmnop" not in result.stdout

    def test_set_endpoint(self, cli_runner, config_dir):
        result = cli_runner.invoke(
            app, ["config", "set-endpoint", "https://rpa.example/plan"]
        )

        assert result.exit_code == EXIT_SUCCESS
        assert read_settings_file(config_dir)["customEndpoint"] == (
            "https://rpa.example/plan"
        )

    def test_set_temperature_clamped(self, cli_runner, config_dir):
        result = cli_runner.invoke(app, ["config", "set-temperature", "5.0"])

        assert result.exit_code == EXIT_SUCCESS
        assert "clamped" in result.stdout
        assert read_settings_file(config_dir)["temperature"] == 2.0

    def test_set_max_tokens_clamped(self, cli_runner, config_dir):
        result = cli_runner.invoke(app, ["config", "set-max-tokens", "50"])

        assert result.exit_code == EXIT_SUCCESS
        assert read_settings_file(config_dir)["maxTokens"] == 100

    def test_show_defaults(self, cli_runner):
        result = cli_runner.invoke(app, ["config", "show", "--format", "json"])

        assert result.exit_code == EXIT_SUCCESS
        settings = json.loads(result.stdout)["settings"]
        assert settings["provider"] == "anthropic"
        assert settings["max_tokens"] == 4096
        assert settings["temperature"] == 0.7


# ============================================================================
# main callback
# ============================================================================


class TestMainCallback:
    def test_version(self, cli_runner):
        result = cli_runner.invoke(app, ["--version"])

        assert result.exit_code == EXIT_SUCCESS
        assert "llm-rpa" in result.stdout

    def test_no_command(self, cli_runner):
        result = cli_runner.invoke(app, [])

        assert result.exit_code == EXIT_SUCCESS
        assert "generate" in result.stdout
