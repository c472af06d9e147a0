"""
CLI entrypoint for LLM RPA Planner.

Provides a dual-mode command-line interface with:
- Human-friendly output: Rich spinners, tables, panels, colored text
- Agent-friendly output: Structured JSON for automation
- Quiet mode: Tab-separated minimal output for shell scripts

Commands:
    generate: Generate browser action plans for instructions
    providers: List LLM providers and their models
    config: Show and change LLM settings

Exit codes:
    0: Success - every plan is ready
    1: Configuration or validation error (blank instruction, unknown provider)
    3: Partial failure (some generations failed)
    4: Complete failure (no generation succeeded)

Examples:
    # Human-friendly output
    llm-rpa generate "Search for laptops" --url https://shop.example

    # Agent-friendly JSON output (no spinners, no colors)
    llm-rpa generate "Click login" "Fill the form" --format json

    # Configure a provider
    llm-rpa config set-provider openai
    llm-rpa config set-key openai sk-...

Security:
    - API keys are stored in the settings file only
    - API keys are masked by `config show` and never logged
"""

import asyncio
from importlib.metadata import PackageNotFoundError, version as package_version

import typer
from rich.traceback import install as install_rich_traceback

from llm_rpa.config.settings import LLMSettings
from llm_rpa.exceptions import InstructionValidationError
from llm_rpa.llm_runner.catalog import (
    PROVIDERS,
    find_model,
    models_for,
    provider_display_name,
)
from llm_rpa.orchestrator.history import LLMExecutionState
from llm_rpa.orchestrator.orchestrator import ExecutionOrchestrator
from llm_rpa.orchestrator.targets import BrowserTargets
from llm_rpa.utils.console import (
    console,
    error,
    info,
    output_mode,
    print_final_summary,
    print_generation,
    print_providers,
    print_settings,
    spinner,
    success,
    warning,
)
from llm_rpa.utils.logging import setup_logging

# Rich tracebacks for uncaught errors, without locals (they may hold API keys)
install_rich_traceback(show_locals=False)


# Exit codes
EXIT_SUCCESS = 0  # All plans ready
EXIT_CONFIG_ERROR = 1  # Invalid settings or instruction
EXIT_PARTIAL_FAILURE = 3  # Some generations failed
EXIT_COMPLETE_FAILURE = 4  # All generations failed

# Create Typer app
app = typer.Typer(
    name="llm-rpa",
    help="Turn natural-language instructions into browser automation plans",
    add_completion=False,
)

config_app = typer.Typer(help="Show and change LLM settings")
app.add_typer(config_app, name="config")


def _configure_output(format: str, quiet: bool = False, verbose: bool = False) -> None:
    """Apply output flags; exits with EXIT_CONFIG_ERROR on an unknown format."""
    if format not in ("text", "json"):
        output_mode.format = "text"
        error(f"Invalid format: {format}. Must be 'text' or 'json'")
        raise typer.Exit(EXIT_CONFIG_ERROR)

    output_mode.format = format
    output_mode.quiet = quiet

    # JSON logs go to stderr; keep them out of human output unless verbose
    setup_logging(verbose=verbose, quiet_logs=output_mode.is_human())


def _require_provider(provider: str) -> str:
    provider = provider.strip().lower()
    if provider not in PROVIDERS:
        error(f"Unknown provider '{provider}'. Choose one of: {', '.join(PROVIDERS)}")
        output_mode.flush_json()
        raise typer.Exit(EXIT_CONFIG_ERROR)
    return provider


def _mask_secret(secret: str | None) -> str:
    """Show only the last four characters of a credential."""
    if not secret:
        return "(not set)"
    if len(secret) <= 8:
        return "****"
    return f"****{secret[-4:]}"


async def _generate_all(
    settings: LLMSettings, instructions: list[str], url: str | None
) -> list[LLMExecutionState]:
    """Run one generation per instruction concurrently and collect the records."""
    targets = BrowserTargets(url) if url else BrowserTargets()

    async with ExecutionOrchestrator(settings, targets=targets) as orchestrator:
        record_ids = [orchestrator.request_generation(text) for text in instructions]
        await orchestrator.join()
        return [orchestrator.get(record_id) for record_id in record_ids]


@app.command()
def generate(
    instructions: list[str] = typer.Argument(
        ...,
        help="One or more natural-language instructions",
    ),
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Page the plan targets (default: https://example.com)",
    ),
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output (tab-separated values)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Generate browser automation plans.

    Every instruction becomes its own generation; all of them run
    concurrently and are printed in the order given.

    Without an API key for the selected provider a placeholder plan is
    returned and no network request is made.

    Exit codes:
      0: All plans ready
      1: Blank instruction
      3: Some generations failed
      4: All generations failed
    """
    _configure_output(format, quiet, verbose)

    settings = LLMSettings()
    if not settings.has_valid_api_key():
        warning(
            f"No API key configured for {provider_display_name(settings.selected_provider)}; "
            "returning placeholder plans"
        )

    try:
        with spinner(f"Generating {len(instructions)} plan(s)..."):
            records = asyncio.run(_generate_all(settings, instructions, url))
    except InstructionValidationError as e:
        error(str(e))
        output_mode.flush_json()
        raise typer.Exit(EXIT_CONFIG_ERROR)

    for record in records:
        print_generation(record)

    ready = sum(1 for record in records if record.status == "ready")
    print_final_summary(ready, len(records))

    if ready == 0:
        raise typer.Exit(EXIT_COMPLETE_FAILURE)
    if ready < len(records):
        raise typer.Exit(EXIT_PARTIAL_FAILURE)
    raise typer.Exit(EXIT_SUCCESS)


@app.command()
def providers(
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Minimal output (tab-separated values)",
    ),
):
    """List LLM providers and their models."""
    _configure_output(format, quiet)

    settings = LLMSettings()
    rows = []
    for provider in PROVIDERS:
        models = models_for(provider)
        if not models:
            rows.append(
                {
                    "provider": provider,
                    "display_name": provider_display_name(provider),
                    "model_id": "",
                    "model_name": "User-supplied endpoint",
                    "context_window": None,
                    "selected": settings.selected_provider == provider,
                }
            )
            continue
        for model in models:
            rows.append(
                {
                    "provider": provider,
                    "display_name": provider_display_name(provider),
                    "model_id": model.id,
                    "model_name": model.name,
                    "context_window": model.context_window,
                    "selected": (
                        settings.selected_provider == provider
                        and settings.selected_model_id == model.id
                    ),
                }
            )

    print_providers(rows)
    output_mode.flush_json()


@config_app.command("show")
def config_show(
    format: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format: 'text' (human-friendly) or 'json' (machine-readable)",
    ),
):
    """Show current settings with API keys masked."""
    _configure_output(format)

    settings = LLMSettings()
    data = settings.data
    rows = {
        "provider": data.selected_provider,
        "model": data.selected_model_id or "(none)",
        "max_tokens": data.max_tokens,
        "temperature": data.temperature,
        "request_timeout": data.request_timeout,
        "max_attempts": data.max_attempts,
        "custom_endpoint": data.custom_endpoint or "(not set)",
    }
    for provider in PROVIDERS:
        rows[f"{provider}_api_key"] = _mask_secret(settings.api_key(provider))
    rows["settings_file"] = str(getattr(settings.store, "path", "(in memory)"))

    print_settings(rows)
    output_mode.flush_json()


@config_app.command("set-provider")
def config_set_provider(
    provider: str = typer.Argument(..., help="anthropic, openai, together or custom"),
):
    """Select the active provider (resets the model to its first catalog entry)."""
    _configure_output("text")
    provider = _require_provider(provider)

    settings = LLMSettings()
    settings.set_provider(provider)
    success(
        f"Provider set to {provider_display_name(provider)}"
        + (f" (model {settings.selected_model_id})" if settings.selected_model_id else "")
    )


@config_app.command("set-model")
def config_set_model(
    model_id: str = typer.Argument(..., help="Model identifier"),
):
    """Select the model for the active provider."""
    _configure_output("text")

    settings = LLMSettings()
    model = find_model(model_id)
    if model is None:
        warning(f"Model '{model_id}' is not in the catalog; using it as given")
    elif model.provider != settings.selected_provider:
        warning(
            f"Model '{model_id}' belongs to {provider_display_name(model.provider)}, "
            f"not {provider_display_name(settings.selected_provider)}"
        )

    settings.set_model(model_id)
    success(f"Model set to {model_id}")


@config_app.command("set-key")
def config_set_key(
    provider: str = typer.Argument(..., help="Provider the key belongs to"),
    key: str = typer.Argument(..., help="API key (empty string clears it)"),
):
    """Store an API key for a provider."""
    _configure_output("text")
    provider = _require_provider(provider)

    settings = LLMSettings()
    settings.set_api_key(provider, key)
    if settings.api_key(provider) is None:
        info(f"API key cleared for {provider_display_name(provider)}")
    else:
        success(f"API key saved for {provider_display_name(provider)}")


@config_app.command("set-endpoint")
def config_set_endpoint(
    endpoint: str = typer.Argument(..., help="URL of the custom plan endpoint"),
):
    """Set the endpoint used by the custom provider."""
    _configure_output("text")

    settings = LLMSettings()
    settings.set_custom_endpoint(endpoint)
    success(f"Custom endpoint set to {settings.custom_endpoint or '(not set)'}")


@config_app.command("set-temperature")
def config_set_temperature(
    temperature: float = typer.Argument(..., help="Sampling temperature (0.0-2.0)"),
):
    """Set the sampling temperature (clamped to 0.0-2.0)."""
    _configure_output("text")

    settings = LLMSettings()
    settings.set_temperature(temperature)
    if settings.temperature != temperature:
        warning(f"Temperature clamped to {settings.temperature}")
    success(f"Temperature set to {settings.temperature}")


@config_app.command("set-max-tokens")
def config_set_max_tokens(
    max_tokens: int = typer.Argument(..., help="Completion token limit (100-32000)"),
):
    """Set the completion token limit (clamped to 100-32000)."""
    _configure_output("text")

    settings = LLMSettings()
    settings.set_max_tokens(max_tokens)
    if settings.max_tokens != max_tokens:
        warning(f"Max tokens clamped to {settings.max_tokens}")
    success(f"Max tokens set to {settings.max_tokens}")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
    ),
):
    """
    LLM RPA Planner - turn instructions into browser automation plans.

    Use 'llm-rpa COMMAND --help' for detailed command documentation.
    """
    if version:
        console.print(f"[bold cyan]llm-rpa[/bold cyan] version {_read_version()}")
        raise typer.Exit(EXIT_SUCCESS)

    if ctx.invoked_subcommand is None:
        console.print("Try: llm-rpa generate \"Search for wireless headphones\"")
        console.print()
        console.print("[yellow]Run llm-rpa --help for every option[/yellow]")
        console.print()
        console.print("  generate   Generate browser automation plans")
        console.print("  providers  List LLM providers and models")
        console.print("  config     Show and change LLM settings")


def _read_version() -> str:
    """Installed distribution version, or the source default when running uninstalled."""
    try:
        return package_version("llm-rpa-planner")
    except PackageNotFoundError:
        return "0.1.0"


if __name__ == "__main__":
    app()
