"""
Rich console utilities for dual-mode CLI output.

All output functions adapt to the global output_mode setting:

Human Mode (--format text):
    - Rich spinners, tables and panels
    - ANSI colors and Unicode symbols

Agent Mode (--format json):
    - Structured JSON buffered and written to stdout once
    - No ANSI codes or spinners

Quiet Mode (--quiet):
    - Tab-separated values, no decorations

Examples:
    >>> from llm_rpa.utils.console import output_mode, spinner, success
    >>> output_mode.format = "text"
    >>> with spinner("Generating..."):
    ...     records = await orchestrator.join()
    >>> success("Plan ready")
"""

from __future__ import annotations

import json
import sys
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from llm_rpa.utils.time import format_relative, utc_timestamp

if TYPE_CHECKING:
    from llm_rpa.orchestrator.history import LLMExecutionState


class OutputMode:
    """
    Where and how CLI results are rendered.

    ``format`` is "text" for people at a terminal and "json" for scripts and
    agents. In json mode every helper below writes into a buffer that is
    emitted as one document by flush_json(). ``quiet`` trims text mode down
    to tab-separated rows.
    """

    FORMATS = ("text", "json")

    def __init__(self, format_type: str = "text", quiet: bool = False):
        if format_type not in self.FORMATS:
            raise ValueError(
                f"Invalid format: {format_type}. Expected one of {', '.join(self.FORMATS)}"
            )
        self.format = format_type
        self.quiet = quiet
        self._json_buffer: dict[str, Any] = {}

    def is_human(self) -> bool:
        return self.format == "text"

    def is_agent(self) -> bool:
        return self.format == "json"

    def add_json(self, key: str, value: Any) -> None:
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """Print the buffered document in json mode, then reset the buffer."""
        buffered, self._json_buffer = self._json_buffer, {}
        if buffered and self.is_agent():
            sys.stdout.write(json.dumps(buffered, indent=2) + "\n")
            sys.stdout.flush()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


@contextmanager
def spinner(message: str):
    """Show a spinner in human mode; silent otherwise."""
    if output_mode.is_human() and not output_mode.quiet:
        with console.status(f"[bold blue]{message}", spinner="dots") as status:
            yield status
    else:
        yield None


def success(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[green]✓[/green] {message}")
    elif output_mode.is_agent():
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)


def error(message: str) -> None:
    if output_mode.is_human():
        console_err.print(f"[red]✗[/red] {message}", style="red")
    elif output_mode.is_agent():
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)


def warning(message: str) -> None:
    if output_mode.is_human():
        console.print(f"[yellow]⚠[/yellow] {message}", style="yellow")
    elif output_mode.is_agent():
        output_mode.add_json("warning", message)


def info(message: str) -> None:
    if output_mode.is_human() and not output_mode.quiet:
        console.print(f"[blue]ℹ[/blue] {message}")


def record_to_dict(record: LLMExecutionState) -> dict[str, Any]:
    """Serialize a generation record for JSON output."""
    return {
        "id": record.id,
        "instruction": record.instruction,
        "status": record.status,
        "source_url": record.source_url,
        "timestamp_utc": utc_timestamp(record.timestamp),
        "error": record.error,
        "message": record.message,
        "actions": [
            step.model_dump(mode="json", by_alias=True)
            for step in record.generated_actions
        ],
    }


def _status_markup(status: str) -> str:
    colors = {"ready": "green", "completed": "cyan", "error": "red"}
    color = colors.get(status, "yellow")
    return f"[{color}]{status}[/{color}]"


def print_generation(record: LLMExecutionState) -> None:
    """
    Print one generation record with its action plan.

    Human mode: Panel with a numbered step table
    Agent mode: Appended to the "generations" JSON array
    Quiet mode: One tab-separated line per step
    """
    if output_mode.is_agent():
        generations = output_mode._json_buffer.setdefault("generations", [])
        generations.append(record_to_dict(record))
        return

    if output_mode.quiet:
        if not record.generated_actions:
            print(f"{record.id}\t{record.status}\t\t\t\t{record.error or ''}")
        for step in record.generated_actions:
            print(
                f"{record.id}\t{record.status}\t{step.type}\t"
                f"{step.selector.type}\t{step.selector.value or ''}\t{step.value or ''}"
            )
        return

    header = (
        f"[bold]Instruction:[/bold] {escape(record.instruction)}\n"
        f"[bold]Target:[/bold] {record.source_url}\n"
        f"[bold]Status:[/bold] {_status_markup(record.status)} "
        f"({format_relative(record.timestamp)})"
    )
    if record.message:
        header += f"\n[bold]Message:[/bold] {escape(record.message)}"
    if record.status == "error" and record.error and record.error != record.message:
        header += f"\n[bold red]Error:[/bold red] {escape(record.error)}"

    console.print(
        Panel(
            header,
            title=f"Generated {len(record.generated_actions)} actions",
            border_style="green" if record.generated_actions else "red",
            box=box.ROUNDED,
        )
    )

    if not record.generated_actions:
        return

    table = Table(box=box.SIMPLE)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Type", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Selector", style="magenta")
    table.add_column("Value", style="green")

    for index, step in enumerate(record.generated_actions, start=1):
        selector = step.selector.type
        if step.selector.value is not None:
            selector += f" = {step.selector.value}"
        table.add_row(
            str(index),
            escape(step.type.upper()),
            escape(step.name),
            escape(selector),
            escape(step.value or ""),
        )

    console.print(table)


def print_providers(rows: list[dict[str, Any]]) -> None:
    """
    Print the provider/model catalog.

    Expected dict keys: provider, display_name, model_id, model_name,
    context_window, selected (bool).
    """
    if output_mode.is_agent():
        output_mode.add_json("providers", rows)
        return

    if output_mode.quiet:
        for row in rows:
            print(f"{row['provider']}\t{row['model_id']}\t{row['context_window']}")
        return

    table = Table(title="LLM Providers", box=box.ROUNDED)
    table.add_column("Provider", style="yellow", no_wrap=True)
    table.add_column("Model", style="cyan")
    table.add_column("Name")
    table.add_column("Context", justify="right", style="blue")
    table.add_column("Selected", justify="center")

    for row in rows:
        table.add_row(
            row["display_name"],
            row["model_id"] or "(custom endpoint)",
            row["model_name"],
            f"{row['context_window']:,}" if row["context_window"] else "",
            "[green]✓[/green]" if row["selected"] else "",
        )

    console.print(table)


def print_settings(rows: dict[str, Any]) -> None:
    """Print settings as a two-column table (secrets must already be masked)."""
    if output_mode.is_agent():
        output_mode.add_json("settings", rows)
        return

    if output_mode.quiet:
        for key, value in rows.items():
            print(f"{key}\t{value}")
        return

    table = Table(title="LLM Settings", box=box.ROUNDED)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in rows.items():
        table.add_row(key, str(value))

    console.print(table)


def print_final_summary(ready: int, total: int) -> None:
    """
    Print the outcome of a batch of generations.

    Agent mode: Adds counts and flushes the JSON document
    Quiet mode: Silent
    """
    if output_mode.is_agent():
        output_mode.add_json("ready", ready)
        output_mode.add_json("total", total)
        output_mode.flush_json()
        return

    if output_mode.quiet:
        return

    if ready == total:
        console.print(f"[bold green]✓ {ready}/{total} plans ready[/bold green]")
    elif ready > 0:
        console.print(
            f"[bold yellow]⚠ {ready}/{total} plans ready[/bold yellow]"
        )
    else:
        console.print(f"[bold red]✗ 0/{total} plans ready[/bold red]")
