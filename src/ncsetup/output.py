"""Terminal and JSON output for ncsetup commands.

Commands print through one OutputContext so that ``--json`` turns every
human-readable line (step progress, warnings, the final report) off and
leaves a single JSON document on stdout.
"""

import json
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.markup import escape

from .models import StepOutcome, StepResult

_MARKS = {
    StepOutcome.SUCCEEDED: "[green]✓[/green]",
    StepOutcome.SKIPPED: "[dim]-[/dim]",
    StepOutcome.FAILED: "[red]✗[/red]",
}


@dataclass
class OutputContext:
    """Where and how a command reports to the operator."""

    console: Console
    json_mode: bool = False
    dry_run: bool = False

    def print(self, message: str, style: str | None = None) -> None:
        """Print Rich markup unless in JSON mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_plain(self, text: str) -> None:
        """Print text verbatim, e.g. the run report with its [ok]/[FAIL] markers."""
        if not self.json_mode:
            self.console.print(text, markup=False, highlight=False)

    def print_json(self, data: dict[str, Any]) -> None:
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def step_progress(self, result: StepResult, total: int) -> None:
        """One live line per finished pipeline step: mark, position, name."""
        line = f"{_MARKS[result.outcome]} [{result.index + 1}/{total}] {escape(result.name)}"
        if result.outcome is StepOutcome.SKIPPED and result.detail:
            line += f" [dim]({escape(result.detail)})[/dim]"
        self.print(line)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Report a fatal problem (failed step, preflight, bad config)."""
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {escape(message)}[/red]")

    def warning(self, message: str) -> None:
        if not self.json_mode:
            self.console.print(f"[yellow]Warning: {escape(message)}[/yellow]")

    def success(self, message: str, data: dict[str, Any] | None = None) -> None:
        if self.json_mode:
            self.print_json({"success": message, **(data or {})})
        else:
            self.console.print(f"[green]{message}[/green]")


# Set once per invocation by the cli.py main callback
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Return the invocation's context, or a plain stdout one outside the CLI."""
    if _ctx is None:
        return OutputContext(Console())
    return _ctx


def set_output_context(ctx: OutputContext) -> None:
    global _ctx
    _ctx = ctx
