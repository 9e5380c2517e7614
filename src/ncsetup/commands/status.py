"""Status command: last run and live service state."""

from pathlib import Path
from typing import Any

import typer
from rich.markup import escape

from ..core import Toolbox, latest_run
from ..errors import ProvisionError
from ..models import StepOutcome
from ..output import get_output_context
from ._config import load_or_exit


def status(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: ./ncsetup.toml)",
    ),
) -> None:
    """Show the last install run and whether the stack is up."""
    ctx = get_output_context()
    config = load_or_exit(config_path)
    toolbox = Toolbox.local(config)

    run = latest_run(config.runs_dir)
    services = {
        name: toolbox.probe.service_active(name).value
        for name in (config.web.service, config.packages.database_service)
    }
    app: dict[str, Any] | None = None
    if toolbox.probe.file_exists(config.app_config_path).satisfied:
        try:
            app = toolbox.app.status()
        except ProvisionError as e:
            ctx.warning(f"Cannot query application status: {e}")

    if ctx.json_mode:
        ctx.print_json(
            {
                "last_run": run.model_dump(mode="json", exclude={"credentials"}) if run else None,
                "services": services,
                "application": app,
            }
        )
        return

    if run is None:
        ctx.print("[yellow]No runs recorded. Start with: ncsetup install[/yellow]")
    else:
        ctx.print(f"\n[bold]Last run:[/bold] {run.run_id}")
        ctx.print(f"[bold]URL:[/bold] {run.access_url}")
        failed = run.failed_step
        if failed is not None:
            reason = escape(failed.reason or "")
            ctx.print(f"[red]Status: FAILED at {failed.name}[/red]: {reason}")
        elif run.succeeded:
            ctx.print("[green]Status: COMPLETE[/green]")
        else:
            ctx.print("[yellow]Status: INCOMPLETE[/yellow]")
        ctx.print(
            f"Steps: {run.count(StepOutcome.SUCCEEDED)} applied, "
            f"{run.count(StepOutcome.SKIPPED)} skipped, "
            f"{run.count(StepOutcome.FAILED)} failed"
        )

    ctx.print("\n[bold]Services:[/bold]")
    for name, state in services.items():
        style = "green" if state == "true" else "red"
        label = {"true": "active", "false": "inactive"}.get(state, "unknown")
        ctx.print(f"  {name}: [{style}]{label}[/{style}]")

    if app is not None:
        ctx.print(
            f"\n[bold]Application:[/bold] version {app.get('versionstring', '?')}, "
            f"installed={app.get('installed')}, maintenance={app.get('maintenance')}"
        )
    else:
        ctx.print("\n[bold]Application:[/bold] not installed")
