"""Plan command: show what install would do on this host."""

from pathlib import Path

import typer

from ..config import ProvisionConfig
from ..core import Toolbox, build_steps, plan_pipeline, run_preflight
from ..models import ProbeResult
from ..output import get_output_context
from ..services import resolve_credentials
from ._config import load_or_exit

_STATES = {
    None: ("n/a", "dim"),
    ProbeResult.TRUE: ("done", "green"),
    ProbeResult.FALSE: ("todo", "yellow"),
    ProbeResult.UNKNOWN: ("unknown", "red"),
}


def show_plan(config: ProvisionConfig) -> None:
    """Print each step with its current precondition state.

    Only the current host is inspected; steps whose preconditions depend on
    earlier actions may change state once those actions run.
    """
    ctx = get_output_context()
    _, resolved, warnings = run_preflight(config, require_root=False, check_network=False)
    toolbox = Toolbox.local(resolved)
    steps = build_steps(resolved, toolbox, resolve_credentials(resolved))
    plan = plan_pipeline(steps)

    if ctx.json_mode:
        ctx.print_json(
            {
                "domain": resolved.server.domain,
                "steps": [
                    {
                        "name": step.name,
                        "optional": step.optional,
                        "state": _STATES[state][0],
                    }
                    for step, state in plan
                ],
                "warnings": warnings,
            }
        )
        return

    ctx.print(f"\n[bold]Plan for {resolved.server.domain}[/bold]\n")
    for index, (step, state) in enumerate(plan, start=1):
        label, style = _STATES[state]
        optional = " [dim](optional)[/dim]" if step.optional else ""
        ctx.print(f"  {index:2}. [{style}]{label:<7}[/{style}] {step.name}{optional}")
        ctx.print(f"      [dim]{step.description}[/dim]")
    todo = sum(1 for _, state in plan if state is not None and not state.satisfied)
    ctx.print(f"\n{todo} of {len(plan)} steps would run")
    for warning in warnings:
        ctx.warning(warning)


def plan(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: ./ncsetup.toml)",
    ),
) -> None:
    """List the install steps and whether each is already satisfied."""
    show_plan(load_or_exit(config_path))
