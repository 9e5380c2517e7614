"""Init command implementation."""

from pathlib import Path

import typer

from ..config import write_config_template
from ..constants import DEFAULT_CONFIG_NAME
from ..output import get_output_context


def init(
    path: Path = typer.Option(
        Path(DEFAULT_CONFIG_NAME),
        "--path",
        "-p",
        help="Where to write the configuration template",
    ),
) -> None:
    """Write a configuration template."""
    ctx = get_output_context()

    if path.exists():
        ctx.warning(f"Config already exists: {path}")
        return

    if ctx.dry_run:
        ctx.print(f"[cyan][DRY RUN][/cyan] Would create config: {path}")
        return

    write_config_template(path)
    ctx.success(f"Created config template: {path}", {"path": str(path)})
    ctx.print("Edit server.domain before running: ncsetup install")
