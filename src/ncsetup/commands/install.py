"""Install command: run the provisioning pipeline."""

from pathlib import Path

import typer

from ..core import (
    Toolbox,
    access_url,
    build_steps,
    render_report,
    report_data,
    run_pipeline,
    run_preflight,
    save_run,
)
from ..errors import ConfigError, PreflightError
from ..output import get_output_context
from ..services import resolve_credentials
from ._config import load_or_exit
from .plan import show_plan


def install(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (default: ./ncsetup.toml)",
    ),
    domain: str | None = typer.Option(
        None,
        "--domain",
        "-d",
        help="Domain or IP to serve on (default: primary IP address)",
    ),
    admin_user: str | None = typer.Option(None, "--admin-user", help="Administrator name"),
    admin_password: str | None = typer.Option(
        None, "--admin-password", help="Administrator password (default: generated)"
    ),
    db_password: str | None = typer.Option(
        None, "--db-password", help="Database user password (default: generated)"
    ),
    db_root_password: str | None = typer.Option(
        None, "--db-root-password", help="Database root password (default: generated)"
    ),
    skip_preflight: bool = typer.Option(
        False,
        "--skip-preflight",
        help="Skip the root and connectivity checks",
    ),
) -> None:
    """Provision the host: web server, PHP, database and the application."""
    ctx = get_output_context()
    config = load_or_exit(
        config_path,
        server__domain=domain,
        admin__user=admin_user,
        admin__password=admin_password,
        database__password=db_password,
        database__root_password=db_root_password,
    )

    if ctx.dry_run:
        ctx.print("[cyan][DRY RUN][/cyan] No changes will be made")
        show_plan(config)
        return

    try:
        if skip_preflight:
            host, config, warnings = run_preflight(
                config, require_root=False, check_network=False
            )
        else:
            host, config, warnings = run_preflight(config)
    except PreflightError as e:
        ctx.error(str(e))
        raise typer.Exit(2) from None
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(3) from None

    credentials = resolve_credentials(config)
    steps = build_steps(config, Toolbox.local(config), credentials)

    ctx.print(f"\n[bold]Provisioning {host.hostname} for {config.server.domain}[/bold]\n")
    run = run_pipeline(
        steps,
        host=host,
        access_url=access_url(config),
        credentials=credentials,
        warnings=warnings,
        on_step=lambda result: ctx.step_progress(result, len(steps)),
    )
    run.access_url = access_url(config, run)
    save_run(config.runs_dir, run)

    if ctx.json_mode:
        ctx.print_json(report_data(run))
    else:
        ctx.print("")
        ctx.print_plain(render_report(run))

    failed = run.failed_step
    if failed is not None:
        if not ctx.json_mode:
            ctx.error(f"Step {failed.name} failed")
        raise typer.Exit(run.exit_code)
