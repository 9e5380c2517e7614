"""ncsetup CLI: provision a self-hosted groupware server on one host."""

import typer

from ncsetup import __version__

from .commands import init, install, plan, status
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"ncsetup {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="ncsetup",
    help="Idempotent Nextcloud provisioning for a single Ubuntu host",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v shows commands, -vv adds timestamps)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Show what would be done without changing the host",
    ),
) -> None:
    """ncsetup - provision a web server, PHP, MariaDB and Nextcloud."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output, dry_run=dry_run))


app.command()(init)
app.command()(install)
app.command()(plan)
app.command()(status)


if __name__ == "__main__":
    app()
