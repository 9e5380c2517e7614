"""Logging for ncsetup runs.

Step transitions log at INFO. Each external command logs at DEBUG with
secrets redacted. Records go to stderr through Rich so stdout stays free for
``--json`` output.
"""

import logging
from enum import IntEnum
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(IntEnum):
    """Levels selected by -q, the default, and -v."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO | None = None,
    debug: bool = False,
) -> Console:
    """Route ncsetup log records to a Rich console.

    Args:
        verbosity: Number of -v flags (1 shows commands, 2 adds times and paths)
        quiet: Only warnings and errors, e.g. for cron-driven re-runs
        no_color: Disable colored output
        stream: Output stream for logs (default: stderr at write time)
        debug: Enable debug logging with timestamps and source paths

    Returns:
        Console also used by OutputContext for progress and the report

    Note:
        Flag precedence: quiet > debug > verbosity.
    """
    if quiet:
        level = LogLevel.QUIET
    elif debug or verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    console = Console(
        file=stream,
        stderr=stream is None,
        force_terminal=not no_color,
        no_color=no_color,
    )

    handler = RichHandler(
        console=console,
        show_time=debug or verbosity >= 2,
        show_path=debug or verbosity >= 2,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return console
