"""PHP runtime discovery."""

from pathlib import Path

from ..constants import PROBE_TIMEOUT
from ..errors import CommandError
from .shell import run_command

LOADED_INI_PREFIX = "Loaded Configuration File:"


def parse_loaded_ini(output: str) -> Path | None:
    """Extract the loaded php.ini path from ``php --ini`` output."""
    for line in output.splitlines():
        if line.startswith(LOADED_INI_PREFIX):
            value = line[len(LOADED_INI_PREFIX) :].strip()
            if value and value != "(none)":
                return Path(value)
    return None


class PhpRuntime:
    def __init__(self, php: str = "php") -> None:
        self._php = php

    def ini_paths(self) -> list[Path]:
        """php.ini files to tune: the CLI one plus the Apache SAPI sibling if present."""
        result = run_command([self._php, "--ini"], timeout=PROBE_TIMEOUT)
        cli_ini = parse_loaded_ini(result.stdout)
        if cli_ini is None:
            raise CommandError("php --ini reports no loaded configuration file", result.args)
        paths = [cli_ini]
        if cli_ini.parent.name == "cli":
            apache_ini = cli_ini.parent.parent / "apache2" / cli_ini.name
            if apache_ini.exists():
                paths.append(apache_ini)
        return paths
