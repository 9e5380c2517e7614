"""Application CLI (Nextcloud occ) integration."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..constants import OCC_TIMEOUT, PROBE_TIMEOUT
from ..errors import CommandError
from .shell import CommandResult, run_command


@dataclass(frozen=True)
class InstallOptions:
    """Arguments for first-time application setup (maintenance:install)."""

    database_kind: str
    database_name: str
    database_user: str
    database_password: str
    data_dir: Path
    admin_user: str
    admin_password: str
    database_host: str = "localhost"


class OccClient:
    """Run occ subcommands as the web server user."""

    def __init__(self, web_root: Path, web_user: str = "www-data", php: str = "php") -> None:
        self._web_root = web_root
        self._web_user = web_user
        self._php = php

    def run(
        self,
        *args: str,
        timeout: int = OCC_TIMEOUT,
        check: bool = True,
        secrets: tuple[str, ...] = (),
    ) -> CommandResult:
        return run_command(
            [self._php, str(self._web_root / "occ"), *args],
            user=self._web_user,
            timeout=timeout,
            check=check,
            secrets=secrets,
        )

    def install(self, options: InstallOptions) -> None:
        self.run(
            "maintenance:install",
            "--no-interaction",
            "--database",
            options.database_kind,
            "--database-host",
            options.database_host,
            "--database-name",
            options.database_name,
            "--database-user",
            options.database_user,
            "--database-pass",
            options.database_password,
            "--admin-user",
            options.admin_user,
            "--admin-pass",
            options.admin_password,
            "--data-dir",
            str(options.data_dir),
            secrets=(options.database_password, options.admin_password),
        )

    def status(self) -> dict[str, Any]:
        """Return ``occ status`` as a dict (installed, version, maintenance...)."""
        result = self.run("status", "--output=json", timeout=PROBE_TIMEOUT)
        try:
            return json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise CommandError(f"Unexpected occ status output: {e}", result.args) from e

    def add_missing_indices(self) -> None:
        self.run("db:add-missing-indices", "--no-interaction")

    def convert_filecache_bigint(self) -> None:
        self.run("db:convert-filecache-bigint", "--no-interaction")

    def enable_app(self, name: str) -> None:
        self.run("app:enable", name)

    def enabled_apps(self) -> set[str]:
        result = self.run("app:list", "--output=json", timeout=PROBE_TIMEOUT)
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise CommandError(f"Unexpected occ app:list output: {e}", result.args) from e
        return set(data.get("enabled", {}))

    def get_system_value(self, key: str, index: int | None = None) -> str | None:
        """Read a system config value; None when the key is not set."""
        args = ["config:system:get", key]
        if index is not None:
            args.append(str(index))
        result = self.run(*args, timeout=PROBE_TIMEOUT, check=False)
        if result.exit_code == 1:
            return None
        if not result.ok:
            raise CommandError(
                "occ config:system:get failed",
                result.args,
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result.stdout.strip()

    def get_app_value(self, app: str, key: str) -> str | None:
        """Read an app config value; None when the key is not set."""
        result = self.run("config:app:get", app, key, timeout=PROBE_TIMEOUT, check=False)
        if result.exit_code == 1:
            return None
        if not result.ok:
            raise CommandError(
                "occ config:app:get failed",
                result.args,
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result.stdout.strip()

    def use_cron_background_jobs(self) -> None:
        self.run("background:cron")

    def set_system_value(
        self,
        key: str,
        value: str,
        index: int | None = None,
        value_type: str | None = None,
    ) -> None:
        args = ["config:system:set", key]
        if index is not None:
            args.append(str(index))
        args.append(f"--value={value}")
        if value_type:
            args.append(f"--type={value_type}")
        self.run(*args)
