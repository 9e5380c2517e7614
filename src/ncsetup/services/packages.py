"""APT package installer."""

from collections.abc import Collection

from ..constants import PACKAGE_TIMEOUT, PROBE_TIMEOUT
from .shell import run_command

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class AptInstaller:
    """Install and query Debian packages through apt-get and dpkg-query."""

    def update(self) -> None:
        run_command(["apt-get", "update"], timeout=PACKAGE_TIMEOUT, env=APT_ENV)

    def upgrade(self) -> None:
        run_command(["apt-get", "upgrade", "-y"], timeout=PACKAGE_TIMEOUT, env=APT_ENV)

    def install(self, names: Collection[str]) -> None:
        """Install packages. Already-installed packages are left untouched."""
        if not names:
            return
        run_command(
            ["apt-get", "install", "-y", *sorted(names)],
            timeout=PACKAGE_TIMEOUT,
            env=APT_ENV,
        )

    def is_installed(self, name: str) -> bool:
        """Return True if dpkg reports the package as installed.

        Raises:
            CommandError: If dpkg-query cannot be run
        """
        result = run_command(
            ["dpkg-query", "-W", "-f=${Status}", name],
            timeout=PROBE_TIMEOUT,
            check=False,
        )
        return result.ok and "install ok installed" in result.stdout
