"""Service manager backed by systemctl."""

from ..constants import PROBE_TIMEOUT
from .shell import run_command


class SystemdServiceManager:
    """Restart, reload and query systemd units."""

    def restart(self, name: str) -> None:
        run_command(["systemctl", "restart", name])

    def reload(self, name: str) -> None:
        run_command(["systemctl", "reload", name])

    def is_active(self, name: str) -> bool:
        """Return True if the unit is active.

        ``systemctl is-active`` exits non-zero for inactive, failed and
        unknown units; all of those count as not active.
        """
        result = run_command(
            ["systemctl", "is-active", "--quiet", name], timeout=PROBE_TIMEOUT, check=False
        )
        return result.ok
