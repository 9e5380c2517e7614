"""Per-user crontab management."""

from ..constants import PROBE_TIMEOUT
from ..errors import CommandError
from .shell import run_command


class CrontabEditor:
    """Read and extend a user's crontab without clobbering other entries."""

    def entries(self, user: str) -> list[str]:
        """Return non-empty crontab lines; [] when the user has no crontab."""
        result = run_command(["crontab", "-u", user, "-l"], timeout=PROBE_TIMEOUT, check=False)
        if not result.ok:
            if "no crontab" in result.stderr.lower():
                return []
            raise CommandError(
                f"Cannot read crontab for {user}",
                result.args,
                exit_code=result.exit_code,
                stderr=result.stderr,
            )
        return [line for line in result.stdout.splitlines() if line.strip()]

    def ensure_entry(self, user: str, line: str) -> None:
        """Append the line unless an identical entry is already present."""
        current = self.entries(user)
        if line in current:
            return
        content = "\n".join([*current, line]) + "\n"
        run_command(["crontab", "-u", user, "-"], input_text=content)
