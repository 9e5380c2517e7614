"""Subprocess runner shared by all host collaborators."""

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ..constants import COMMAND_TIMEOUT
from ..errors import CommandError

logger = logging.getLogger(__name__)

REDACTED = "******"


@dataclass(frozen=True)
class CommandResult:
    """Completed process output."""

    args: list[str]
    exit_code: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


def redact(args: Sequence[str], secrets: Sequence[str] = ()) -> list[str]:
    """Replace secret values (and substrings containing them) in an argument list."""
    hidden = [s for s in secrets if s]
    redacted = []
    for arg in args:
        for secret in hidden:
            if secret in arg:
                arg = arg.replace(secret, REDACTED)
        redacted.append(arg)
    return redacted


def run_command(
    args: Sequence[str],
    *,
    timeout: int | None = None,
    check: bool = True,
    input_text: str | None = None,
    env: Mapping[str, str] | None = None,
    user: str | None = None,
    secrets: Sequence[str] = (),
) -> CommandResult:
    """Run a command and return its output.

    Args:
        args: Command and arguments (never passed through a shell)
        timeout: Timeout in seconds (default: COMMAND_TIMEOUT)
        check: Raise CommandError on non-zero exit
        input_text: Text fed to stdin
        env: Extra environment variables merged over the current environment
        user: Run as this user via sudo -u
        secrets: Values to redact from logs and error messages

    Returns:
        CommandResult with exit code and captured output

    Raises:
        CommandError: If the command times out, is not found, or (with
            check=True) exits non-zero
    """
    timeout = timeout or COMMAND_TIMEOUT
    argv = list(args)
    if user:
        argv = ["sudo", "-u", user, *argv]
    shown = redact(argv, secrets)
    logger.debug("$ %s", " ".join(shown))

    full_env = {**os.environ, **env} if env else None

    try:
        result = subprocess.run(
            argv,
            input=input_text,
            capture_output=True,
            text=True,
            timeout=timeout,
            env=full_env,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"Command timed out after {timeout} seconds", shown) from e
    except FileNotFoundError:
        raise CommandError(f"Command not found: {argv[0]}", shown) from None

    completed = CommandResult(
        args=shown,
        exit_code=result.returncode,
        stdout=result.stdout,
        stderr=redact([result.stderr], secrets)[0],
    )
    if check and not completed.ok:
        raise CommandError(
            f"{args[0]} exited with code {completed.exit_code}",
            shown,
            exit_code=completed.exit_code,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
    return completed
