"""Error types for ncsetup."""


class ProvisionError(Exception):
    """Base exception for provisioning errors."""


class ConfigError(ProvisionError):
    """Raised when the configuration file cannot be read or validated."""


class PreflightError(ProvisionError):
    """Raised when the host fails a fatal pre-run check."""


class TemplateError(ProvisionError):
    """Raised when a config template is unknown or cannot be rendered."""


class CommandError(ProvisionError):
    """Raised when an external command fails or cannot be executed.

    Attributes:
        command: Argument list that was executed (secrets redacted).
        exit_code: Process exit code, or None if the process never ran.
        stdout: Captured standard output.
        stderr: Captured standard error.
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = command or []
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr

    def __str__(self) -> str:
        message = super().__str__()
        detail = self.stderr.strip() or self.stdout.strip()
        if detail:
            return f"{message}: {detail}"
        return message
