"""Step model for provisioning steps.

A step is one named unit of provisioning work. It is defined once when
the pipeline is assembled and never mutated afterwards.
"""

from collections.abc import Callable
from dataclasses import dataclass

from .probe import ProbeResult


@dataclass(frozen=True)
class Step:
    """One unit of provisioning work.

    Attributes:
        name: Unique identifier (e.g. "install-database").
        description: One-line human-readable summary.
        precondition: Host query; TRUE means the step is already satisfied.
        action: Side-effecting operation. Raises on failure.
        optional: If True, a failed action does not abort the pipeline.
        applies: Optional applicability check; False records the step as
            skipped ("not applicable") without consulting the precondition.

    Contract:
        After a successful action, the precondition must evaluate TRUE on
        the next run.

    Example:
        >>> step = Step(
        ...     name="install-database",
        ...     description="Install MariaDB server",
        ...     precondition=lambda: probe.package_installed("mariadb-server"),
        ...     action=lambda: packages.install(["mariadb-server"]),
        ... )
    """

    name: str
    description: str
    precondition: Callable[[], ProbeResult]
    action: Callable[[], None]
    optional: bool = False
    applies: Callable[[], bool] | None = None
