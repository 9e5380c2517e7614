"""Host State Probe: read-only queries against the target machine.

Every predicate returns a ProbeResult. Anything that prevents a definite
answer (permission denied, missing tool, timeout) yields UNKNOWN, which the
execution engine treats as "not satisfied".
"""

import logging
import pwd
import stat
from collections.abc import Callable
from pathlib import Path
from typing import Any, Protocol

from ..errors import ProvisionError
from ..models import ProbeResult
from .packages import AptInstaller
from .systemd import SystemdServiceManager

logger = logging.getLogger(__name__)


class HostProbe(Protocol):
    """Capability set used by step preconditions."""

    def package_installed(self, name: str) -> ProbeResult: ...

    def service_active(self, name: str) -> ProbeResult: ...

    def file_exists(self, path: Path) -> ProbeResult: ...

    def path_is_directory(self, path: Path) -> ProbeResult: ...

    def path_owned_by(self, path: Path, user: str) -> ProbeResult: ...

    def path_has_mode(self, path: Path, mode: int) -> ProbeResult: ...

    def read_text(self, path: Path) -> str | None: ...


def probe_call(fn: Callable[..., Any], *args: Any) -> ProbeResult:
    """Evaluate a boolean collaborator query as a ProbeResult.

    Collaborator and OS errors become UNKNOWN.
    """
    try:
        return ProbeResult.of(bool(fn(*args)))
    except (ProvisionError, OSError) as e:
        name = getattr(fn, "__name__", repr(fn))
        logger.debug("Probe %s%r could not determine state: %s", name, args, e)
        return ProbeResult.UNKNOWN


def all_of(*results: ProbeResult) -> ProbeResult:
    """Combine results: FALSE if any is FALSE, else UNKNOWN if any is UNKNOWN."""
    if any(r is ProbeResult.FALSE for r in results):
        return ProbeResult.FALSE
    if any(r is ProbeResult.UNKNOWN for r in results):
        return ProbeResult.UNKNOWN
    return ProbeResult.TRUE


def _stat_probe(check: Callable[[], bool], path: Path) -> ProbeResult:
    try:
        return ProbeResult.of(check())
    except OSError as e:
        logger.debug("Cannot inspect %s: %s", path, e)
        return ProbeResult.UNKNOWN


class LocalHostProbe:
    """HostProbe implementation for the machine ncsetup runs on."""

    def __init__(
        self,
        packages: AptInstaller | None = None,
        services: SystemdServiceManager | None = None,
    ) -> None:
        self._packages = packages or AptInstaller()
        self._services = services or SystemdServiceManager()

    def package_installed(self, name: str) -> ProbeResult:
        return probe_call(self._packages.is_installed, name)

    def service_active(self, name: str) -> ProbeResult:
        return probe_call(self._services.is_active, name)

    def file_exists(self, path: Path) -> ProbeResult:
        # Path.exists() hides permission errors, so stat explicitly
        def check() -> bool:
            try:
                path.stat()
            except FileNotFoundError:
                return False
            return True

        return _stat_probe(check, path)

    def path_is_directory(self, path: Path) -> ProbeResult:
        def check() -> bool:
            try:
                return stat.S_ISDIR(path.stat().st_mode)
            except FileNotFoundError:
                return False

        return _stat_probe(check, path)

    def path_owned_by(self, path: Path, user: str) -> ProbeResult:
        def check() -> bool:
            try:
                uid = path.stat().st_uid
            except FileNotFoundError:
                return False
            return uid == pwd.getpwnam(user).pw_uid

        try:
            return _stat_probe(check, path)
        except KeyError:
            logger.debug("Unknown user %s", user)
            return ProbeResult.UNKNOWN

    def path_has_mode(self, path: Path, mode: int) -> ProbeResult:
        """True if the permission bits of path are exactly mode."""

        def check() -> bool:
            try:
                return stat.S_IMODE(path.stat().st_mode) == mode
            except FileNotFoundError:
                return False

        return _stat_probe(check, path)

    def read_text(self, path: Path) -> str | None:
        try:
            return path.read_text()
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Cannot read %s: %s", path, e)
            return None
