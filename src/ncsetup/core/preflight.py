"""Checks run before any mutating step.

Fatal problems (not root, no network) raise PreflightError so nothing on
the host is touched. Environment caveats (untested OS release, no public
domain) are returned as warnings and the run continues.
"""

import logging
import os
import socket

from ..config import ProvisionConfig, apply_overrides
from ..constants import PING_TIMEOUT, PROBE_TIMEOUT
from ..errors import CommandError, PreflightError
from ..models import HostTarget
from ..services import run_command
from .registry import is_fqdn

logger = logging.getLogger(__name__)


def _output(args: list[str]) -> str:
    try:
        return run_command(args, timeout=PROBE_TIMEOUT).stdout.strip()
    except CommandError as e:
        logger.debug("%s", e)
        return ""


def primary_address() -> str:
    """First address reported by ``hostname -I``, falling back to the host name."""
    addresses = _output(["hostname", "-I"]).split()
    return addresses[0] if addresses else socket.gethostname()


def detect_host(config: ProvisionConfig) -> HostTarget:
    """Describe the machine ncsetup runs on."""
    os_id = _output(["lsb_release", "-is"])
    os_version = _output(["lsb_release", "-rs"])
    return HostTarget(
        hostname=socket.gethostname(),
        address=config.server.domain or primary_address(),
        os_id=os_id,
        os_version=os_version,
        supported=os_version in config.system.supported_versions,
    )


def check_root() -> None:
    if os.geteuid() != 0:
        raise PreflightError("ncsetup must run as root (use sudo)")


def check_connectivity(target: str) -> None:
    try:
        run_command(["ping", "-c", "1", "-W", str(PING_TIMEOUT), target], timeout=PING_TIMEOUT + 5)
    except CommandError as e:
        raise PreflightError(f"No network connectivity (cannot reach {target})") from e


def run_preflight(
    config: ProvisionConfig,
    *,
    require_root: bool = True,
    check_network: bool = True,
) -> tuple[HostTarget, ProvisionConfig, list[str]]:
    """Validate the host and resolve the serving domain.

    Returns:
        Tuple of (host, config with server.domain resolved, warnings)

    Raises:
        PreflightError: If not running as root or the network is unreachable
    """
    if require_root:
        check_root()

    host = detect_host(config)
    warnings: list[str] = []
    if not host.supported:
        supported = "/".join(config.system.supported_versions)
        warnings.append(
            f"Tested on Ubuntu {supported}; this host runs "
            f"{host.os_id or 'unknown'} {host.os_version or 'unknown'}. Continuing anyway."
        )

    if check_network:
        check_connectivity(config.system.connectivity_target)

    resolved = apply_overrides(config, server__domain=host.address)
    if config.server.tls and not is_fqdn(host.address):
        warnings.append(f"No public domain detected ({host.address}); skipping TLS certificate.")

    for warning in warnings:
        logger.warning(warning)
    return host, resolved, warnings
