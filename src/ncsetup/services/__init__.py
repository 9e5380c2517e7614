"""External collaborators for ncsetup.

This package wraps the host tools the pipeline drives:
- shell: subprocess runner with timeouts and secret redaction
- packages: apt-get / dpkg-query
- systemd: systemctl
- apache: a2enmod / a2ensite / a2dissite
- templater: config templates and atomic writes
- database: MariaDB administration
- occ: the application's command-line interface
- cron: per-user crontabs
- release: release archive download and extraction
- filesystem: directories, ownership, permissions
- php: php.ini discovery
- certbot: TLS certificates
- probe: read-only host state queries
- secrets: credential generation
"""

from .apache import ApacheWebServer
from .certbot import CertbotIssuer
from .cron import CrontabEditor
from .database import MariaDbAdmin
from .filesystem import HostFileSystem
from .occ import InstallOptions, OccClient
from .packages import AptInstaller
from .php import PhpRuntime
from .probe import HostProbe, LocalHostProbe, all_of, probe_call
from .release import ReleaseSource
from .secrets import generate_secret, resolve_credentials
from .shell import CommandResult, run_command
from .systemd import SystemdServiceManager
from .templater import ConfigTemplater

__all__ = [
    "ApacheWebServer",
    "AptInstaller",
    "CertbotIssuer",
    "CommandResult",
    "ConfigTemplater",
    "CrontabEditor",
    "HostFileSystem",
    "HostProbe",
    "InstallOptions",
    "LocalHostProbe",
    "MariaDbAdmin",
    "OccClient",
    "PhpRuntime",
    "ReleaseSource",
    "SystemdServiceManager",
    "all_of",
    "generate_secret",
    "probe_call",
    "resolve_credentials",
    "run_command",
]
