"""Bundle of collaborators the pipeline steps act through."""

from dataclasses import dataclass

from ..config import ProvisionConfig
from ..services import (
    ApacheWebServer,
    AptInstaller,
    CertbotIssuer,
    ConfigTemplater,
    CrontabEditor,
    HostFileSystem,
    HostProbe,
    LocalHostProbe,
    MariaDbAdmin,
    OccClient,
    PhpRuntime,
    ReleaseSource,
    SystemdServiceManager,
)


@dataclass(frozen=True)
class Toolbox:
    """Injectable collaborators. Tests substitute in-memory fakes."""

    probe: HostProbe
    packages: AptInstaller
    services: SystemdServiceManager
    web: ApacheWebServer
    templater: ConfigTemplater
    database: MariaDbAdmin
    app: OccClient
    cron: CrontabEditor
    releases: ReleaseSource
    files: HostFileSystem
    php: PhpRuntime
    certs: CertbotIssuer

    @classmethod
    def local(cls, config: ProvisionConfig) -> "Toolbox":
        """Collaborators acting on the machine ncsetup runs on."""
        packages = AptInstaller()
        services = SystemdServiceManager()
        return cls(
            probe=LocalHostProbe(packages, services),
            packages=packages,
            services=services,
            web=ApacheWebServer(),
            templater=ConfigTemplater(),
            database=MariaDbAdmin(host=config.database.host),
            app=OccClient(config.paths.web_root, config.web.user),
            cron=CrontabEditor(),
            releases=ReleaseSource(config.application.release_url),
            files=HostFileSystem(),
            php=PhpRuntime(),
            certs=CertbotIssuer(),
        )
