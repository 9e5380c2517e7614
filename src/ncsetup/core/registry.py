"""Step Registry for the LAMP groupware profile.

Assembles the fixed, ordered list of provisioning steps. Construction is
pure data assembly: preconditions and actions are bound methods that only
touch the host when the engine calls them.
"""

import ipaddress
import re
from collections.abc import Sequence
from pathlib import Path

from ..config import ProvisionConfig
from ..constants import CRON_SCHEDULE
from ..errors import ProvisionError
from ..models import Credential, PipelineRun, ProbeResult, Step, StepOutcome
from ..services import InstallOptions, all_of, probe_call
from .engine import SKIP_SATISFIED
from .php_ini import apply_ini_settings, ini_satisfied
from .toolbox import Toolbox

FQDN_RE = re.compile(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")

DATA_DIR_MODE = 0o750
WEB_ROOT_MODE = 0o755
VHOST_MODE = 0o644
INI_MODE = 0o644

# (before, after): the first step must run before the second
ORDERING_CONSTRAINTS: list[tuple[str, str]] = [
    ("update-system", "install-base-tools"),
    ("update-system", "install-web-server"),
    ("update-system", "install-php"),
    ("update-system", "install-database"),
    ("install-web-server", "tune-php"),
    ("install-php", "tune-php"),
    ("install-web-server", "configure-web-server"),
    ("install-php", "configure-web-server"),
    ("install-database", "secure-database"),
    ("secure-database", "create-database"),
    ("create-database", "install-application"),
    ("download-application", "prepare-directories"),
    ("prepare-directories", "install-application"),
    ("install-application", "configure-trusted-domains"),
    ("install-application", "configure-application"),
    ("install-application", "optimize-database"),
    ("install-application", "schedule-background-jobs"),
    ("install-application", "enable-apps"),
    ("configure-web-server", "issue-certificate"),
    ("secure-database", "ensure-services-running"),
    ("configure-trusted-domains", "ensure-services-running"),
    ("issue-certificate", "ensure-services-running"),
]


def check_ordering(
    steps: Sequence[Step],
    constraints: Sequence[tuple[str, str]] = ORDERING_CONSTRAINTS,
) -> None:
    """Raise ValueError if any constraint between present steps is violated."""
    position = {step.name: i for i, step in enumerate(steps)}
    for before, after in constraints:
        if before in position and after in position and position[before] >= position[after]:
            raise ValueError(f"Step {before!r} must run before {after!r}")


def is_ip_address(value: str) -> bool:
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_fqdn(value: str) -> bool:
    """True for a public domain name (not an IP address or bare host name)."""
    return not is_ip_address(value) and FQDN_RE.match(value) is not None


def tls_applies(config: ProvisionConfig) -> bool:
    domain = config.server.domain
    return config.server.tls and domain is not None and is_fqdn(domain)


def access_url(config: ProvisionConfig, run: PipelineRun | None = None) -> str:
    """URL the application is reachable at, https once a certificate is in place."""
    secure = False
    if run is not None:
        result = run.results.get("issue-certificate")
        secure = result is not None and (
            result.outcome is StepOutcome.SUCCEEDED
            or (result.outcome is StepOutcome.SKIPPED and result.detail == SKIP_SATISFIED)
        )
    scheme = "https" if secure else "http"
    return f"{scheme}://{config.server.domain}"


def vhost_matches(current: str, rendered: str) -> bool:
    """True if every line of the rendered vhost appears in order in current.

    certbot --apache adds its HTTPS redirect as Rewrite directives inside the
    port 80 virtual host, so extra lines do not count as drift.
    """
    wanted = [line.strip() for line in rendered.splitlines() if line.strip()]
    present = iter(line.strip() for line in current.splitlines())
    return all(line in present for line in wanted)


def _negate(result: ProbeResult) -> ProbeResult:
    if result is ProbeResult.UNKNOWN:
        return result
    return ProbeResult.of(result is ProbeResult.FALSE)


class LampProfile:
    """Preconditions and actions for the Apache + PHP + MariaDB install.

    Args:
        config: Resolved configuration (server.domain must be set)
        toolbox: Collaborators acting on the host
        credentials: Secrets keyed by label ("admin", "database", "database-root")
    """

    def __init__(
        self,
        config: ProvisionConfig,
        toolbox: Toolbox,
        credentials: dict[str, Credential],
    ) -> None:
        if config.server.domain is None:
            raise ValueError("server.domain must be resolved before building steps")
        self.config = config
        self.tools = toolbox
        self.credentials = credentials
        self.domain: str = config.server.domain

    # -- helpers ------------------------------------------------------------

    def _stamp(self, name: str) -> Path:
        return self.config.stamp_dir / name

    def _packages_installed(self, names: Sequence[str]) -> ProbeResult:
        return all_of(*(self.tools.probe.package_installed(n) for n in names))

    def _site_link(self, site: str) -> Path:
        return self.config.paths.apache_dir / "sites-enabled" / f"{site}.conf"

    def _render_vhost(self) -> str:
        return self.tools.templater.render(
            "apache-vhost",
            {
                "web_root": self.config.paths.web_root,
                "domain": self.domain,
                "site_name": self.config.web.site_name,
            },
        )

    def _cron_line(self) -> str:
        return self.tools.templater.render(
            "cron-entry", {"schedule": CRON_SCHEDULE, "web_root": self.config.paths.web_root}
        )

    def _ini_paths(self) -> list[Path]:
        return list(self.config.php.ini_paths) or self.tools.php.ini_paths()

    def _trusted_domains(self) -> list[str]:
        # Index 0 is written by the installer (localhost)
        domains = [self.domain, *self.config.application.trusted_domains]
        return list(dict.fromkeys(domains))

    def _system_settings(self) -> dict[str, tuple[str, str | None]]:
        app = self.config.application
        return {
            "loglevel": (str(app.log_level), "integer"),
            "default_language": (app.default_language, None),
            "default_locale": (app.default_locale, None),
            "default_phone_region": (app.default_phone_region, None),
        }

    # -- steps --------------------------------------------------------------

    def update_system_done(self) -> ProbeResult:
        return self.tools.probe.file_exists(self._stamp("update-system"))

    def update_system(self) -> None:
        self.tools.packages.update()
        if self.config.system.upgrade:
            self.tools.packages.upgrade()
        self.tools.files.touch(self._stamp("update-system"))

    def base_tools_installed(self) -> ProbeResult:
        return self._packages_installed(self.config.packages.base)

    def install_base_tools(self) -> None:
        self.tools.packages.install(self.config.packages.base)

    def web_server_installed(self) -> ProbeResult:
        mods_enabled = self.config.paths.apache_dir / "mods-enabled"
        return all_of(
            self._packages_installed(self.config.packages.web),
            *(
                self.tools.probe.file_exists(mods_enabled / f"{module}.load")
                for module in self.config.web.modules
            ),
        )

    def install_web_server(self) -> None:
        self.tools.packages.install(self.config.packages.web)
        self.tools.web.enable_modules(self.config.web.modules)
        self.tools.services.restart(self.config.web.service)

    def php_installed(self) -> ProbeResult:
        return self._packages_installed(self.config.packages.php)

    def install_php(self) -> None:
        self.tools.packages.install(self.config.packages.php)

    def php_tuned(self) -> ProbeResult:
        results = []
        for path in self._ini_paths():
            text = self.tools.probe.read_text(path)
            if text is None:
                results.append(ProbeResult.UNKNOWN)
            else:
                results.append(ProbeResult.of(ini_satisfied(text, self.config.php.settings)))
        return all_of(*results)

    def tune_php(self) -> None:
        for path in self._ini_paths():
            text = self.tools.files.read_text(path)
            updated = apply_ini_settings(text, self.config.php.settings)
            if updated != text:
                self.tools.templater.write(path, updated, mode=INI_MODE)
        self.tools.services.restart(self.config.web.service)

    def web_server_configured(self) -> ProbeResult:
        current = self.tools.probe.read_text(self.config.vhost_path)
        vhost = ProbeResult.of(
            current is not None and vhost_matches(current, self._render_vhost())
        )
        return all_of(
            vhost,
            self.tools.probe.file_exists(self._site_link(self.config.web.site_name)),
            _negate(self.tools.probe.file_exists(self._site_link(self.config.web.default_site))),
        )

    def configure_web_server(self) -> None:
        web = self.config.web
        self.tools.templater.write(self.config.vhost_path, self._render_vhost(), mode=VHOST_MODE)
        self.tools.web.enable_site(web.site_name)
        if self.tools.probe.file_exists(self._site_link(web.default_site)).satisfied:
            self.tools.web.disable_site(web.default_site)
        self.tools.services.reload(web.service)

    def database_installed(self) -> ProbeResult:
        return self._packages_installed(self.config.packages.database)

    def install_database(self) -> None:
        self.tools.packages.install(self.config.packages.database)

    def database_secured(self) -> ProbeResult:
        return probe_call(self.tools.database.is_secured)

    def secure_database(self) -> None:
        self.tools.database.secure(self.credentials["database-root"].secret)

    def database_created(self) -> ProbeResult:
        # Once the application is installed its config.php holds the password,
        # so re-creating the user would desynchronise it.
        db = self.config.database
        return all_of(
            probe_call(self.tools.database.database_exists, db.name),
            probe_call(self.tools.database.user_exists, db.user),
            self.tools.probe.file_exists(self.config.app_config_path),
        )

    def create_database(self) -> None:
        db = self.config.database
        self.tools.database.create_database(db.name)
        self.tools.database.ensure_user(db.user, self.credentials["database"].secret, db.name)

    def application_downloaded(self) -> ProbeResult:
        return self.tools.probe.file_exists(self.config.paths.web_root / "occ")

    def download_application(self) -> None:
        archive = self.tools.releases.resolve_archive(self.config.application.version)
        self.tools.releases.install_archive(archive, self.config.paths.web_root)

    def directories_prepared(self) -> ProbeResult:
        paths, user = self.config.paths, self.config.web.user
        return all_of(
            self.tools.probe.path_is_directory(paths.data_dir),
            self.tools.probe.path_owned_by(paths.data_dir, user),
            self.tools.probe.path_owned_by(paths.web_root, user),
            self.tools.probe.path_has_mode(paths.data_dir, DATA_DIR_MODE),
            self.tools.probe.path_has_mode(paths.web_root, WEB_ROOT_MODE),
        )

    def prepare_directories(self) -> None:
        paths, web = self.config.paths, self.config.web
        self.tools.files.make_dirs(paths.data_dir)
        self.tools.files.chown_recursive(paths.web_root, web.user, web.group)
        self.tools.files.chown_recursive(paths.data_dir, web.user, web.group)
        self.tools.files.chmod_recursive(paths.web_root, WEB_ROOT_MODE)
        self.tools.files.chmod_recursive(paths.data_dir, DATA_DIR_MODE)

    def application_installed(self) -> ProbeResult:
        return self.tools.probe.file_exists(self.config.app_config_path)

    def install_application(self) -> None:
        db = self.config.database
        self.tools.app.install(
            InstallOptions(
                database_kind=db.kind,
                database_host=db.host,
                database_name=db.name,
                database_user=db.user,
                database_password=self.credentials["database"].secret,
                data_dir=self.config.paths.data_dir,
                admin_user=self.config.admin.user,
                admin_password=self.credentials["admin"].secret,
            )
        )

    def trusted_domains_configured(self) -> ProbeResult:
        def check() -> bool:
            return all(
                self.tools.app.get_system_value("trusted_domains", index) == domain
                for index, domain in enumerate(self._trusted_domains(), start=1)
            )

        return probe_call(check)

    def configure_trusted_domains(self) -> None:
        for index, domain in enumerate(self._trusted_domains(), start=1):
            self.tools.app.set_system_value("trusted_domains", domain, index=index)

    def application_configured(self) -> ProbeResult:
        def check() -> bool:
            app = self.tools.app
            if app.get_app_value("core", "backgroundjobs_mode") != "cron":
                return False
            return all(
                app.get_system_value(key) == value
                for key, (value, _) in self._system_settings().items()
            )

        return probe_call(check)

    def configure_application(self) -> None:
        for key, (value, value_type) in self._system_settings().items():
            self.tools.app.set_system_value(key, value, value_type=value_type)
        self.tools.app.use_cron_background_jobs()

    def database_optimized(self) -> ProbeResult:
        return self.tools.probe.file_exists(self._stamp("optimize-database"))

    def optimize_database(self) -> None:
        self.tools.app.add_missing_indices()
        self.tools.app.convert_filecache_bigint()
        self.tools.files.touch(self._stamp("optimize-database"))

    def background_jobs_scheduled(self) -> ProbeResult:
        line = self._cron_line()
        return probe_call(lambda: line in self.tools.cron.entries(self.config.web.user))

    def schedule_background_jobs(self) -> None:
        self.tools.cron.ensure_entry(self.config.web.user, self._cron_line())

    def apps_requested(self) -> bool:
        return bool(self.config.application.apps)

    def apps_enabled(self) -> ProbeResult:
        wanted = set(self.config.application.apps)
        return probe_call(lambda: wanted <= self.tools.app.enabled_apps())

    def enable_apps(self) -> None:
        enabled = self.tools.app.enabled_apps()
        for name in self.config.application.apps:
            if name not in enabled:
                self.tools.app.enable_app(name)

    def certificate_wanted(self) -> bool:
        return tls_applies(self.config)

    def certificate_issued(self) -> ProbeResult:
        cert = self.config.paths.letsencrypt_dir / self.domain / "fullchain.pem"
        return self.tools.probe.file_exists(cert)

    def issue_certificate(self) -> None:
        self.tools.packages.install(self.config.packages.tls)
        email = self.config.server.admin_email or f"webmaster@{self.domain}"
        self.tools.certs.issue(self.domain, email)

    def _required_services(self) -> list[str]:
        return [self.config.web.service, self.config.packages.database_service]

    def services_running(self) -> ProbeResult:
        return all_of(*(self.tools.probe.service_active(s) for s in self._required_services()))

    def ensure_services_running(self) -> None:
        for service in self._required_services():
            if not self.tools.probe.service_active(service).satisfied:
                self.tools.services.restart(service)
            if not self.tools.services.is_active(service):
                raise ProvisionError(f"Service {service} is not active")

    # -- catalog ------------------------------------------------------------

    def steps(self) -> list[Step]:
        return [
            Step(
                "update-system",
                "Refresh package lists and upgrade the system",
                self.update_system_done,
                self.update_system,
            ),
            Step(
                "install-base-tools",
                "Install base tools",
                self.base_tools_installed,
                self.install_base_tools,
            ),
            Step(
                "install-web-server",
                "Install Apache and enable modules",
                self.web_server_installed,
                self.install_web_server,
            ),
            Step(
                "install-php",
                "Install PHP and extensions",
                self.php_installed,
                self.install_php,
            ),
            Step("tune-php", "Apply php.ini settings", self.php_tuned, self.tune_php),
            Step(
                "configure-web-server",
                "Write and enable the virtual host",
                self.web_server_configured,
                self.configure_web_server,
            ),
            Step(
                "install-database",
                "Install MariaDB server",
                self.database_installed,
                self.install_database,
            ),
            Step(
                "secure-database",
                "Set the database root password and remove test data",
                self.database_secured,
                self.secure_database,
            ),
            Step(
                "create-database",
                "Create the application database and user",
                self.database_created,
                self.create_database,
            ),
            Step(
                "download-application",
                "Download and unpack the application release",
                self.application_downloaded,
                self.download_application,
            ),
            Step(
                "prepare-directories",
                "Create the data directory and set ownership",
                self.directories_prepared,
                self.prepare_directories,
            ),
            Step(
                "install-application",
                "Run the application installer",
                self.application_installed,
                self.install_application,
            ),
            Step(
                "configure-trusted-domains",
                "Register trusted domains",
                self.trusted_domains_configured,
                self.configure_trusted_domains,
            ),
            Step(
                "configure-application",
                "Set log level, locale defaults and cron background jobs",
                self.application_configured,
                self.configure_application,
            ),
            Step(
                "optimize-database",
                "Add missing indices and convert filecache columns",
                self.database_optimized,
                self.optimize_database,
            ),
            Step(
                "schedule-background-jobs",
                "Install the background job crontab entry",
                self.background_jobs_scheduled,
                self.schedule_background_jobs,
            ),
            Step(
                "enable-apps",
                "Enable requested applications",
                self.apps_enabled,
                self.enable_apps,
                optional=True,
                applies=self.apps_requested,
            ),
            Step(
                "issue-certificate",
                "Obtain a TLS certificate",
                self.certificate_issued,
                self.issue_certificate,
                optional=True,
                applies=self.certificate_wanted,
            ),
            Step(
                "ensure-services-running",
                "Verify the web server and database are running",
                self.services_running,
                self.ensure_services_running,
            ),
        ]


def build_steps(
    config: ProvisionConfig,
    toolbox: Toolbox,
    credentials: dict[str, Credential],
) -> list[Step]:
    """Return the ordered step catalog for the LAMP groupware profile.

    Raises:
        ValueError: If server.domain is unresolved or the catalog violates
            ORDERING_CONSTRAINTS
    """
    steps = LampProfile(config, toolbox, credentials).steps()
    check_ordering(steps)
    return steps
