"""Configuration management for ncsetup."""

import tomllib
from pathlib import Path
from typing import Any

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import GENERATE
from .errors import ConfigError

_IDENTIFIER_CHARS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_")


class _Section(BaseModel):
    """Base for immutable configuration sections."""

    model_config = ConfigDict(frozen=True, extra="forbid")


class ServerConfig(_Section):
    """Public identity of the host."""

    domain: str | None = Field(
        default=None, description="Domain or IP to serve on (None = primary IP address)"
    )
    tls: bool = Field(default=True, description="Request a certificate when domain is an FQDN")
    admin_email: str | None = Field(
        default=None, description="Certificate contact (defaults to webmaster@<domain>)"
    )


class AdminConfig(_Section):
    """Initial application administrator."""

    user: str = "admin"
    password: str = GENERATE


class DatabaseConfig(_Section):
    """Application database and credentials."""

    kind: str = "mysql"
    name: str = "nextcloud_db"
    user: str = "nextcloud_user"
    password: str = GENERATE
    root_password: str = GENERATE
    host: str = "localhost"

    @field_validator("name", "user")
    @classmethod
    def _check_identifier(cls, value: str) -> str:
        if not value or not set(value) <= _IDENTIFIER_CHARS:
            raise ValueError(f"must contain only letters, digits and underscores: {value!r}")
        return value


class PathsConfig(_Section):
    """Filesystem locations on the target host."""

    web_root: Path = Path("/var/www/nextcloud")
    data_dir: Path = Path("/var/nextcloud_data")
    state_dir: Path = Path("/var/lib/ncsetup")
    apache_dir: Path = Path("/etc/apache2")
    letsencrypt_dir: Path = Path("/etc/letsencrypt/live")


class WebConfig(_Section):
    """Web server settings."""

    user: str = "www-data"
    group: str = "www-data"
    site_name: str = "nextcloud"
    default_site: str = "000-default"
    service: str = "apache2"
    modules: list[str] = Field(
        default_factory=lambda: [
            "rewrite",
            "dir",
            "mime",
            "env",
            "headers",
            "ssl",
            "proxy",
            "proxy_http",
            "proxy_fcgi",
            "setenvif",
        ]
    )


class PackagesConfig(_Section):
    """Package sets installed by the pipeline."""

    base: list[str] = Field(
        default_factory=lambda: [
            "curl",
            "unzip",
            "wget",
            "ca-certificates",
            "lsb-release",
            "gnupg2",
            "apt-transport-https",
        ]
    )
    web: list[str] = Field(default_factory=lambda: ["apache2"])
    php: list[str] = Field(
        default_factory=lambda: [
            "php",
            "php-common",
            "php-mysql",
            "php-gd",
            "php-curl",
            "php-xml",
            "php-zip",
            "php-mbstring",
            "php-intl",
            "php-bcmath",
            "php-gmp",
            "php-imagick",
            "php-opcache",
            "php-cli",
            "libapache2-mod-php",
        ]
    )
    database: list[str] = Field(default_factory=lambda: ["mariadb-server"])
    tls: list[str] = Field(default_factory=lambda: ["certbot", "python3-certbot-apache"])
    database_service: str = "mariadb"


class PhpConfig(_Section):
    """php.ini directives applied by the tune-php step."""

    settings: dict[str, str] = Field(
        default_factory=lambda: {
            "memory_limit": "512M",
            "upload_max_filesize": "1G",
            "post_max_size": "1G",
            "max_execution_time": "300",
            "date.timezone": "UTC",
            "opcache.enable": "1",
            "opcache.memory_consumption": "128",
            "opcache.interned_strings_buffer": "8",
            "opcache.max_accelerated_files": "10000",
            "opcache.revalidate_freq": "1",
            "opcache.save_comments": "1",
        }
    )
    ini_paths: list[Path] = Field(
        default_factory=list, description="Explicit php.ini files (empty = discover)"
    )


class ApplicationConfig(_Section):
    """Application release and post-install settings."""

    release_url: str = "https://download.nextcloud.com/server/releases/"
    version: str | None = Field(default=None, description="Pinned release (None = latest)")
    log_level: int = Field(default=2, ge=0, le=4)
    default_language: str = "en"
    default_locale: str = "en_US"
    default_phone_region: str = "US"
    trusted_domains: list[str] = Field(
        default_factory=list, description="Extra trusted domains besides server.domain"
    )
    apps: list[str] = Field(default_factory=list, description="Optional apps to enable")


class SystemConfig(_Section):
    """Host expectations checked before the run."""

    supported_versions: list[str] = Field(default_factory=lambda: ["22.04", "24.04"])
    connectivity_target: str = "8.8.8.8"
    upgrade: bool = Field(default=True, description="Run apt-get upgrade in update-system")


class ProvisionConfig(_Section):
    """Root configuration for ncsetup."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    web: WebConfig = Field(default_factory=WebConfig)
    packages: PackagesConfig = Field(default_factory=PackagesConfig)
    php: PhpConfig = Field(default_factory=PhpConfig)
    application: ApplicationConfig = Field(default_factory=ApplicationConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    @property
    def vhost_path(self) -> Path:
        """Path of the application's virtual host file."""
        return self.paths.apache_dir / "sites-available" / f"{self.web.site_name}.conf"

    @property
    def app_config_path(self) -> Path:
        """Path of the application's config.php (exists once installed)."""
        return self.paths.web_root / "config" / "config.php"

    @property
    def stamp_dir(self) -> Path:
        return self.paths.state_dir / "stamps"

    @property
    def runs_dir(self) -> Path:
        return self.paths.state_dir / "runs"


def load_config(path: Path | None) -> ProvisionConfig:
    """Load config from a TOML file.

    Args:
        path: Path to the config file, or None for defaults

    Returns:
        Loaded configuration, or defaults if the file doesn't exist

    Raises:
        ConfigError: If the file is not valid TOML or fails validation
    """
    if path is None or not path.exists():
        return ProvisionConfig()
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    try:
        return ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}:\n{e}") from e


def apply_overrides(config: ProvisionConfig, **overrides: Any) -> ProvisionConfig:
    """Return a new config with CLI overrides applied.

    Keys are ``section__field`` names (e.g. ``server__domain``); None values
    are ignored so unset flags keep the file's value.
    """
    updates: dict[str, dict[str, Any]] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        section, _, field = key.partition("__")
        if not field or section not in ProvisionConfig.model_fields:
            raise ValueError(f"Unknown override: {key}")
        updates.setdefault(section, {})[field] = value
    if not updates:
        return config
    data = config.model_dump()
    for section, fields in updates.items():
        data[section].update(fields)
    try:
        return ProvisionConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid override:\n{e}") from e


def write_config_template(path: Path) -> Path:
    """Write default ncsetup.toml template.

    Args:
        path: Destination file

    Returns:
        Path to the written config file
    """
    template = {
        "server": {"domain": "cloud.example.com", "tls": True},
        "admin": {"user": "admin", "password": GENERATE},
        "database": {
            "name": "nextcloud_db",
            "user": "nextcloud_user",
            # "generate" asks for a fresh random secret on each run that applies it
            "password": GENERATE,
            "root_password": GENERATE,
        },
        "paths": {
            "web_root": "/var/www/nextcloud",
            "data_dir": "/var/nextcloud_data",
            "state_dir": "/var/lib/ncsetup",
        },
        "application": {
            "log_level": 2,
            "default_language": "en",
            "default_locale": "en_US",
            "default_phone_region": "US",
            "apps": [],
        },
        "system": {"supported_versions": ["22.04", "24.04"]},
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(template, f)
    return path
