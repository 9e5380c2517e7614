"""Apache site and module management (a2enmod / a2ensite)."""

from collections.abc import Collection

from .shell import run_command


class ApacheWebServer:
    """Toggle Apache modules and sites. All operations are idempotent."""

    def enable_modules(self, modules: Collection[str]) -> None:
        if modules:
            run_command(["a2enmod", "-q", *modules])

    def enable_site(self, name: str) -> None:
        run_command(["a2ensite", "-q", name])

    def disable_site(self, name: str) -> None:
        run_command(["a2dissite", "-q", name])
