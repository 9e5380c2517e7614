"""Config file templating and atomic file writes."""

import contextlib
import logging
import os
import shutil
import tempfile
from collections.abc import Mapping
from pathlib import Path
from string import Template

from ..errors import TemplateError

logger = logging.getLogger(__name__)

# Literal Apache variables are escaped as $${...}
APACHE_VHOST = Template("""\
<VirtualHost *:80>
    ServerAdmin webmaster@localhost
    DocumentRoot ${web_root}
    ServerName ${domain}

    <Directory ${web_root}/>
        Options +FollowSymlinks
        AllowOverride All
        Require all granted

        <IfModule mod_dav.c>
            Dav off
        </IfModule>

        SetEnv HOME ${web_root}
        SetEnv HTTP_HOME ${web_root}
    </Directory>

    ErrorLog $${APACHE_LOG_DIR}/${site_name}_error.log
    CustomLog $${APACHE_LOG_DIR}/${site_name}_access.log combined
</VirtualHost>
""")

CRON_ENTRY = Template("${schedule} php -f ${web_root}/cron.php")

TEMPLATES: dict[str, Template] = {
    "apache-vhost": APACHE_VHOST,
    "cron-entry": CRON_ENTRY,
}


class ConfigTemplater:
    """Render named templates and write them to disk atomically."""

    def __init__(self, templates: Mapping[str, Template] | None = None) -> None:
        self._templates = dict(TEMPLATES if templates is None else templates)

    def render(self, template_id: str, variables: Mapping[str, object]) -> str:
        """Render a template.

        Raises:
            TemplateError: If the template is unknown or a variable is missing
        """
        try:
            template = self._templates[template_id]
        except KeyError:
            raise TemplateError(f"Unknown template: {template_id}") from None
        try:
            return template.substitute({k: str(v) for k, v in variables.items()})
        except KeyError as e:
            raise TemplateError(f"Template {template_id} is missing variable {e}") from None

    def write(
        self,
        path: Path,
        content: str,
        mode: int = 0o644,
        owner: str | None = None,
        group: str | None = None,
    ) -> None:
        """Write content atomically with the given permissions.

        The content is written to a temporary file in the target directory,
        then renamed over the destination so readers never see a partial file.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(content)
            os.chmod(tmp_path, mode)
            if owner or group:
                shutil.chown(tmp_path, user=owner, group=group)
            os.replace(tmp_path, path)
        except BaseException:
            with contextlib.suppress(FileNotFoundError):
                tmp_path.unlink()
            raise
        logger.debug("Wrote %s (mode %o)", path, mode)
