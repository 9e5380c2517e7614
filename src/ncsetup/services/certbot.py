"""TLS certificate issuance through certbot's Apache plugin."""

from ..constants import CERTBOT_TIMEOUT
from .shell import run_command


class CertbotIssuer:
    def issue(self, domain: str, email: str) -> None:
        run_command(
            [
                "certbot",
                "--apache",
                "-d",
                domain,
                "--non-interactive",
                "--agree-tos",
                "--redirect",
                "--email",
                email,
            ],
            timeout=CERTBOT_TIMEOUT,
        )
