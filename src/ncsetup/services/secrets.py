"""Secrets Provider: credential generation and resolution."""

import base64
import secrets
from collections.abc import Callable

from ..config import ProvisionConfig
from ..constants import GENERATE, SECRET_BYTES
from ..models import Credential, CredentialSource

WEAK_SECRETS = frozenset({"admin", "password", "changeme", "root", "123456", "nextcloud"})
MIN_SECRET_LENGTH = 8


def generate_secret(byte_length: int = SECRET_BYTES) -> str:
    """Return a base64-encoded string of cryptographically random bytes."""
    if byte_length <= 0:
        raise ValueError("byte_length must be positive")
    return base64.b64encode(secrets.token_bytes(byte_length)).decode("ascii")


def is_weak(secret: str, username: str = "") -> bool:
    """True for well-known, short, or username-equal secrets."""
    return (
        len(secret) < MIN_SECRET_LENGTH
        or secret.lower() in WEAK_SECRETS
        or (bool(username) and secret.lower() == username.lower())
    )


def make_credential(
    label: str,
    username: str,
    value: str,
    applied_by: str,
    generate: Callable[[], str] = generate_secret,
) -> Credential:
    """Build a credential, generating the secret when value is "generate"."""
    if value == GENERATE:
        return Credential(
            label=label,
            username=username,
            secret=generate(),
            source=CredentialSource.GENERATED,
            applied_by=applied_by,
        )
    return Credential(
        label=label,
        username=username,
        secret=value,
        source=CredentialSource.SUPPLIED,
        insecure=is_weak(value, username),
        applied_by=applied_by,
    )


def resolve_credentials(
    config: ProvisionConfig,
    generate: Callable[[], str] = generate_secret,
) -> dict[str, Credential]:
    """Resolve the admin, database and database-root credentials for one run.

    Each generated value is produced once here and then shared by the steps
    that need it.
    """
    credentials = [
        make_credential(
            "admin", config.admin.user, config.admin.password, "install-application", generate
        ),
        make_credential(
            "database",
            config.database.user,
            config.database.password,
            "create-database",
            generate,
        ),
        make_credential(
            "database-root", "root", config.database.root_password, "secure-database", generate
        ),
    ]
    return {c.label: c for c in credentials}
