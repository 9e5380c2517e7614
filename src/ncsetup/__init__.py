"""ncsetup: unattended, idempotent groupware provisioning for Ubuntu hosts."""

__version__ = "0.1.0"
