"""Constants for ncsetup."""

# Subprocess timeouts (seconds)
COMMAND_TIMEOUT = 120
PROBE_TIMEOUT = 15
PACKAGE_TIMEOUT = 1800  # 30 minutes for apt upgrade/install
DOWNLOAD_TIMEOUT = 900
OCC_TIMEOUT = 900
CERTBOT_TIMEOUT = 300
PING_TIMEOUT = 5

# Credentials
GENERATE = "generate"
SECRET_BYTES = 16

# Background maintenance job period
CRON_SCHEDULE = "*/5  *  *  *  *"

DEFAULT_CONFIG_NAME = "ncsetup.toml"
