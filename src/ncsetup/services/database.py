"""MariaDB administration through the mysql client.

ncsetup runs as root, so the client authenticates over the unix socket.
The root account keeps socket authentication when a password is added,
which lets later runs reconnect without knowing the generated password.
"""

from ..constants import PROBE_TIMEOUT
from .shell import run_command

# A stock install authenticates root via unix_socket with a native password of
# "invalid". A real mysql_native_password hash starts with "*", either as the
# main plugin or as one of the auth_or alternatives.
ROOT_PASSWORD_SQL = (
    "SELECT COUNT(*) FROM mysql.global_priv "
    "WHERE User='root' AND Host='localhost' AND ("
    "JSON_VALUE(Priv, '$.authentication_string') LIKE '*%' "
    "OR JSON_VALUE(Priv, '$.auth_or[0].authentication_string') LIKE '*%'"
    ");"
)


def quote_literal(value: str) -> str:
    """Quote a string literal for SQL."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def quote_identifier(name: str) -> str:
    """Quote a database identifier."""
    return "`" + name.replace("`", "``") + "`"


class MariaDbAdmin:
    """Create and harden the application database."""

    def __init__(self, client: str = "mysql", host: str = "localhost") -> None:
        self._client = client
        self._host = host

    def execute(self, *statements: str, secrets: tuple[str, ...] = ()) -> None:
        run_command([self._client, "-e", " ".join(statements)], secrets=secrets)

    def query(self, sql: str) -> list[str]:
        """Run a query and return the first column of each row."""
        result = run_command(
            [self._client, "--batch", "--skip-column-names", "-e", sql],
            timeout=PROBE_TIMEOUT,
        )
        return [line.split("\t")[0] for line in result.stdout.splitlines() if line]

    def _count(self, sql: str) -> int:
        rows = self.query(sql)
        return int(rows[0]) if rows else 0

    def is_secured(self) -> bool:
        """True if root has a password and the anonymous users and test db are gone."""
        anonymous = self._count("SELECT COUNT(*) FROM mysql.global_priv WHERE User='';")
        test_db = self._count(
            "SELECT COUNT(*) FROM information_schema.SCHEMATA WHERE SCHEMA_NAME='test';"
        )
        root_password = self._count(ROOT_PASSWORD_SQL)
        return anonymous == 0 and test_db == 0 and root_password > 0

    def secure(self, root_password: str) -> None:
        """Set the root password and remove anonymous users and the test database."""
        self.execute(
            "ALTER USER 'root'@'localhost' IDENTIFIED VIA unix_socket "
            f"OR mysql_native_password USING PASSWORD({quote_literal(root_password)});",
            "DELETE FROM mysql.global_priv WHERE User='';",
            "DROP DATABASE IF EXISTS test;",
            "DELETE FROM mysql.db WHERE Db='test' OR Db='test\\\\_%';",
            "FLUSH PRIVILEGES;",
            secrets=(root_password,),
        )

    def database_exists(self, name: str) -> bool:
        return (
            self._count(
                "SELECT COUNT(*) FROM information_schema.SCHEMATA "
                f"WHERE SCHEMA_NAME={quote_literal(name)};"
            )
            > 0
        )

    def user_exists(self, user: str) -> bool:
        return (
            self._count(
                "SELECT COUNT(*) FROM mysql.global_priv "
                f"WHERE User={quote_literal(user)} AND Host={quote_literal(self._host)};"
            )
            > 0
        )

    def create_database(self, name: str) -> None:
        self.execute(
            f"CREATE DATABASE IF NOT EXISTS {quote_identifier(name)} "
            "CHARACTER SET utf8mb4 COLLATE utf8mb4_general_ci;"
        )

    def ensure_user(self, user: str, password: str, database: str) -> None:
        """Create the user if missing, (re)set its password and grant access."""
        account = f"{quote_literal(user)}@{quote_literal(self._host)}"
        self.execute(
            f"CREATE USER IF NOT EXISTS {account} IDENTIFIED BY {quote_literal(password)};",
            f"ALTER USER {account} IDENTIFIED BY {quote_literal(password)};",
            f"GRANT ALL PRIVILEGES ON {quote_identifier(database)}.* TO {account};",
            "FLUSH PRIVILEGES;",
            secrets=(password,),
        )
