"""PostgreSQL driver built on psycopg2."""

from typing import Any

try:
    import psycopg2
    import psycopg2.extensions
except ImportError:
    psycopg2 = None

from dialectdb.dialects.base.driver import Driver
from dialectdb.exceptions import DriverError


def parse_dsn_arguments(target: str) -> dict[str, str]:
    """Split ``host=localhost;port=5432;dbname=forum`` into keyword arguments."""
    arguments = {}
    for part in target.split(";"):
        if not part.strip():
            continue
        key, _, value = part.partition("=")
        arguments[key.strip()] = value.strip()
    return arguments


class PostgreSQLDriver(Driver):
    """psycopg2 connection in autocommit mode with explicit transactions."""

    scheme = "pgsql"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if psycopg2 is None:
            raise ImportError(
                "psycopg2 is not installed. Install it with: uv add psycopg2-binary"
            ) from None
        super().__init__(*args, **kwargs)

    @property
    def error_types(self) -> tuple[type[BaseException], ...]:
        return (psycopg2.Error,)

    def connect(
        self, target: str, username: str | None, password: str | None, options: dict[str, Any]
    ) -> Any:
        arguments = parse_dsn_arguments(target)
        if username:
            arguments["user"] = username
        if password:
            arguments["password"] = password
        arguments.update(options)

        connection = psycopg2.connect(**arguments)
        connection.autocommit = True
        self.logger.info(
            f"Connected to PostgreSQL: {arguments.get('host', 'localhost')}/{arguments.get('dbname')}"
        )
        return connection

    def placeholder(self, name: str) -> str:
        return f"%({name})s"

    def escape_text(self, text: str) -> str:
        return text.replace("%", "%%")

    def quote(self, value: Any) -> str | None:
        adapted = psycopg2.extensions.adapt(value)
        if hasattr(adapted, "prepare"):
            adapted.prepare(self.connection)
        return adapted.getquoted().decode("utf-8")

    def in_transaction(self) -> bool:
        if self.connection is None:
            return False
        status = self.connection.get_transaction_status()
        return status != psycopg2.extensions.TRANSACTION_STATUS_IDLE

    def last_insert_id(self) -> str | None:
        rows = self.execute("SELECT lastval() AS id", returns_rows=True)
        if not rows:
            raise DriverError("lastval() returned no row")
        return str(rows[0]["id"])
