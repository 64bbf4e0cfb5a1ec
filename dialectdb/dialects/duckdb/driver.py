"""DuckDB driver."""

from typing import Any

try:
    import duckdb
except ImportError:
    duckdb = None

from dialectdb.dialects.base.driver import Driver


class DuckDBDriver(Driver):
    """DuckDB connection.

    Statements run on the connection itself; ``cursor()`` would open a
    second connection with its own transaction context.
    """

    scheme = "duckdb"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if duckdb is None:
            raise ImportError("DuckDB is not installed. Install it with: uv add duckdb")
        self._in_transaction = False
        super().__init__(*args, **kwargs)

    @property
    def error_types(self) -> tuple[type[BaseException], ...]:
        return (duckdb.Error,)

    def connect(
        self, target: str, username: str | None, password: str | None, options: dict[str, Any]
    ) -> Any:
        db_path = target or ":memory:"
        connection = duckdb.connect(db_path, **options)
        self.logger.info(f"Connected to DuckDB database: {db_path}")
        return connection

    def placeholder(self, name: str) -> str:
        return f"${name}"

    def _cursor_execute(self, sql: str, params: dict[str, Any] | None) -> Any:
        if params is None:
            return self.connection.execute(sql)
        return self.connection.execute(sql, params)

    def _affected_rows(self, cursor: Any) -> int:
        # DML statements report their affected rows as a single "Count" row
        if cursor.description and cursor.description[0][0] == "Count":
            row = cursor.fetchone()
            return int(row[0]) if row else 0
        return 0

    def begin(self) -> bool:
        if self._transaction_statement("BEGIN TRANSACTION"):
            self._in_transaction = True
            return True
        return False

    def commit(self) -> bool:
        if self._transaction_statement("COMMIT"):
            self._in_transaction = False
            return True
        return False

    def rollback(self) -> bool:
        if self._transaction_statement("ROLLBACK"):
            self._in_transaction = False
            return True
        return False

    def in_transaction(self) -> bool:
        return self._in_transaction

    def last_insert_id(self) -> str | None:
        # DuckDB has no session-wide last generated identifier
        return None
