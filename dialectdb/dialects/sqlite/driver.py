"""SQLite driver built on the standard library sqlite3 module."""

import sqlite3
from typing import Any

from dialectdb.dialects.base.driver import Driver


class SQLiteDriver(Driver):
    """sqlite3 connection in autocommit mode with explicit transactions."""

    scheme = "sqlite"

    @property
    def error_types(self) -> tuple[type[BaseException], ...]:
        return (sqlite3.Error,)

    def connect(
        self, target: str, username: str | None, password: str | None, options: dict[str, Any]
    ) -> sqlite3.Connection:
        path = target or ":memory:"
        # Transactions are started explicitly with BEGIN
        connection = sqlite3.connect(path, isolation_level=None, **options)
        self.logger.info(f"Connected to SQLite database: {path}")
        return connection

    def placeholder(self, name: str) -> str:
        return f":{name}"

    def quote(self, value: Any) -> str | None:
        rows = self.execute("SELECT quote(:value) AS quoted", {"value": value}, returns_rows=True)
        return rows[0]["quoted"]

    def in_transaction(self) -> bool:
        return self.connection is not None and self.connection.in_transaction

    def last_insert_id(self) -> str | None:
        rows = self.execute("SELECT last_insert_rowid() AS id", returns_rows=True)
        return str(rows[0]["id"])
