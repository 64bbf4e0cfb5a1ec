"""
Driver interface wrapping a DB-API 2.0 connection.

A driver owns exactly one native connection. It translates ``:name``
placeholders into the native parameter style, executes statements and turns
every native failure into a DriverError.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

from dialectdb.exceptions import DriverError
from dialectdb.placeholders import rewrite_placeholders


class PreparedStatement:
    """A statement translated once into the driver's parameter style.

    DB-API drivers have no explicit prepare step; the translated text and the
    ordered placeholder names are kept so repeated executions only bind values.
    """

    def __init__(self, driver: "Driver", sql: str) -> None:
        self.driver = driver
        self.sql = sql
        self.names: list[str] = []

        def collect(name: str) -> str:
            if name not in self.names:
                self.names.append(name)
            return driver.placeholder(name)

        translated = rewrite_placeholders(sql, collect, escape=driver.escape_text)
        # Without parameters the driver receives the statement untouched
        self.driver_sql = translated if self.names else sql

    def bind(self, params: Mapping[str, Any]) -> dict[str, Any] | None:
        """Select the values this statement needs from ``params``."""
        if not self.names:
            return None

        missing = [name for name in self.names if name not in params]
        if missing:
            raise DriverError(f"No value bound for placeholder(s): {', '.join(':' + n for n in missing)}")

        return {name: params[name] for name in self.names}

    def execute(self, params: Mapping[str, Any], returns_rows: bool = False) -> list[dict[str, Any]] | int:
        """Execute with ``params``; rows for row-returning statements, else a rowcount."""
        return self.driver.execute(self.driver_sql, self.bind(params), returns_rows)


class Driver(ABC):
    """Abstract base class for database drivers."""

    # Scheme used in DSNs, e.g. "sqlite" in "sqlite::memory:"
    scheme = ""

    def __init__(
        self,
        target: str,
        username: str | None = None,
        password: str | None = None,
        options: dict[str, Any] | None = None,
    ) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self.target = target
        self.connection = None
        try:
            self.connection = self.connect(target, username, password, options or {})
        except self.error_types as e:
            raise DriverError(str(e), e) from e

    @property
    @abstractmethod
    def error_types(self) -> tuple[type[BaseException], ...]:
        """Native exception types raised by the driver library."""
        pass

    @abstractmethod
    def connect(
        self, target: str, username: str | None, password: str | None, options: dict[str, Any]
    ) -> Any:
        """Open and return the native connection."""
        pass

    @abstractmethod
    def placeholder(self, name: str) -> str:
        """Render a named parameter in the driver's parameter style."""
        pass

    def escape_text(self, text: str) -> str:
        """Escape statement text between placeholders."""
        return text

    def prepare(self, sql: str) -> PreparedStatement:
        return PreparedStatement(self, sql)

    def _cursor_execute(self, sql: str, params: dict[str, Any] | None) -> Any:
        cursor = self.connection.cursor()
        if params is None:
            cursor.execute(sql)
        else:
            cursor.execute(sql, params)
        return cursor

    def _affected_rows(self, cursor: Any) -> int:
        return max(cursor.rowcount, 0)

    def execute(
        self, sql: str, params: dict[str, Any] | None = None, returns_rows: bool = False
    ) -> list[dict[str, Any]] | int:
        """Execute a native statement and collect its result."""
        if self.connection is None:
            raise DriverError("Not connected to database")

        try:
            cursor = self._cursor_execute(sql, params)
            if returns_rows:
                return fetch_mappings(cursor)
            return self._affected_rows(cursor)
        except self.error_types as e:
            raise DriverError(str(e), e) from e

    def quote(self, value: Any) -> str | None:
        """Native literal quoting; None when the driver has no quoting support."""
        return None

    def begin(self) -> bool:
        return self._transaction_statement("BEGIN")

    def commit(self) -> bool:
        return self._transaction_statement("COMMIT")

    def rollback(self) -> bool:
        return self._transaction_statement("ROLLBACK")

    def _transaction_statement(self, sql: str) -> bool:
        try:
            self.execute(sql)
        except DriverError as e:
            self.logger.warning(f"{sql} failed: {e}")
            return False
        return True

    @abstractmethod
    def in_transaction(self) -> bool:
        pass

    @abstractmethod
    def last_insert_id(self) -> str | None:
        pass

    def close(self) -> None:
        if self.connection is not None:
            self.connection.close()
            self.connection = None
            self.logger.info(f"Disconnected from {self.scheme} database")


def fetch_mappings(cursor: Any) -> list[dict[str, Any]]:
    """Fetch all rows of a cursor as column name -> value mappings."""
    if cursor.description is None:
        return []
    columns = [column[0] for column in cursor.description]
    return [dict(zip(columns, row)) for row in cursor.fetchall()]
