"""
Database connection: compiles query objects once, executes them through the
driver and keeps a diagnostic log of executed statements.
"""

import logging
import time
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any
from weakref import WeakKeyDictionary

from dialectdb.config import ConnectionOptions
from dialectdb.dialects.base import Driver, PreparedStatement, SQLDialect
from dialectdb.dialects.registry import DialectName, get_dialect_class, open_driver
from dialectdb.exceptions import CompileError, DriverError
from dialectdb.placeholders import expand_array_params, normalize_params
from dialectdb.query import (
    AddField,
    AddIndex,
    AlterField,
    Column,
    CreateTable,
    Delete,
    DropField,
    DropIndex,
    DropTable,
    FieldExists,
    Index,
    IndexExists,
    Insert,
    OperationResult,
    Query,
    Replace,
    Select,
    TableExists,
    TableInfo,
    TableInfoResult,
    Truncate,
    Update,
)

# Placeholder prefix of the values bound by Connection.update
SET_PREFIX = "set_"

# Prepared statements kept per query object, one per array parameter length
MAX_PREPARED_STATEMENTS = 32


@dataclass(frozen=True)
class QueryLogEntry:
    """An executed statement with its final parameters and duration in seconds."""

    sql: str
    params: dict[str, Any]
    duration: float


@dataclass
class CompiledStatement:
    """Compiled form of a query object.

    ``prepared`` holds one prepared statement per distinct final SQL text,
    which differs from ``sql`` when array parameters are expanded. At most
    ``MAX_PREPARED_STATEMENTS`` are kept, the oldest is evicted first.
    """

    sql: str
    returns_rows: bool
    prepared: dict[str, PreparedStatement] = field(default_factory=dict)

    def prepare(self, driver: Driver, sql: str) -> PreparedStatement:
        statement = self.prepared.get(sql)
        if statement is None:
            if len(self.prepared) >= MAX_PREPARED_STATEMENTS:
                del self.prepared[next(iter(self.prepared))]
            statement = driver.prepare(sql)
            self.prepared[sql] = statement
        return statement


class Connection:
    """
    A database connection bound to one dialect.

    Query objects are compiled on first execution; the compiled SQL and its
    prepared statements are cached for as long as the query object lives,
    so executing the same query repeatedly only binds new parameters.
    """

    def __init__(
        self,
        dsn: str,
        options: ConnectionOptions | None = None,
        dialect: DialectName | str | None = None,
    ) -> None:
        """
        Open a connection.

        Args:
            dsn: ``scheme:target`` naming the driver, e.g. ``sqlite::memory:``
            options: Connection options, defaults apply when omitted
            dialect: SQL dialect, defaults to ``options.dialect`` and then to
                the driver's native dialect

        Raises:
            ConfigurationError: If the DSN scheme or dialect is unknown
            DriverError: If the driver fails to connect
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.options = options or ConnectionOptions()
        self.prefix = self.options.prefix
        self.charset: str | None = None

        self.driver, native_dialect = open_driver(
            dsn, self.options.username, self.options.password, self.options.driver_options
        )

        self.dialect_name = DialectName.parse(dialect or self.options.dialect or native_dialect)
        self.dialect: SQLDialect = get_dialect_class(self.dialect_name)(self)

        self._compiled: WeakKeyDictionary[Query, CompiledStatement] = WeakKeyDictionary()
        self._log: deque[QueryLogEntry] = deque(maxlen=self.options.log_limit)

        # Attempt to set names
        self.set_names(self.options.charset)

    @classmethod
    def open(
        cls,
        dsn: str,
        options: ConnectionOptions | None = None,
        dialect: DialectName | str | None = None,
    ) -> "Connection":
        return cls(dsn, options, dialect)

    def set_names(self, charset: str) -> None:
        """Select the connection character set; failures are not fatal."""
        sql = self.dialect.set_names(charset)
        if not sql:
            return

        try:
            self.driver.execute(sql)
        except DriverError as e:
            self.logger.debug(f"Could not set connection charset to {charset}: {e}")
            return

        self.charset = charset

    # Execution

    def compile(self, query: Query) -> str:
        """The SQL text of a statement query, compiled once per query object."""
        return self._compile(query).sql

    def _compile(self, query: Query) -> CompiledStatement:
        compiled = self._compiled.get(query)
        if compiled is None:
            sql = self.dialect.compile(query)
            compiled = CompiledStatement(sql, query.returns_rows)
            self._compiled[query] = compiled
            self.logger.debug(f"Compiled {type(query).__name__}: {sql}")
        return compiled

    def execute(self, query: Query, params: dict[str, Any] | None = None) -> list[dict[str, Any]] | int:
        """
        Execute a statement query.

        Args:
            query: The query to execute
            params: Values for the query's ``:name`` placeholders; list or
                tuple values are expanded into placeholder lists

        Returns:
            Rows as column name -> value mappings for row-returning queries,
            otherwise the number of affected rows

        Raises:
            CompileError: If the query is structurally invalid
            DriverError: If the driver reports a failure
        """
        start = time.perf_counter()

        compiled = self._compile(query)

        # An empty statement is a no-op
        if not compiled.sql:
            return 0

        sql, final_params = expand_array_params(compiled.sql, normalize_params(params))

        statement = compiled.prepare(self.driver, sql)
        result = statement.execute(final_params, compiled.returns_rows)

        duration = time.perf_counter() - start
        self._log.append(QueryLogEntry(sql, final_params, duration))
        self.logger.debug(f"Executed in {duration:.4f}s: {sql}")

        return result

    def run(self, query: Query, params: dict[str, Any] | None = None) -> Any:
        """Run any query; operation queries are dispatched to their dialect rule."""
        if query.is_operation:
            return self.dialect.run(query, normalize_params(params))
        return self.execute(query, params)

    def quote(self, value: Any) -> str:
        """
        Quote a value as a SQL literal using the driver's quoting.

        When the driver has no quoting support the value is wrapped in single
        quotes without escaping, which is unsafe for untrusted input.
        """
        quoted = self.driver.quote(value)
        if quoted is None:
            quoted = f"'{value}'"
        return quoted

    # Transactions

    def begin(self) -> bool:
        return self.driver.begin()

    def commit(self) -> bool:
        return self.driver.commit()

    def rollback(self) -> bool:
        return self.driver.rollback()

    def in_transaction(self) -> bool:
        return self.driver.in_transaction()

    @contextmanager
    def transaction(self) -> Iterator["Connection"]:
        """Run a block in a transaction, committed on success and rolled back on error."""
        if not self.begin():
            raise DriverError("Could not start a transaction")

        try:
            yield self
        except BaseException:
            self.rollback()
            raise

        if not self.commit():
            raise DriverError("Could not commit the transaction")

    def last_insert_id(self) -> str | None:
        """Identifier generated by the last insert, None when the driver cannot tell."""
        return self.driver.last_insert_id()

    # Diagnostics

    def fetch_log(self) -> list[QueryLogEntry]:
        """Executed statements, oldest first."""
        return list(self._log)

    def clear_log(self) -> None:
        self._log.clear()

    # Convenience methods

    def select(
        self,
        table: str,
        fields: list[str] | None = None,
        where: str | None = None,
        params: dict[str, Any] | None = None,
        **clauses: Any,
    ) -> list[dict[str, Any]]:
        query = Select(table, fields=fields or ["*"], where=where, **clauses)
        return self.execute(query, params)

    def insert(self, table: str, values: dict[str, Any]) -> int:
        """Insert one row, binding each value to a placeholder named after its column."""
        query = Insert(table, values=bind_columns(values))
        return self.execute(query, values)

    def update(
        self,
        table: str,
        values: dict[str, Any],
        where: str | None = None,
        params: dict[str, Any] | None = None,
    ) -> int:
        """Update matching rows.

        New values are bound to ``:set_<column>`` placeholders so they never
        shadow the parameters of ``where``.

        Raises:
            CompileError: If a ``where`` parameter uses a ``set_<column>`` name
        """
        where_params = normalize_params(params)
        set_params = {f"{SET_PREFIX}{column}": value for column, value in values.items()}

        clashes = sorted(set_params.keys() & where_params.keys())
        if clashes:
            raise CompileError(f"Parameters {clashes} are reserved for the updated values")

        query = Update(table, values=bind_columns(values, SET_PREFIX), where=where)
        return self.execute(query, {**where_params, **set_params})

    def delete(self, table: str, where: str | None = None, params: dict[str, Any] | None = None) -> int:
        return self.execute(Delete(table, where=where), params)

    def replace(self, table: str, values: dict[str, Any], keys: dict[str, Any]) -> int:
        """Upsert one row by key; 1 when inserted, 2 when updated."""
        query = Replace(table, values=bind_columns(values), keys=bind_columns(keys))
        return self.run(query, {**values, **keys})

    def truncate(self, table: str) -> OperationResult:
        return self.run(Truncate(table))

    def create_table(
        self,
        table: str,
        columns: list[Column],
        primary_key: list[str] | None = None,
        indices: dict[str, Index] | None = None,
    ) -> int:
        query = CreateTable(table, columns=columns, primary_key=primary_key or [], indices=indices or {})
        return self.run(query)

    def drop_table(self, table: str) -> int:
        return self.run(DropTable(table))

    def add_field(self, table: str, field: Column) -> int:
        return self.run(AddField(table, field))

    def drop_field(self, table: str, field: str) -> int:
        return self.run(DropField(table, field))

    def alter_field(self, table: str, field: Column) -> OperationResult:
        return self.run(AlterField(table, field))

    def table_exists(self, table: str) -> bool:
        return self.run(TableExists(table))

    def field_exists(self, table: str, field: str) -> bool:
        return self.run(FieldExists(table, field))

    def index_exists(self, table: str, index: str) -> bool:
        return self.run(IndexExists(table, index))

    def add_index(self, table: str, index: str, fields: list[str], unique: bool = False) -> OperationResult:
        return self.run(AddIndex(table, index, fields, unique))

    def drop_index(self, table: str, index: str) -> OperationResult:
        return self.run(DropIndex(table, index))

    def table_info(self, table: str) -> TableInfoResult:
        return self.run(TableInfo(table))

    # Lifecycle

    def close(self) -> None:
        self.driver.close()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def bind_columns(values: dict[str, Any], prefix: str = "") -> dict[str, str]:
    """Map each column to a placeholder of the same name, optionally prefixed."""
    return {column: f":{prefix}{column}" for column in values}
