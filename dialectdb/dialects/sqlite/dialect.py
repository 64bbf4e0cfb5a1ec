"""
SQL dialect for SQLite.

SQLite differs from the generic rules in:
- file path DSNs and no connection character set
- AUTOINCREMENT primary keys for serial columns
- LIMIT is required before OFFSET
- no TRUNCATE statement
- catalog probes through sqlite_master and pragma functions
"""

from typing import TYPE_CHECKING, Any

from dialectdb.dialects.base import SQLDialect
from dialectdb.exceptions import ConfigurationError
from dialectdb.query import (
    ColumnType,
    CreateTable,
    Direct,
    FieldExists,
    IndexExists,
    OperationResult,
    TableExists,
    Truncate,
)

from .metadata import SQLiteMetadata

if TYPE_CHECKING:
    from dialectdb.config import ConnectionOptions


class SQLiteDialect(SQLiteMetadata, SQLDialect):
    """SQLite rules on top of the generic SQL dialect."""

    name = "sqlite"
    dsn_scheme = "sqlite"

    # Every integer type has INTEGER affinity
    COLUMN_TYPES = {
        ColumnType.TINYINT_UNSIGNED: "INTEGER",
        ColumnType.SMALLINT_UNSIGNED: "INTEGER",
        ColumnType.MEDIUMINT_UNSIGNED: "INTEGER",
        ColumnType.INT_UNSIGNED: "INTEGER",
        ColumnType.BIGINT_UNSIGNED: "INTEGER",
    }

    def __init__(self, connection: Any) -> None:
        super().__init__(connection)
        self._sequence_reset = Direct("DELETE FROM sqlite_sequence WHERE name = :table")
        self._sequence_table = Direct(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'sqlite_sequence'"
        )

    @classmethod
    def generate_connection_string(cls, options: "ConnectionOptions") -> str:
        if not options.dbname:
            raise ConfigurationError(f"No database name specified for {cls.name} database.")
        return f"{cls.dsn_scheme}:{options.dbname}"

    def set_names(self, charset: str) -> str:
        # Text encoding is fixed when the database file is created
        return ""

    def compile_limit_offset(self, limit: int, offset: int) -> str:
        sql = ""

        if limit > 0:
            sql += f" LIMIT {int(limit)}"
        elif offset > 0:
            sql += " LIMIT -1"

        if offset > 0:
            sql += f" OFFSET {int(offset)}"

        return sql

    def compile_column_serial(self, name: str) -> str:
        return f"{name} INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT"

    def compile_primary_key(self, query: CreateTable) -> str | None:
        serial = [column.name for column in query.columns if column.is_serial]
        if not serial:
            return super().compile_primary_key(query)

        # The serial column is declared as the primary key inline
        if query.primary_key and query.primary_key != serial:
            self.logger.warning(
                f"Primary key {query.primary_key} of {query.table} replaced by serial column {serial}"
            )
        return None

    def compile_truncate(self, query: Truncate) -> str:
        table = self.require_table(query, "TRUNCATE")
        return f"DELETE FROM {self.table_name(table)}"

    def run_truncate(self, query: Truncate, params: dict[str, Any]) -> OperationResult:
        table = self.require_table(query, "TRUNCATE")

        def truncate() -> None:
            self.connection.execute(query, params)
            # Reset AUTOINCREMENT counters, the sequence table exists once one is used
            if self.connection.execute(self._sequence_table):
                self.connection.execute(self._sequence_reset, {"table": self.table_name(table)})

        return self._soft(f"Truncating {self.table_name(table)}", truncate)

    def compile_table_exists(self, query: TableExists) -> str:
        self.require_table(query, "TABLE EXISTS")
        return "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = :table COLLATE NOCASE"

    def compile_field_exists(self, query: FieldExists) -> str:
        super().compile_field_exists(query)
        return "SELECT 1 FROM pragma_table_info(:table) WHERE name = :field COLLATE NOCASE"

    def compile_index_exists(self, query: IndexExists) -> str:
        super().compile_index_exists(query)
        return (
            "SELECT 1 FROM sqlite_master WHERE type = 'index' "
            "AND tbl_name = :table COLLATE NOCASE AND name = :index COLLATE NOCASE"
        )
