"""
SQL dialect for DuckDB.

DuckDB differs from the generic rules in:
- file path DSNs and no connection character set
- native unsigned integer types
- sequence backed serial columns
- case-insensitive pattern matching through ILIKE
- LIMIT/OFFSET syntax
- in-place ALTER COLUMN
- catalog probes through duckdb_tables(), duckdb_columns() and duckdb_indexes()
"""

import re
from typing import TYPE_CHECKING, Any

from dialectdb.dialects.base import SQLDialect
from dialectdb.dialects.base.compiler import like_to_ilike
from dialectdb.exceptions import CompileError, ConfigurationError
from dialectdb.query import (
    AlterField,
    Column,
    ColumnType,
    CreateTable,
    Direct,
    DropTable,
    FieldExists,
    IndexExists,
    OperationResult,
    TableExists,
    Truncate,
)

from .metadata import DuckDBMetadata

if TYPE_CHECKING:
    from dialectdb.config import ConnectionOptions

# Sequence name in a column default such as nextval('users_id_seq')
SEQUENCE_REFERENCE = re.compile(r"nextval\('([^']+)'")


class DuckDBDialect(DuckDBMetadata, SQLDialect):
    """DuckDB rules on top of the generic SQL dialect."""

    name = "duckdb"
    dsn_scheme = "duckdb"

    COLUMN_TYPES = {
        ColumnType.TINYINT_UNSIGNED: "UTINYINT",
        ColumnType.SMALLINT_UNSIGNED: "USMALLINT",
        ColumnType.MEDIUMINT_UNSIGNED: "UINTEGER",
        ColumnType.INT_UNSIGNED: "UINTEGER",
        ColumnType.BIGINT_UNSIGNED: "UBIGINT",
    }

    def __init__(self, connection: Any) -> None:
        super().__init__(connection)
        self._table_sequences = Direct(
            "SELECT column_default FROM duckdb_columns() "
            "WHERE lower(table_name) = lower(:table) AND starts_with(column_default, 'nextval(')"
        )

    @classmethod
    def generate_connection_string(cls, options: "ConnectionOptions") -> str:
        if not options.dbname:
            raise ConfigurationError(f"No database name specified for {cls.name} database.")
        return f"{cls.dsn_scheme}:{options.dbname}"

    def set_names(self, charset: str) -> str:
        # Strings are always UTF-8
        return ""

    def compile_conditions(self, conditions: str) -> str:
        return like_to_ilike(super().compile_conditions(conditions))

    def compile_limit_offset(self, limit: int, offset: int) -> str:
        sql = ""

        if limit > 0:
            sql += f" LIMIT {int(limit)}"

        if offset > 0:
            sql += f" OFFSET {int(offset)}"

        return sql

    def compile_truncate(self, query: Truncate) -> str:
        table = self.require_table(query, "TRUNCATE")
        return f"TRUNCATE {self.table_name(table)}"

    # Serial columns

    def sequence_name(self, table: str, column: str) -> str:
        return f"{self.table_name(table)}_{column}_seq"

    def compile_column_serial(self, name: str) -> str:
        raise CompileError(
            f"Serial column {name} can only be declared when creating its table on DuckDB."
        )

    def compile_create_table(self, query: CreateTable) -> str:
        table = self.require_table(query, "CREATE TABLE")
        if not query.columns:
            raise CompileError("A CREATE TABLE query must contain at least one field.")

        definitions = []
        for column in query.columns:
            if column.is_serial:
                sequence = self.sequence_name(table, column.name)
                definitions.append(f"{column.name} INTEGER DEFAULT nextval('{sequence}') NOT NULL")
            else:
                definitions.append(self.compile_column_definition(column))

        primary_key = self.compile_primary_key(query)
        if primary_key:
            definitions.append(primary_key)

        return f"CREATE TABLE {self.table_name(table)} ({', '.join(definitions)})"

    def run_create_table(self, query: CreateTable, params: dict[str, Any]) -> int:
        table = self.require_table(query, "CREATE TABLE")
        sequences = self.statements(
            query,
            lambda: [
                f"CREATE SEQUENCE IF NOT EXISTS {self.sequence_name(table, column.name)}"
                for column in query.columns
                if column.is_serial
            ],
        )
        for sequence in sequences:
            self.connection.execute(sequence)

        return super().run_create_table(query, params)

    def run_drop_table(self, query: DropTable, params: dict[str, Any]) -> int:
        table = self.require_table(query, "DROP TABLE")

        # Sequences of serial columns outlive their table
        sequences = []
        for row in self.connection.execute(self._table_sequences, {"table": self.table_name(table)}):
            match = SEQUENCE_REFERENCE.search(row["column_default"])
            if match:
                sequences.append(match.group(1))

        result = super().run_drop_table(query, params)

        for sequence in sequences:
            self.connection.execute(Direct(f"DROP SEQUENCE IF EXISTS {sequence}"))

        return result

    # In-place column changes

    def compile_alter_field(self, query: AlterField, temp_name: str) -> list[str]:
        field: Column = query.field
        if field.is_serial:
            raise CompileError(f"Column {field.name} cannot be altered into a serial column on DuckDB.")

        alter = f"ALTER TABLE {self.table_name(query.table)} ALTER COLUMN {field.name}"
        statements = [
            f"{alter} SET DATA TYPE {self.compile_column_type(field.type)}",
            f"{alter} {'DROP' if field.allow_null else 'SET'} NOT NULL",
        ]
        if field.default is not None and field.default != "":
            statements.append(f"{alter} SET DEFAULT {field.default}")
        else:
            statements.append(f"{alter} DROP DEFAULT")
        return statements

    def run_alter_field(self, query: AlterField, params: dict[str, Any]) -> OperationResult:
        """Change a column with ALTER COLUMN statements, no rebuild needed."""
        table = self.require_table(query, "ALTER FIELD")
        if query.field is None:
            raise CompileError("An ALTER FIELD query must have field information specified.")

        steps = self.statements(query, lambda: self.compile_alter_field(query, query.field.name))

        return self._in_transaction(
            f"Altering field {self.table_name(table)}.{query.field.name}",
            lambda: [self.connection.execute(step) for step in steps],
        )

    # Catalog probes

    def compile_table_exists(self, query: TableExists) -> str:
        self.require_table(query, "TABLE EXISTS")
        return "SELECT 1 FROM duckdb_tables() WHERE lower(table_name) = lower(:table)"

    def compile_field_exists(self, query: FieldExists) -> str:
        super().compile_field_exists(query)
        return (
            "SELECT 1 FROM duckdb_columns() "
            "WHERE lower(table_name) = lower(:table) AND lower(column_name) = lower(:field)"
        )

    def compile_index_exists(self, query: IndexExists) -> str:
        super().compile_index_exists(query)
        return (
            "SELECT 1 FROM duckdb_indexes() "
            "WHERE lower(table_name) = lower(:table) AND lower(index_name) = lower(:index)"
        )
