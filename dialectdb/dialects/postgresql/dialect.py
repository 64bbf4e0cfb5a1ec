"""
SQL dialect for PostgreSQL.

PostgreSQL differs from the generic rules in:
- case-insensitive pattern matching through ILIKE
- LIMIT/OFFSET syntax
- SERIAL columns and identity reset on truncate
- catalog probes through pg_class, pg_attribute and pg_index
- lower-cased catalog names for unquoted identifiers
"""

from dialectdb.dialects.base import SQLDialect
from dialectdb.dialects.base.compiler import like_to_ilike
from dialectdb.query import ColumnType, FieldExists, IndexExists, TableExists, Truncate

from .metadata import PostgreSQLMetadata


class PostgreSQLDialect(PostgreSQLMetadata, SQLDialect):
    """PostgreSQL rules on top of the generic SQL dialect."""

    name = "postgresql"
    dsn_scheme = "pgsql"

    # PostgreSQL has no unsigned integers, ranges are not enforced
    COLUMN_TYPES = {
        ColumnType.TINYINT_UNSIGNED: "SMALLINT",
        ColumnType.SMALLINT_UNSIGNED: "SMALLINT",
        ColumnType.MEDIUMINT_UNSIGNED: "INTEGER",
        ColumnType.INT_UNSIGNED: "INTEGER",
        ColumnType.BIGINT_UNSIGNED: "BIGINT",
    }

    def catalog_name(self, name: str) -> str:
        # Unquoted identifiers are folded to lower case
        return name.lower()

    def compile_conditions(self, conditions: str) -> str:
        return like_to_ilike(super().compile_conditions(conditions))

    def compile_limit_offset(self, limit: int, offset: int) -> str:
        sql = ""

        if limit > 0:
            sql += f" LIMIT {int(limit)}"

        if offset > 0:
            sql += f" OFFSET {int(offset)}"

        return sql

    def compile_column_serial(self, name: str) -> str:
        return f"{name} SERIAL NOT NULL"

    def compile_truncate(self, query: Truncate) -> str:
        table = self.require_table(query, "TRUNCATE")
        return f"TRUNCATE TABLE {self.table_name(table)} RESTART IDENTITY"

    def compile_table_exists(self, query: TableExists) -> str:
        self.require_table(query, "TABLE EXISTS")
        return "SELECT 1 FROM pg_class WHERE relname = :table AND relkind IN ('r', 'p')"

    def compile_field_exists(self, query: FieldExists) -> str:
        super().compile_field_exists(query)
        return (
            "SELECT 1 FROM pg_class c INNER JOIN pg_attribute a ON a.attrelid = c.oid "
            "WHERE c.relname = :table AND a.attname = :field "
            "AND a.attnum > 0 AND NOT a.attisdropped"
        )

    def compile_index_exists(self, query: IndexExists) -> str:
        super().compile_index_exists(query)
        return (
            "SELECT 1 FROM pg_index i "
            "INNER JOIN pg_class c1 ON c1.oid = i.indrelid "
            "INNER JOIN pg_class c2 ON c2.oid = i.indexrelid "
            "WHERE c1.relname = :table AND c2.relname = :index"
        )
