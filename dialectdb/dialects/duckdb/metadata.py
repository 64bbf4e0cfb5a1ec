"""Table introspection through DuckDB's catalog table functions."""

import logging

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError

from dialectdb.dialects.base.metadata import MetadataHandler
from dialectdb.query import TableInfo, TableInfoResult
from dialectdb.query.results import empty_table_info

logger = logging.getLogger(__name__)

COLUMNS_SQL = (
    "SELECT column_name, data_type, column_default, is_nullable FROM duckdb_columns() "
    "WHERE lower(table_name) = lower(:table) ORDER BY column_index"
)
CONSTRAINTS_SQL = (
    "SELECT constraint_type, constraint_column_names FROM duckdb_constraints() "
    "WHERE lower(table_name) = lower(:table) "
    "AND constraint_type IN ('PRIMARY KEY', 'UNIQUE') ORDER BY constraint_index"
)
INDICES_SQL = (
    "SELECT index_name, is_unique, sql FROM duckdb_indexes() "
    "WHERE lower(table_name) = lower(:table) ORDER BY index_name"
)


def parse_index_columns(sql: str | None) -> list[str]:
    """Indexed fields of a ``CREATE INDEX`` statement.

    Plain columns are returned by name, expressions as DuckDB SQL text.
    """
    if not sql:
        return []

    try:
        parsed = sqlglot.parse_one(sql.strip().rstrip(";"), read="duckdb")
    except ParseError as e:
        logger.warning(f"Could not read index columns from {sql!r}: {e}")
        return []

    index = parsed.find(exp.Index)
    if index is None:
        return []

    params = index.args.get("params")
    columns = params.args.get("columns") if params else index.args.get("columns")
    return [index_column_name(column) for column in columns or []]


def index_column_name(column: exp.Expression) -> str:
    if isinstance(column, exp.Ordered):
        column = column.this
    if isinstance(column, exp.Column):
        return column.name
    return column.sql(dialect="duckdb")


class DuckDBMetadata(MetadataHandler):
    """Mixin class reading duckdb_columns, duckdb_constraints and duckdb_indexes."""

    def describe_table(self, query: TableInfo) -> TableInfoResult:
        table = self.table_name(query.table)
        columns, constraints, indices = self.statements(
            query, lambda: [COLUMNS_SQL, CONSTRAINTS_SQL, INDICES_SQL]
        )
        params = {"table": table}

        info = empty_table_info()
        for row in self.connection.execute(columns, params):
            info["columns"][row["column_name"]] = self.column_info(
                row["data_type"], row["column_default"], row["is_nullable"]
            )

        unique = []
        for row in self.connection.execute(constraints, params):
            fields = list(row["constraint_column_names"])
            if row["constraint_type"] == "PRIMARY KEY":
                info["primary_key"] = fields
            else:
                unique.append(fields)
        info["unique"] = [fields for fields in unique if fields != info["primary_key"]]

        # Constraint indices are internal, duckdb_indexes lists created ones only
        for row in self.connection.execute(indices, params):
            name = self.strip_index_prefix(table, row["index_name"])
            self.add_index_info(info, name, parse_index_columns(row["sql"]), row["is_unique"])

        return info
