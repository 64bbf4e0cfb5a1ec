"""
SQL compilation rules for dialects.

These methods are mixed into SQLDialect via multiple inheritance. Every rule
here is generic SQL; engine dialects override the rules where they differ.
"""

from typing import TYPE_CHECKING, Any

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from dialectdb.exceptions import CompileError, ConfigurationError
from dialectdb.query import (
    AddField,
    AddIndex,
    Column,
    ColumnType,
    CreateTable,
    Delete,
    Direct,
    DropField,
    DropIndex,
    DropTable,
    FieldExists,
    IndexExists,
    Insert,
    Query,
    Select,
    TableExists,
    TableQuery,
    Truncate,
    Update,
)

if TYPE_CHECKING:
    from dialectdb.config import ConnectionOptions


class StatementCompiler:
    """Mixin class turning query objects into SQL text."""

    # Query types compiled to a single statement, by compile method name
    COMPILERS: dict[type[Query], str] = {
        Select: "compile_select",
        Insert: "compile_insert",
        Update: "compile_update",
        Delete: "compile_delete",
        Direct: "compile_direct",
        Truncate: "compile_truncate",
        CreateTable: "compile_create_table",
        DropTable: "compile_drop_table",
        AddField: "compile_add_field",
        DropField: "compile_drop_field",
        TableExists: "compile_table_exists",
        FieldExists: "compile_field_exists",
        IndexExists: "compile_index_exists",
        AddIndex: "compile_add_index",
        DropIndex: "compile_drop_index",
    }

    # Scheme of DSNs built by generate_connection_string
    dsn_scheme: str | None = None

    # Native type for each abstract column type
    COLUMN_TYPES: dict[ColumnType, str] = {}

    @classmethod
    def generate_connection_string(cls, options: "ConnectionOptions") -> str:
        """Build a DSN from the structured host, port and database name."""
        args = []

        if options.host:
            args.append(f"host={options.host}")

        if options.port:
            args.append(f"port={options.port}")

        if options.dbname:
            args.append(f"dbname={options.dbname}")
        else:
            raise ConfigurationError(f"No database name specified for {cls.name} database.")

        dsn = ";".join(args)
        return f"{cls.dsn_scheme}:{dsn}" if cls.dsn_scheme else dsn

    def set_names(self, charset: str) -> str:
        """SQL selecting the connection character set, empty when unsupported."""
        return f"SET NAMES {self.connection.quote(charset)}"

    def compile(self, query: Query) -> str:
        """Compile a query into SQL text."""
        for query_type in type(query).__mro__:
            method_name = self.COMPILERS.get(query_type)
            if method_name:
                return getattr(self, method_name)(query)

        raise CompileError(
            f"{type(query).__name__} queries cannot be compiled to a single statement, "
            "run them with Connection.run()"
        )

    # Names

    def table_name(self, table: str) -> str:
        """Physical name of a logical table."""
        return f"{self.connection.prefix}{table}"

    def index_name(self, table: str, index: str) -> str:
        """Physical name of an index; indices are namespaced to their table."""
        return f"{self.table_name(table)}_{index}"

    def catalog_name(self, name: str) -> str:
        """Identifier as stored in the engine's catalog."""
        return name

    def require_table(self, query: TableQuery, kind: str) -> str:
        if not query.table:
            raise CompileError(f"{kind} query must have a table specified.")
        return query.table

    # Clauses

    def compile_conditions(self, conditions: str) -> str:
        return conditions

    def compile_limit_offset(self, limit: int, offset: int) -> str:
        sql = ""

        if offset > 0:
            sql += f" OFFSET {int(offset)} ROWS"

        if limit > 0:
            sql += f" FETCH FIRST {int(limit)} ROWS ONLY"

        return sql

    def compile_assignments(self, values: dict[str, Any]) -> str:
        return ", ".join(f"{column} = {value}" for column, value in values.items())

    # Data manipulation

    def compile_select(self, query: Select) -> str:
        if not query.fields:
            raise CompileError("A SELECT query must have at least one field specified.")

        sql = "SELECT "
        if query.distinct:
            sql += "DISTINCT "
        sql += ", ".join(query.fields)

        if query.table:
            sql += f" FROM {self.table_name(query.table)}"
            if query.alias:
                sql += f" AS {query.alias}"

        for join in query.joins:
            sql += f" {join.type.upper()} JOIN {self.table_name(join.table)}"
            if join.alias:
                sql += f" AS {join.alias}"
            sql += f" ON {self.compile_conditions(join.on)}"

        if query.where:
            sql += f" WHERE {self.compile_conditions(query.where)}"

        if query.group:
            sql += f" GROUP BY {', '.join(query.group)}"

        if query.having:
            sql += f" HAVING {self.compile_conditions(query.having)}"

        if query.order:
            sql += f" ORDER BY {', '.join(query.order)}"

        return sql + self.compile_limit_offset(query.limit, query.offset)

    def compile_insert(self, query: Insert) -> str:
        table = self.require_table(query, "INSERT")
        if not query.values:
            raise CompileError("An INSERT query must contain at least one value.")

        columns = ", ".join(query.values.keys())
        values = ", ".join(query.values.values())
        return f"INSERT INTO {self.table_name(table)} ({columns}) VALUES ({values})"

    def compile_update(self, query: Update) -> str:
        table = self.require_table(query, "UPDATE")
        if not query.values:
            raise CompileError("An UPDATE query must contain at least one value.")

        sql = f"UPDATE {self.table_name(table)} SET {self.compile_assignments(query.values)}"
        if query.where:
            sql += f" WHERE {self.compile_conditions(query.where)}"
        return sql

    def compile_delete(self, query: Delete) -> str:
        table = self.require_table(query, "DELETE")

        sql = f"DELETE FROM {self.table_name(table)}"
        if query.where:
            sql += f" WHERE {self.compile_conditions(query.where)}"
        return sql

    def compile_direct(self, query: Direct) -> str:
        return query.sql

    def compile_truncate(self, query: Truncate) -> str:
        table = self.require_table(query, "TRUNCATE")
        return f"TRUNCATE TABLE {self.table_name(table)}"

    # Table definitions

    def compile_column_type(self, column_type: ColumnType | str) -> str:
        if isinstance(column_type, ColumnType):
            return self.COLUMN_TYPES.get(column_type, column_type.value)
        return column_type

    def compile_column_serial(self, name: str) -> str:
        return f"{name} INTEGER GENERATED BY DEFAULT AS IDENTITY NOT NULL"

    def compile_column_definition(self, column: Column) -> str:
        if column.is_serial:
            return self.compile_column_serial(column.name)

        sql = f"{column.name} {self.compile_column_type(column.type)}"

        if not column.allow_null:
            sql += " NOT NULL"

        if column.default is not None and column.default != "":
            sql += f" DEFAULT {column.default}"

        return sql

    def compile_primary_key(self, query: CreateTable) -> str | None:
        if not query.primary_key:
            return None
        return f"PRIMARY KEY ({', '.join(query.primary_key)})"

    def compile_create_table(self, query: CreateTable) -> str:
        table = self.require_table(query, "CREATE TABLE")
        if not query.columns:
            raise CompileError("A CREATE TABLE query must contain at least one field.")

        definitions = [self.compile_column_definition(column) for column in query.columns]

        primary_key = self.compile_primary_key(query)
        if primary_key:
            definitions.append(primary_key)

        return f"CREATE TABLE {self.table_name(table)} ({', '.join(definitions)})"

    def compile_drop_table(self, query: DropTable) -> str:
        table = self.require_table(query, "DROP TABLE")
        return f"DROP TABLE {self.table_name(table)}"

    def compile_add_field(self, query: AddField) -> str:
        table = self.require_table(query, "ADD FIELD")
        if query.field is None:
            raise CompileError("An ADD FIELD query must have field information specified.")

        definition = self.compile_column_definition(query.field)
        return f"ALTER TABLE {self.table_name(table)} ADD COLUMN {definition}"

    def compile_drop_field(self, query: DropField) -> str:
        table = self.require_table(query, "DROP FIELD")
        if not query.field:
            raise CompileError("A DROP FIELD query must have a field specified.")

        return f"ALTER TABLE {self.table_name(table)} DROP COLUMN {query.field}"

    def compile_rename_field(self, table: str, old_name: str, new_name: str) -> str:
        return f"ALTER TABLE {self.table_name(table)} RENAME COLUMN {old_name} TO {new_name}"

    # Catalog probes, bound to :table, :field and :index

    def compile_table_exists(self, query: TableExists) -> str:
        self.require_table(query, "TABLE EXISTS")
        return "SELECT 1 FROM information_schema.tables WHERE table_name = :table"

    def compile_field_exists(self, query: FieldExists) -> str:
        self.require_table(query, "FIELD EXISTS")
        if not query.field:
            raise CompileError("A FIELD EXISTS query must have a field specified.")

        return (
            "SELECT 1 FROM information_schema.columns "
            "WHERE table_name = :table AND column_name = :field"
        )

    def compile_index_exists(self, query: IndexExists) -> str:
        self.require_table(query, "INDEX EXISTS")
        if not query.index:
            raise CompileError("An INDEX EXISTS query must have an index specified.")

        return (
            "SELECT 1 FROM information_schema.statistics "
            "WHERE table_name = :table AND index_name = :index"
        )

    # Indices

    def compile_add_index(self, query: AddIndex) -> str:
        table = self.require_table(query, "ADD INDEX")
        if not query.index:
            raise CompileError("An ADD INDEX query must have an index specified.")
        if not query.fields:
            raise CompileError("An ADD INDEX query must have at least one field specified.")

        unique = "UNIQUE " if query.unique else ""
        return (
            f"CREATE {unique}INDEX {self.index_name(table, query.index)} "
            f"ON {self.table_name(table)} ({', '.join(query.fields)})"
        )

    def compile_drop_index(self, query: DropIndex) -> str:
        table = self.require_table(query, "DROP INDEX")
        if not query.index:
            raise CompileError("A DROP INDEX query must have an index specified.")

        return f"DROP INDEX {self.index_name(table, query.index)}"


def like_to_ilike(conditions: str) -> str:
    """Replace the LIKE operator with ILIKE for a case-insensitive pattern match.

    Only LIKE keyword tokens are rewritten; string literals, quoted
    identifiers and comments keep their text.
    """
    if "like" not in conditions.lower():
        return conditions

    try:
        tokens = sqlglot.tokenize(conditions)
    except TokenError as e:
        raise CompileError(f"Unable to tokenize conditions: {e}") from e

    parts = []
    position = 0
    for token in tokens:
        if token.token_type != TokenType.LIKE:
            continue
        start = token.start
        parts.append(conditions[position:start])
        parts.append("ILIKE")
        position = start + len("LIKE")

    parts.append(conditions[position:])
    return "".join(parts)
