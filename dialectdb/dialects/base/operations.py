"""
Schema and multi-statement operations for dialects.

These methods are mixed into SQLDialect via multiple inheritance. They run
through the owning connection. Data manipulation failures raise DriverError;
DDL failures (truncate, alter field, add/drop index) are returned as a falsy
OperationResult carrying the error.
"""

import dataclasses
import time
from collections.abc import Callable
from typing import Any

from dialectdb.exceptions import CompileError, DriverError
from dialectdb.query import (
    AddField,
    AddIndex,
    AlterField,
    CreateTable,
    Direct,
    DropField,
    DropIndex,
    DropTable,
    FieldExists,
    IndexExists,
    OperationResult,
    Query,
    Replace,
    TableExists,
    TableInfo,
    TableInfoResult,
    Truncate,
)


class SchemaOperations:
    """Mixin class for operations that are more than one compiled statement."""

    OPERATIONS: dict[type[Query], str] = {
        Replace: "run_replace",
        Truncate: "run_truncate",
        CreateTable: "run_create_table",
        DropTable: "run_drop_table",
        AlterField: "run_alter_field",
        TableExists: "run_table_exists",
        FieldExists: "run_field_exists",
        IndexExists: "run_index_exists",
        AddIndex: "run_add_index",
        DropIndex: "run_drop_index",
        TableInfo: "run_table_info",
    }

    def run(self, query: Query, params: dict[str, Any] | None = None) -> Any:
        """Run an operation query and return its operation-specific result."""
        for query_type in type(query).__mro__:
            method_name = self.OPERATIONS.get(query_type)
            if method_name:
                return getattr(self, method_name)(query, params or {})

        return self.connection.execute(query, params)

    def statements(self, query: Query, build: Callable[[], list[str]]) -> list[Direct]:
        """Sub-statements of an operation, built once per query object."""
        statements = self._statements.get(query)
        if statements is None:
            statements = [Direct(sql) for sql in build()]
            self._statements[query] = statements
        return statements

    def _soft(self, description: str, action: Callable[[], Any]) -> OperationResult:
        """Run a DDL action, turning a driver failure into a falsy result."""
        try:
            action()
        except DriverError as e:
            self.logger.warning(f"{description} failed: {e}")
            return OperationResult.failure(e)
        return OperationResult.success()

    # Upsert

    def compile_replace(self, query: Replace) -> list[str]:
        table = self.table_name(query.table)
        keys = " AND ".join(f"{column} = {value}" for column, value in query.keys.items())
        columns = {**query.values, **query.keys}

        update = f"UPDATE {table} SET {self.compile_assignments(query.values)} WHERE {keys}"
        insert = (
            f"INSERT INTO {table} ({', '.join(columns.keys())}) "
            f"SELECT {', '.join(columns.values())} "
            f"WHERE NOT EXISTS (SELECT 1 FROM {table} WHERE {keys})"
        )
        return [update, insert]

    def run_replace(self, query: Replace, params: dict[str, Any]) -> int:
        """Update the row matching the keys, insert it when there is none.

        Returns 1 when a new row was inserted and 2 when an existing row was
        updated. The two statements are not atomic: concurrent callers racing
        on the same new key can both insert unless the caller wraps the call
        in a serializable or row-locking transaction.
        """
        self.require_table(query, "REPLACE")
        if not query.values:
            raise CompileError("A REPLACE query must contain at least one value.")
        if not query.keys:
            raise CompileError("A REPLACE query must contain at least one key.")

        update, insert = self.statements(query, lambda: self.compile_replace(query))

        self.connection.execute(update, params)
        inserted = self.connection.execute(insert, params)

        return 1 if inserted > 0 else 2

    # Table level DDL

    def run_truncate(self, query: Truncate, params: dict[str, Any]) -> OperationResult:
        table = self.require_table(query, "TRUNCATE")
        return self._soft(
            f"Truncating {self.table_name(table)}",
            lambda: self.connection.execute(query, params),
        )

    def run_create_table(self, query: CreateTable, params: dict[str, Any]) -> int:
        self.connection.execute(query, params)

        table = query.table
        for name, index in query.indices.items():
            self.connection.execute(AddIndex(table, name, index.fields, index.unique))

        return 0

    def run_drop_table(self, query: DropTable, params: dict[str, Any]) -> int:
        return self.connection.execute(query, params)

    def compile_alter_field(self, query: AlterField, temp_name: str) -> list[str]:
        table = query.table
        name = query.field.name
        temp_field = dataclasses.replace(query.field, name=temp_name)

        return [
            self.compile_add_field(AddField(table, temp_field)),
            f"UPDATE {self.table_name(table)} SET {temp_name} = {name}",
            self.compile_drop_field(DropField(table, name)),
            self.compile_rename_field(table, temp_name, name),
        ]

    def run_alter_field(self, query: AlterField, params: dict[str, Any]) -> OperationResult:
        """Change a column by rebuilding it.

        A temporary column with the new definition is added, filled from the
        original, the original is dropped and the temporary one renamed.
        Unless the caller already holds a transaction the steps run in one,
        so a failing step leaves the table unchanged.
        """
        table = self.require_table(query, "ALTER FIELD")
        if query.field is None:
            raise CompileError("An ALTER FIELD query must have field information specified.")

        temp_name = f"{query.field.name}_t{int(time.time())}"
        steps = self.statements(query, lambda: self.compile_alter_field(query, temp_name))

        return self._in_transaction(
            f"Altering field {self.table_name(table)}.{query.field.name}",
            lambda: [self.connection.execute(step) for step in steps],
        )

    def _in_transaction(self, description: str, action: Callable[[], Any]) -> OperationResult:
        """Run a soft DDL action in its own transaction unless one is active."""
        if self.connection.in_transaction():
            return self._soft(description, action)

        if not self.connection.begin():
            return self._soft(description, action)

        result = self._soft(description, action)
        if not result:
            self.connection.rollback()
            return result

        if not self.connection.commit():
            error = DriverError(f"{description}: commit failed")
            self.logger.warning(str(error))
            return OperationResult.failure(error)

        return result

    # Catalog probes

    def _probe(self, query: Query, params: dict[str, Any]) -> bool:
        return bool(self.connection.execute(query, params))

    def run_table_exists(self, query: TableExists, params: dict[str, Any]) -> bool:
        table = self.require_table(query, "TABLE EXISTS")
        return self._probe(query, {**params, "table": self.catalog_name(self.table_name(table))})

    def run_field_exists(self, query: FieldExists, params: dict[str, Any]) -> bool:
        table = self.require_table(query, "FIELD EXISTS")
        return self._probe(
            query,
            {
                **params,
                "table": self.catalog_name(self.table_name(table)),
                "field": self.catalog_name(query.field),
            },
        )

    def run_index_exists(self, query: IndexExists, params: dict[str, Any]) -> bool:
        table = self.require_table(query, "INDEX EXISTS")
        return self._probe(
            query,
            {
                **params,
                "table": self.catalog_name(self.table_name(table)),
                "index": self.catalog_name(self.index_name(table, query.index)),
            },
        )

    # Indices

    def run_add_index(self, query: AddIndex, params: dict[str, Any]) -> OperationResult:
        table = self.require_table(query, "ADD INDEX")
        return self._soft(
            f"Adding index {self.index_name(table, query.index)}",
            lambda: self.connection.execute(query, params),
        )

    def run_drop_index(self, query: DropIndex, params: dict[str, Any]) -> OperationResult:
        table = self.require_table(query, "DROP INDEX")
        return self._soft(
            f"Dropping index {self.index_name(table, query.index)}",
            lambda: self.connection.execute(query, params),
        )

    # Introspection

    def run_table_info(self, query: TableInfo, params: dict[str, Any]) -> TableInfoResult:
        self.require_table(query, "TABLE INFO")
        return self.describe_table(query)
