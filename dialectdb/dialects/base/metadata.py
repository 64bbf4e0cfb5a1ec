"""
Schema introspection for dialects.

These methods are mixed into SQLDialect via multiple inheritance. Engines
report table structure through different catalogs; every dialect maps its
catalog rows into the same TableInfoResult shape.
"""

from typing import Any

from dialectdb.query import TableInfo, TableInfoResult
from dialectdb.query.results import empty_table_info


class MetadataHandler:
    """Mixin class describing tables through the engine catalog."""

    def describe_table(self, query: TableInfo) -> TableInfoResult:
        """Describe a table using the standard information_schema views."""
        table = self.catalog_name(self.table_name(query.table))
        columns, keys = self.statements(query, self._information_schema_statements)
        params = {"table": table}

        info = empty_table_info()
        for row in self.connection.execute(columns, params):
            info["columns"][row["column_name"]] = self.column_info(
                row["data_type"], row["column_default"], row["is_nullable"] == "YES"
            )

        unique: dict[str, list[str]] = {}
        for row in self.connection.execute(keys, params):
            if row["constraint_type"] == "PRIMARY KEY":
                info["primary_key"].append(row["column_name"])
            else:
                unique.setdefault(row["constraint_name"], []).append(row["column_name"])

        info["unique"] = list(unique.values())
        return info

    def _information_schema_statements(self) -> list[str]:
        return [
            "SELECT column_name, data_type, column_default, is_nullable "
            "FROM information_schema.columns WHERE table_name = :table "
            "ORDER BY ordinal_position ASC",
            "SELECT tc.constraint_name, tc.constraint_type, kcu.column_name "
            "FROM information_schema.table_constraints tc "
            "JOIN information_schema.key_column_usage kcu "
            "ON kcu.constraint_name = tc.constraint_name AND kcu.table_name = tc.table_name "
            "WHERE tc.table_name = :table AND tc.constraint_type IN ('PRIMARY KEY', 'UNIQUE') "
            "ORDER BY tc.constraint_name, kcu.ordinal_position",
        ]

    @staticmethod
    def column_info(column_type: str, default: Any, allow_null: bool) -> dict[str, Any]:
        return {"type": column_type, "default": default, "allow_null": bool(allow_null)}

    def strip_index_prefix(self, table: str, index_name: str) -> str:
        """Logical index name of a ``{table}_{index}`` physical name."""
        prefix = f"{table}_"
        if index_name.lower().startswith(prefix.lower()):
            return index_name[len(prefix) :]
        return index_name

    def add_index_info(self, info: TableInfoResult, name: str, fields: list[str], unique: bool) -> None:
        info["indices"][name] = {"fields": fields, "unique": bool(unique)}
        if unique:
            info["unique"].append(fields)
