"""Table introspection through SQLite's table-valued pragma functions."""

from dialectdb.dialects.base.metadata import MetadataHandler
from dialectdb.query import TableInfo, TableInfoResult
from dialectdb.query.results import empty_table_info

COLUMNS_SQL = (
    'SELECT name, type, dflt_value, "notnull", pk FROM pragma_table_info(:table) ORDER BY cid'
)
INDEX_LIST_SQL = 'SELECT name, "unique", origin FROM pragma_index_list(:table) ORDER BY name'
INDEX_COLUMNS_SQL = "SELECT name FROM pragma_index_info(:index) ORDER BY seqno"


class SQLiteMetadata(MetadataHandler):
    """Mixin class reading pragma_table_info and pragma_index_list."""

    def describe_table(self, query: TableInfo) -> TableInfoResult:
        table = self.table_name(query.table)
        columns, index_list, index_columns = self.statements(
            query, lambda: [COLUMNS_SQL, INDEX_LIST_SQL, INDEX_COLUMNS_SQL]
        )

        info = empty_table_info()
        primary_key = []
        for row in self.connection.execute(columns, {"table": table}):
            info["columns"][row["name"]] = self.column_info(
                row["type"], row["dflt_value"], not row["notnull"]
            )
            if row["pk"]:
                primary_key.append((row["pk"], row["name"]))

        info["primary_key"] = [name for _, name in sorted(primary_key)]

        for row in self.connection.execute(index_list, {"table": table}):
            # Primary key auto-indices are described by pragma_table_info
            if row["origin"] == "pk":
                continue

            fields = [
                column["name"]
                for column in self.connection.execute(index_columns, {"index": row["name"]})
            ]

            # UNIQUE constraints get unnamed auto-indices
            if row["origin"] == "u":
                info["unique"].append(fields)
                continue

            name = self.strip_index_prefix(table, row["name"])
            self.add_index_info(info, name, fields, row["unique"])

        return info
