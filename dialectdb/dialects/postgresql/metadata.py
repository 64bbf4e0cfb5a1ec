"""Table introspection through the PostgreSQL catalog."""

from dialectdb.dialects.base.metadata import MetadataHandler
from dialectdb.query import TableInfo, TableInfoResult
from dialectdb.query.results import empty_table_info

COLUMNS_SQL = (
    "SELECT column_name, data_type, column_default, is_nullable "
    "FROM information_schema.columns "
    "WHERE table_name = :table AND table_schema = current_schema() "
    "ORDER BY ordinal_position ASC"
)

# One row per index, with its columns aggregated in index order
INDICES_SQL = (
    "SELECT ix.relname AS index_name, "
    "array_to_string(array_agg(a.attname ORDER BY k.n), ',') AS index_columns, "
    "i.indisunique AS is_unique, i.indisprimary AS is_primary "
    "FROM pg_index i "
    "JOIN pg_class t ON t.oid = i.indrelid "
    "JOIN pg_class ix ON ix.oid = i.indexrelid "
    "CROSS JOIN LATERAL unnest(i.indkey) WITH ORDINALITY AS k(attnum, n) "
    "JOIN pg_attribute a ON a.attrelid = t.oid AND a.attnum = k.attnum "
    "WHERE t.relname = :table AND pg_table_is_visible(t.oid) "
    "GROUP BY ix.relname, i.indisunique, i.indisprimary "
    "ORDER BY ix.relname"
)


class PostgreSQLMetadata(MetadataHandler):
    """Mixin class reading information_schema columns and pg_index indices."""

    def describe_table(self, query: TableInfo) -> TableInfoResult:
        table = self.catalog_name(self.table_name(query.table))
        columns, indices = self.statements(query, lambda: [COLUMNS_SQL, INDICES_SQL])
        params = {"table": table}

        info = empty_table_info()
        for row in self.connection.execute(columns, params):
            info["columns"][row["column_name"]] = self.column_info(
                row["data_type"], row["column_default"], row["is_nullable"] == "YES"
            )

        for row in self.connection.execute(indices, params):
            fields = row["index_columns"].split(",")
            # psycopg2 returns booleans, other clients may return 't'/'f'
            is_unique = row["is_unique"] in (True, "t")
            if row["is_primary"] in (True, "t"):
                info["primary_key"] = fields
                continue

            name = self.strip_index_prefix(table, row["index_name"])
            self.add_index_info(info, name, fields, is_unique)

        return info
