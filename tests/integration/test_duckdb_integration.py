"""
Integration tests for the DuckDB dialect and driver.
"""

import pytest

from dialectdb.query import Column, Direct, Select


class TestDuckDBTables:
    """Test cases for DuckDB tables, serial columns and introspection."""

    @pytest.fixture
    def connection(self, duckdb_connection, users_columns):
        duckdb_connection.create_table("users", users_columns, primary_key=["id"])
        return duckdb_connection

    def test_table_exists_lifecycle(self, duckdb_connection, users_columns):
        assert not duckdb_connection.table_exists("users")

        duckdb_connection.create_table("users", users_columns, primary_key=["id"])
        assert duckdb_connection.table_exists("users")
        assert duckdb_connection.table_exists("Users")

        duckdb_connection.drop_table("users")
        assert not duckdb_connection.table_exists("users")

    def test_drop_table_drops_sequences(self, connection):
        connection.drop_table("users")

        sequences = connection.execute(
            Direct("SELECT sequence_name FROM duckdb_sequences() WHERE sequence_name = 'users_id_seq'")
        )
        assert sequences == []

    def test_serial_ids(self, connection):
        assert connection.insert("users", {"name": "alice"}) == 1
        connection.insert("users", {"name": "bob"})

        rows = connection.select("users", ["id", "name"], order=["id"])
        assert rows == [{"id": 1, "name": "alice"}, {"id": 2, "name": "bob"}]

    def test_table_info(self, connection):
        info = connection.table_info("users")

        assert list(info["columns"]) == ["id", "name"]
        assert info["columns"]["id"]["allow_null"] is False
        assert info["columns"]["name"]["allow_null"] is True
        assert info["primary_key"] == ["id"]
        assert info["unique"] == []
        assert info["indices"] == {}

    def test_index_lifecycle(self, connection):
        assert not connection.index_exists("users", "name_idx")

        assert connection.add_index("users", "name_idx", ["name"])
        assert connection.index_exists("users", "name_idx")
        assert connection.table_info("users")["indices"] == {
            "name_idx": {"fields": ["name"], "unique": False}
        }

        assert connection.drop_index("users", "name_idx")
        assert not connection.index_exists("users", "name_idx")


class TestDuckDBQueries:
    """Test cases for DuckDB query execution."""

    @pytest.fixture
    def connection(self, duckdb_connection):
        duckdb_connection.execute(Direct("CREATE TABLE kv (k VARCHAR, v VARCHAR)"))
        return duckdb_connection

    def test_replace(self, connection):
        assert connection.replace("kv", {"v": "a"}, {"k": "x"}) == 1
        assert connection.replace("kv", {"v": "b"}, {"k": "x"}) == 2

        assert connection.select("kv", ["k", "v"]) == [{"k": "x", "v": "b"}]

    def test_like_is_case_insensitive(self, connection):
        connection.insert("kv", {"k": "Alice", "v": "1"})
        connection.insert("kv", {"k": "bob", "v": "2"})

        rows = connection.execute(Select("kv", fields=["k"], where="k LIKE :pattern"), {"pattern": "a%"})
        assert rows == [{"k": "Alice"}]

    def test_like_inside_literal_is_kept(self, connection):
        connection.insert("kv", {"k": "I LIKE it", "v": "1"})

        rows = connection.select("kv", ["k"], "k = 'I LIKE it'")
        assert rows == [{"k": "I LIKE it"}]

    def test_array_params(self, connection):
        for key in ["a", "b", "c"]:
            connection.insert("kv", {"k": key, "v": key})

        query = Select("kv", fields=["k"], where="k IN :keys", order=["k"])
        assert connection.execute(query, {"keys": ["a", "c"]}) == [{"k": "a"}, {"k": "c"}]

    def test_update_and_delete_counts(self, connection):
        for key in ["a", "b", "c"]:
            connection.insert("kv", {"k": key, "v": "old"})

        assert connection.update("kv", {"v": "new"}, "k <> :k", {"k": "a"}) == 2
        assert connection.delete("kv", "v = :v", {"v": "new"}) == 2

    def test_field_lifecycle(self, connection):
        connection.add_field("kv", Column("age", "INTEGER"))
        assert connection.field_exists("kv", "age")
        assert connection.field_exists("kv", "AGE")

        connection.drop_field("kv", "age")
        assert not connection.field_exists("kv", "age")

    def test_truncate(self, connection):
        connection.insert("kv", {"k": "a", "v": "1"})

        assert connection.truncate("kv")
        assert connection.select("kv", ["COUNT(*) AS total"]) == [{"total": 0}]

    def test_transactions(self, connection):
        assert connection.begin()
        assert connection.in_transaction()
        connection.insert("kv", {"k": "a", "v": "1"})
        assert connection.rollback()

        assert not connection.in_transaction()
        assert connection.select("kv", ["k"]) == []

    def test_quote_falls_back_to_plain_quotes(self, connection):
        assert connection.quote("abc") == "'abc'"

    def test_no_last_insert_id(self, connection):
        assert connection.last_insert_id() is None
