"""
Integration tests for the PostgreSQL dialect and driver.

Note: These tests require a disposable PostgreSQL database named by
DIALECTDB_TEST_PGSQL_DSN, e.g. ``pgsql:host=localhost;dbname=dialectdb_test``.
Credentials are read from DIALECTDB_TEST_PGSQL_USERNAME and
DIALECTDB_TEST_PGSQL_PASSWORD.
"""

import pytest

from dialectdb.config import ConnectionOptions
from dialectdb.connection import Connection
from dialectdb.exceptions import DriverError
from dialectdb.query import Column, Direct, Index, Select


@pytest.mark.postgresql
class TestPostgreSQLIntegration:
    """Integration tests against a live PostgreSQL server."""

    @pytest.fixture
    def connection(self, pgsql_dsn, pgsql_options):
        options = ConnectionOptions(
            username=pgsql_options.username,
            password=pgsql_options.password,
            prefix="dialectdb_test_",
        )
        connection = Connection(pgsql_dsn, options)
        for table in ["users", "kv"]:
            connection.execute(Direct(f"DROP TABLE IF EXISTS dialectdb_test_{table}"))
        yield connection
        for table in ["users", "kv"]:
            connection.execute(Direct(f"DROP TABLE IF EXISTS dialectdb_test_{table}"))
        connection.close()

    def test_charset(self, connection):
        assert connection.charset == "utf8"

    def test_table_info(self, connection, users_columns):
        connection.create_table(
            "users",
            users_columns,
            primary_key=["id"],
            indices={"name_idx": Index(["name"])},
        )

        info = connection.table_info("users")

        assert list(info["columns"]) == ["id", "name"]
        assert info["columns"]["id"]["type"] == "integer"
        assert info["columns"]["id"]["allow_null"] is False
        assert info["columns"]["name"] == {"type": "text", "default": None, "allow_null": True}
        assert info["primary_key"] == ["id"]
        assert info["unique"] == []
        assert info["indices"] == {"name_idx": {"fields": ["name"], "unique": False}}

    def test_multi_column_index_order(self, connection):
        connection.create_table(
            "kv",
            [Column("k", "TEXT"), Column("v", "TEXT")],
            indices={"vk_idx": Index(["v", "k"], unique=True)},
        )

        info = connection.table_info("kv")

        assert info["indices"] == {"vk_idx": {"fields": ["v", "k"], "unique": True}}
        assert info["unique"] == [["v", "k"]]

    def test_exists_probes(self, connection, users_columns):
        assert not connection.table_exists("users")

        connection.create_table("users", users_columns, primary_key=["id"])
        connection.add_index("users", "name_idx", ["name"])

        assert connection.table_exists("USERS")
        assert connection.field_exists("users", "name")
        assert connection.index_exists("users", "name_idx")

        assert connection.drop_index("users", "name_idx")
        assert not connection.index_exists("users", "name_idx")

    def test_serial_and_last_insert_id(self, connection, users_columns):
        connection.create_table("users", users_columns, primary_key=["id"])

        connection.insert("users", {"name": "alice"})
        assert connection.last_insert_id() == "1"

        assert connection.truncate("users")
        connection.insert("users", {"name": "bob"})
        assert connection.last_insert_id() == "1"

    def test_ilike_and_percent_literals(self, connection):
        connection.execute(Direct("CREATE TABLE dialectdb_test_kv (k TEXT, v TEXT)"))
        connection.insert("kv", {"k": "Alice", "v": "100%"})

        rows = connection.execute(
            Select("kv", fields=["k", "v"], where="k LIKE :pattern AND v LIKE '%\\%'"),
            {"pattern": "a%"},
        )
        assert rows == [{"k": "Alice", "v": "100%"}]

    def test_alter_field(self, connection):
        connection.execute(Direct("CREATE TABLE dialectdb_test_kv (k TEXT, v INTEGER)"))
        connection.insert("kv", {"k": "a", "v": 5})

        assert connection.alter_field("kv", Column("v", "BIGINT"))
        # TEXT has no assignment cast to INTEGER
        result = connection.alter_field("kv", Column("k", "INTEGER"))
        assert not result
        assert isinstance(result.error, DriverError)

        info = connection.table_info("kv")
        assert info["columns"]["k"]["type"] == "text"
        assert info["columns"]["v"]["type"] == "bigint"
        assert connection.select("kv", ["k", "v"]) == [{"k": "a", "v": 5}]
        assert not connection.in_transaction()

    def test_failing_dml_raises(self, connection):
        with pytest.raises(DriverError) as exc_info:
            connection.insert("kv", {"k": "a"})

        assert "dialectdb_test_kv" in str(exc_info.value)


@pytest.mark.postgresql
class TestPostgreSQLConcurrentReplace:
    """Two connections upserting the same new key on a table without a unique key."""

    @pytest.fixture
    def connections(self, pgsql_dsn, pgsql_options):
        first = Connection(pgsql_dsn, pgsql_options)
        second = Connection(pgsql_dsn, pgsql_options)
        first.execute(Direct("DROP TABLE IF EXISTS dialectdb_race"))
        first.execute(Direct("CREATE TABLE dialectdb_race (k TEXT, v TEXT)"))
        yield first, second
        for connection in (first, second):
            if connection.in_transaction():
                connection.rollback()
        first.execute(Direct("DROP TABLE IF EXISTS dialectdb_race"))
        first.close()
        second.close()

    def count(self, connection):
        return connection.select("dialectdb_race", ["COUNT(*) AS total"])[0]["total"]

    def test_read_committed_race_duplicates(self, connections):
        first, second = connections

        first.begin()
        second.begin()
        assert first.replace("dialectdb_race", {"v": "a"}, {"k": "x"}) == 1
        # The uncommitted row is invisible to the second writer
        assert second.replace("dialectdb_race", {"v": "b"}, {"k": "x"}) == 1
        assert first.commit()
        assert second.commit()

        assert self.count(first) == 2

    def test_serializable_prevents_duplicate(self, connections):
        first, second = connections

        for connection in connections:
            connection.begin()
            connection.execute(Direct("SET TRANSACTION ISOLATION LEVEL SERIALIZABLE"))

        assert first.replace("dialectdb_race", {"v": "a"}, {"k": "x"}) == 1
        try:
            second.replace("dialectdb_race", {"v": "b"}, {"k": "x"})
            assert first.commit()
            failed = not second.commit()
        except DriverError:
            failed = True
        if first.in_transaction():
            assert first.commit()
        if second.in_transaction():
            second.rollback()

        assert failed
        assert self.count(first) == 1
