"""
Unit tests for the DuckDB dialect rules.
"""

import pytest

from dialectdb.dialects import DuckDBDialect
from dialectdb.dialects.duckdb.metadata import parse_index_columns
from dialectdb.exceptions import CompileError
from dialectdb.query import AddField, AlterField, Column, ColumnType, CreateTable, Select, Truncate


class TestDuckDBDialect:
    """Test cases for DuckDB overrides."""

    @pytest.fixture
    def dialect(self, stub_connection):
        return DuckDBDialect(stub_connection)

    def test_like_becomes_ilike(self, dialect):
        query = Select("users", fields=["id"], where="name LIKE :name", limit=5)
        assert dialect.compile(query) == "SELECT id FROM users WHERE name ILIKE :name LIMIT 5"

    def test_serial_column_uses_sequence(self, dialect):
        query = CreateTable(
            "users",
            columns=[
                Column("id", ColumnType.SERIAL, allow_null=False),
                Column("name", "VARCHAR"),
            ],
            primary_key=["id"],
        )

        assert dialect.compile(query) == (
            "CREATE TABLE users (id INTEGER DEFAULT nextval('users_id_seq') NOT NULL, "
            "name VARCHAR, PRIMARY KEY (id))"
        )

    def test_serial_field_cannot_be_added(self, dialect):
        with pytest.raises(CompileError):
            dialect.compile(AddField("users", Column("id", ColumnType.SERIAL)))

    def test_native_unsigned_types(self, dialect):
        assert dialect.compile_column_type(ColumnType.TINYINT_UNSIGNED) == "UTINYINT"
        assert dialect.compile_column_type(ColumnType.BIGINT_UNSIGNED) == "UBIGINT"
        assert dialect.compile_column_type("DOUBLE") == "DOUBLE"

    def test_truncate(self, dialect):
        assert dialect.compile(Truncate("users")) == "TRUNCATE users"

    def test_alter_field_is_native(self, dialect):
        query = AlterField("users", Column("age", "INTEGER", allow_null=False, default="0"))

        assert dialect.compile_alter_field(query, "unused") == [
            "ALTER TABLE users ALTER COLUMN age SET DATA TYPE INTEGER",
            "ALTER TABLE users ALTER COLUMN age SET NOT NULL",
            "ALTER TABLE users ALTER COLUMN age SET DEFAULT 0",
        ]

    def test_alter_field_nullable_without_default(self, dialect):
        query = AlterField("users", Column("age", "BIGINT"))

        assert dialect.compile_alter_field(query, "unused")[1:] == [
            "ALTER TABLE users ALTER COLUMN age DROP NOT NULL",
            "ALTER TABLE users ALTER COLUMN age DROP DEFAULT",
        ]


class TestParseIndexColumns:
    def test_quoted_columns(self):
        sql = 'CREATE INDEX users_name_idx ON users("name", age);'
        assert parse_index_columns(sql) == ["name", "age"]

    def test_missing_sql(self):
        assert parse_index_columns(None) == []

    def test_quoted_column_containing_comma(self):
        sql = 'CREATE INDEX kv_pair_idx ON kv("a,b", c);'
        assert parse_index_columns(sql) == ["a,b", "c"]

    def test_expression_index(self):
        sql = "CREATE INDEX users_lower_idx ON users(lower(name));"
        assert parse_index_columns(sql) == ["LOWER(name)"]
