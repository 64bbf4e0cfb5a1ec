"""
Unit tests for the PostgreSQL dialect rules.
"""

import pytest

from dialectdb.config import ConnectionOptions
from dialectdb.dialects import PostgreSQLDialect
from dialectdb.dialects.base.compiler import like_to_ilike
from dialectdb.query import Column, ColumnType, CreateTable, Select, Truncate


class TestPostgreSQLDialect:
    """Test cases for PostgreSQL overrides."""

    @pytest.fixture
    def dialect(self, stub_connection):
        return PostgreSQLDialect(stub_connection)

    def test_like_becomes_ilike(self, dialect):
        query = Select("users", fields=["id"], where="name LIKE :name")
        assert dialect.compile(query) == "SELECT id FROM users WHERE name ILIKE :name"

    def test_limit_offset(self, dialect):
        query = Select("users", fields=["id"], limit=10, offset=20)
        assert dialect.compile(query) == "SELECT id FROM users LIMIT 10 OFFSET 20"

    def test_offset_only(self, dialect):
        query = Select("users", fields=["id"], offset=5)
        assert dialect.compile(query) == "SELECT id FROM users OFFSET 5"

    def test_serial_and_unsigned_types(self, dialect):
        query = CreateTable(
            "users",
            columns=[
                Column("id", ColumnType.SERIAL, allow_null=False),
                Column("age", ColumnType.TINYINT_UNSIGNED),
                Column("views", ColumnType.BIGINT_UNSIGNED, allow_null=False, default="0"),
            ],
            primary_key=["id"],
        )

        assert dialect.compile(query) == (
            "CREATE TABLE users (id SERIAL NOT NULL, age SMALLINT, "
            "views BIGINT NOT NULL DEFAULT 0, PRIMARY KEY (id))"
        )

    def test_truncate_restarts_identity(self, dialect):
        assert dialect.compile(Truncate("users")) == "TRUNCATE TABLE users RESTART IDENTITY"

    def test_catalog_names_are_lower_case(self, dialect):
        assert dialect.catalog_name("App_Users") == "app_users"

    def test_connection_string(self):
        options = ConnectionOptions(type="postgresql", host="localhost", dbname="forum")
        assert PostgreSQLDialect.generate_connection_string(options) == (
            "pgsql:host=localhost;dbname=forum"
        )


class TestLikeToIlike:
    def test_rewrites_standalone_operators(self):
        assert like_to_ilike("name LIKE :n AND title NOT like 'x%'") == (
            "name ILIKE :n AND title NOT ILIKE 'x%'"
        )

    def test_leaves_identifiers_alone(self):
        assert like_to_ilike("is_liked = 1 AND LIKELY = 2") == "is_liked = 1 AND LIKELY = 2"

    def test_leaves_literals_and_quoted_identifiers_alone(self):
        conditions = "body = 'I LIKE it' AND \"LIKE\" LIKE :pattern"
        assert like_to_ilike(conditions) == "body = 'I LIKE it' AND \"LIKE\" ILIKE :pattern"

    def test_leaves_comments_alone(self):
        assert like_to_ilike("name LIKE :n /* no LIKE here */") == "name ILIKE :n /* no LIKE here */"
