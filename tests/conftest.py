"""
Pytest configuration and shared fixtures for dialectdb tests.
"""

import os
import tempfile
from typing import Any

import pytest

from dialectdb.config import ConnectionOptions, DatabaseConfigManager
from dialectdb.connection import Connection
from dialectdb.query import Column, ColumnType


class StubConnection:
    """Minimal connection for compiling queries without a database."""

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix

    def quote(self, value: Any) -> str:
        return "'" + str(value).replace("'", "''") + "'"


@pytest.fixture
def stub_connection():
    return StubConnection()


@pytest.fixture
def prefixed_stub_connection():
    return StubConnection(prefix="app_")


@pytest.fixture
def sqlite_connection():
    """In-memory SQLite connection."""
    connection = Connection("sqlite::memory:")
    yield connection
    connection.close()


@pytest.fixture
def duckdb_connection():
    """In-memory DuckDB connection."""
    connection = Connection("duckdb::memory:")
    yield connection
    connection.close()


@pytest.fixture
def temp_sqlite_path():
    """Create a temporary SQLite database file."""
    with tempfile.NamedTemporaryFile(suffix=".sqlite", delete=False) as f:
        temp_path = f.name
    yield temp_path
    # Cleanup
    if os.path.exists(temp_path):
        os.unlink(temp_path)


@pytest.fixture
def users_columns():
    """Columns of the users table used across integration tests."""
    return [
        Column("id", ColumnType.SERIAL, allow_null=False),
        Column("name", "TEXT"),
    ]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove DIALECTDB_* variables so they cannot leak into configuration tests."""
    for env_var in DatabaseConfigManager.ENV_MAPPINGS:
        monkeypatch.delenv(env_var, raising=False)
    return monkeypatch


@pytest.fixture
def pgsql_dsn():
    """DSN of a disposable PostgreSQL database, the test is skipped without one."""
    dsn = os.getenv("DIALECTDB_TEST_PGSQL_DSN")
    if not dsn:
        pytest.skip("DIALECTDB_TEST_PGSQL_DSN is not set")
    return dsn


@pytest.fixture
def pgsql_options():
    return ConnectionOptions(
        username=os.getenv("DIALECTDB_TEST_PGSQL_USERNAME"),
        password=os.getenv("DIALECTDB_TEST_PGSQL_PASSWORD"),
    )

