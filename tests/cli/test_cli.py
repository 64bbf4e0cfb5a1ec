"""
Unit tests for the dialectdb command-line interface.
"""

import json

import pytest
import yaml
from typer.testing import CliRunner

from dialectdb.cli.main import app
from dialectdb.connection import Connection


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def database(temp_sqlite_path, users_columns):
    """SQLite file with a users table."""
    with Connection(f"sqlite:{temp_sqlite_path}") as connection:
        connection.create_table("users", users_columns, primary_key=["id"])
        connection.add_index("users", "name_idx", ["name"])
        connection.insert("users", {"name": "alice"})
        connection.insert("users", {"name": "bob"})
    return f"sqlite:{temp_sqlite_path}"


class TestCLI:
    """Test cases for CLI commands."""

    def test_no_command_shows_help(self, runner):
        result = runner.invoke(app, [])

        assert result.exit_code == 0
        assert "dialects" in result.output
        assert "query" in result.output

    def test_dialects(self, runner):
        result = runner.invoke(app, ["dialects"])

        assert result.exit_code == 0
        assert result.stdout.split() == ["sql", "sqlite", "postgresql", "duckdb"]

    def test_info_json(self, runner, database):
        result = runner.invoke(app, ["info", "users", "--dsn", database])

        assert result.exit_code == 0
        info = json.loads(result.stdout)
        assert info["primary_key"] == ["id"]
        assert info["indices"] == {"name_idx": {"fields": ["name"], "unique": False}}

    def test_info_yaml(self, runner, database):
        result = runner.invoke(app, ["info", "users", "--dsn", database, "--format", "yaml"])

        assert result.exit_code == 0
        assert list(yaml.safe_load(result.stdout)["columns"]) == ["id", "name"]

    def test_info_missing_table(self, runner, database):
        result = runner.invoke(app, ["info", "posts", "--dsn", database])

        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_invalid_format(self, runner, database):
        result = runner.invoke(app, ["info", "users", "--dsn", database, "--format", "xml"])

        assert result.exit_code != 0

    @pytest.mark.parametrize(
        "args, expected_code",
        [
            (["users"], 0),
            (["posts"], 1),
            (["users", "--field", "name"], 0),
            (["users", "--field", "email"], 1),
            (["users", "--index", "name_idx"], 0),
        ],
    )
    def test_exists(self, runner, database, args, expected_code):
        result = runner.invoke(app, ["exists", *args, "--dsn", database])

        assert result.exit_code == expected_code
        assert result.stdout.strip() == ("yes" if expected_code == 0 else "no")

    def test_query_rows(self, runner, database):
        result = runner.invoke(
            app,
            [
                "query",
                "SELECT name FROM users WHERE id IN :ids ORDER BY id",
                "--params",
                '{"ids": [1, 2]}',
                "--dsn",
                database,
            ],
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout) == [{"name": "alice"}, {"name": "bob"}]

    def test_query_affected_rows(self, runner, database):
        result = runner.invoke(app, ["query", "DELETE FROM users", "--dsn", database])

        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"affected_rows": 2}

    def test_query_bad_params(self, runner, database):
        result = runner.invoke(app, ["query", "SELECT 1", "--params", "[1]", "--dsn", database])

        assert result.exit_code == 1
        assert "JSON object" in result.output

    def test_unknown_scheme(self, runner):
        result = runner.invoke(app, ["exists", "users", "--dsn", "oracle:db"])

        assert result.exit_code == 1
        assert "Unsupported DSN scheme" in result.output
