"""
SQL dialects and drivers.

This package provides one dialect per supported engine. Each dialect:
- compiles query objects into the engine's SQL
- runs multi-statement operations (upsert, alter field, ...)
- normalizes the engine's catalog into a common table description

Each engine is organized in its own subpackage next to its driver.
"""

from .base import Driver, PreparedStatement, SQLDialect
from .duckdb import DuckDBDialect, DuckDBDriver
from .postgresql import PostgreSQLDialect, PostgreSQLDriver
from .registry import (
    DIALECTS,
    DialectName,
    get_dialect_class,
    list_available_dialects,
    open_driver,
    parse_dsn,
)
from .sqlite import SQLiteDialect, SQLiteDriver

__all__ = [
    # Base classes
    "SQLDialect",
    "Driver",
    "PreparedStatement",
    # Registry
    "DialectName",
    "DIALECTS",
    "get_dialect_class",
    "list_available_dialects",
    "open_driver",
    "parse_dsn",
    # Available dialects
    "SQLiteDialect",
    "PostgreSQLDialect",
    "DuckDBDialect",
    # Available drivers
    "SQLiteDriver",
    "PostgreSQLDriver",
    "DuckDBDriver",
]
