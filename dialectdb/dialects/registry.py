"""
Dialect and driver registry.

The set of dialects is closed: a dialect is chosen from the DialectName
enumeration at configuration time and every dialect shares the SQLDialect
compilation interface. The mappings below are read-only and are the only
state shared between connections.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any

from dialectdb.exceptions import ConfigurationError

from .base import Driver, SQLDialect
from .duckdb import DuckDBDialect, DuckDBDriver
from .postgresql import PostgreSQLDialect, PostgreSQLDriver
from .sqlite import SQLiteDialect, SQLiteDriver


class DialectName(Enum):
    """Supported SQL dialects."""

    SQL = "sql"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    DUCKDB = "duckdb"

    @classmethod
    def parse(cls, value: "DialectName | str") -> "DialectName":
        """Resolve a dialect from its name, accepting common aliases."""
        if isinstance(value, cls):
            return value

        name = str(value).lower()
        name = DIALECT_ALIASES.get(name, name)
        try:
            return cls(name)
        except ValueError:
            supported = ", ".join(dialect.value for dialect in cls)
            raise ConfigurationError(
                f"Unsupported dialect: {value}. Supported dialects: {supported}"
            ) from None


DIALECT_ALIASES = {
    "pgsql": "postgresql",
    "postgres": "postgresql",
    "sqlite3": "sqlite",
}

DIALECTS: MappingProxyType[DialectName, type[SQLDialect]] = MappingProxyType(
    {
        DialectName.SQL: SQLDialect,
        DialectName.SQLITE: SQLiteDialect,
        DialectName.POSTGRESQL: PostgreSQLDialect,
        DialectName.DUCKDB: DuckDBDialect,
    }
)

# DSN scheme -> (driver class, native dialect)
DRIVERS: MappingProxyType[str, tuple[type[Driver], DialectName]] = MappingProxyType(
    {
        SQLiteDriver.scheme: (SQLiteDriver, DialectName.SQLITE),
        PostgreSQLDriver.scheme: (PostgreSQLDriver, DialectName.POSTGRESQL),
        DuckDBDriver.scheme: (DuckDBDriver, DialectName.DUCKDB),
    }
)


def get_dialect_class(name: DialectName | str) -> type[SQLDialect]:
    """Get the dialect class for a dialect name."""
    return DIALECTS[DialectName.parse(name)]


def list_available_dialects() -> list[str]:
    """Get list of available dialect names."""
    return [name.value for name in DIALECTS]


def parse_dsn(dsn: str) -> tuple[str, str]:
    """Split ``scheme:target`` into its scheme and driver-specific target."""
    scheme, separator, target = dsn.partition(":")
    if not separator or not scheme:
        raise ConfigurationError(f"Invalid DSN, expected 'scheme:target': {dsn!r}")
    return scheme.lower(), target


def open_driver(
    dsn: str,
    username: str | None = None,
    password: str | None = None,
    options: dict[str, Any] | None = None,
) -> tuple[Driver, DialectName]:
    """Open the driver named by the DSN scheme.

    Returns the driver together with the engine's native dialect.
    """
    scheme, target = parse_dsn(dsn)
    entry = DRIVERS.get(scheme)
    if entry is None:
        supported = ", ".join(sorted(DRIVERS))
        raise ConfigurationError(f"Unsupported DSN scheme: {scheme}. Supported schemes: {supported}")

    driver_class, dialect = entry
    return driver_class(target, username, password, options), dialect
