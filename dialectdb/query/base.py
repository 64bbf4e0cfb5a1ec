"""
Base query classes.

Queries are plain data holders. They compare by identity so the connection
can cache compiled artifacts for a query object in a side-table.
"""

from dataclasses import dataclass


@dataclass(eq=False)
class Query:
    """Abstract base for every query kind."""

    # Queries that produce a result set instead of an affected-row count
    returns_rows = False

    # Queries that must be run through a dialect operation rule
    # instead of being compiled to a single statement
    is_operation = False


@dataclass(eq=False)
class TableQuery(Query):
    """A query bound to a single (unprefixed) table."""

    table: str = ""
