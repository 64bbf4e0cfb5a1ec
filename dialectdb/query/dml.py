"""
Data manipulation queries: select, insert, update, delete, replace, truncate
and raw statements.
"""

from dataclasses import dataclass, field

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from .base import Query, TableQuery

# Leading keywords of raw statements that produce a result set
ROW_RETURNING_TOKENS = {
    TokenType.SELECT,
    TokenType.WITH,
    TokenType.VALUES,
    TokenType.PRAGMA,
    TokenType.SHOW,
    TokenType.DESCRIBE,
}

ROW_RETURNING_WORDS = {"EXPLAIN", "PRAGMA", "SHOW", "DESCRIBE", "SUMMARIZE"}


@dataclass(eq=False)
class Join:
    """A join clause of a select query."""

    table: str
    on: str
    alias: str | None = None
    type: str = "INNER"


@dataclass(eq=False)
class Select(TableQuery):
    """SELECT query.

    ``where`` and ``having`` are SQL condition text and may use
    ``:name`` placeholders.
    """

    fields: list[str] = field(default_factory=list)
    alias: str | None = None
    distinct: bool = False
    joins: list[Join] = field(default_factory=list)
    where: str | None = None
    group: list[str] = field(default_factory=list)
    having: str | None = None
    order: list[str] = field(default_factory=list)
    limit: int = 0
    offset: int = 0

    returns_rows = True


@dataclass(eq=False)
class Insert(TableQuery):
    """INSERT query; ``values`` maps column name to value expression."""

    values: dict[str, str] = field(default_factory=dict)


@dataclass(eq=False)
class Update(TableQuery):
    """UPDATE query."""

    values: dict[str, str] = field(default_factory=dict)
    where: str | None = None


@dataclass(eq=False)
class Delete(TableQuery):
    """DELETE query."""

    where: str | None = None


@dataclass(eq=False)
class Replace(TableQuery):
    """Insert-or-update by key.

    ``keys`` maps key columns to value expressions, ``values`` maps the
    remaining columns.
    """

    values: dict[str, str] = field(default_factory=dict)
    keys: dict[str, str] = field(default_factory=dict)

    is_operation = True


@dataclass(eq=False)
class Truncate(TableQuery):
    """Remove every row of a table."""

    is_operation = True


@dataclass(eq=False)
class Direct(Query):
    """A raw SQL statement, executed as given."""

    sql: str = ""

    @property
    def returns_rows(self) -> bool:
        """Whether the statement produces a result set."""
        try:
            tokens = sqlglot.tokenize(self.sql)
        except TokenError:
            words = self.sql.split(None, 1)
            return bool(words) and words[0].upper() in ROW_RETURNING_WORDS | {"SELECT", "WITH"}

        # INSERT, UPDATE and DELETE produce rows with a RETURNING clause
        if any(token.token_type == TokenType.RETURNING for token in tokens):
            return True

        for token in tokens:
            if token.token_type == TokenType.L_PAREN:
                continue
            if token.token_type in ROW_RETURNING_TOKENS:
                return True
            return token.text.upper() in ROW_RETURNING_WORDS
        return False
