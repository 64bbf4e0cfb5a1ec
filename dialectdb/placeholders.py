"""
Named placeholder handling.

SQL text uses ``:name`` placeholders. Placeholders are located with the
sqlglot tokenizer, so text inside string literals and comments, ``::`` casts
and longer names sharing a prefix are never mistaken for a placeholder.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from dialectdb.exceptions import CompileError

PLACEHOLDER_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class Placeholder:
    """A ``:name`` occurrence; ``start``/``end`` span the colon and the name."""

    name: str
    start: int
    end: int


def find_placeholders(sql: str) -> list[Placeholder]:
    """Return every named placeholder in ``sql`` in order of appearance."""
    if ":" not in sql:
        return []

    try:
        tokens = sqlglot.tokenize(sql)
    except TokenError as e:
        raise CompileError(f"Unable to locate placeholders: {e}") from e

    found = []
    for token in tokens:
        if token.token_type != TokenType.COLON or sql[token.start] != ":":
            continue
        match = PLACEHOLDER_NAME.match(sql, token.start + 1)
        if match:
            found.append(Placeholder(match.group(), token.start, match.end()))
    return found


def rewrite_placeholders(
    sql: str,
    replace: Callable[[str], str | None],
    escape: Callable[[str], str] | None = None,
) -> str:
    """Rebuild ``sql`` with each placeholder replaced by ``replace(name)``.

    Placeholders for which ``replace`` returns None are kept. ``escape`` is
    applied to the text between placeholders.
    """
    parts = []
    position = 0
    for placeholder in find_placeholders(sql):
        text = sql[position : placeholder.start]
        parts.append(escape(text) if escape else text)
        replacement = replace(placeholder.name)
        parts.append(sql[placeholder.start : placeholder.end] if replacement is None else replacement)
        position = placeholder.end

    tail = sql[position:]
    parts.append(escape(tail) if escape else tail)
    return "".join(parts)


def normalize_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Accept both ``{"id": 1}`` and ``{":id": 1}`` style parameter keys."""
    if not params:
        return {}
    return {key.lstrip(":"): value for key, value in params.items()}


def is_array_param(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def expand_array_params(sql: str, params: Mapping[str, Any]) -> tuple[str, dict[str, Any]]:
    """Expand sequence-valued parameters into placeholder lists.

    ``:ids`` bound to ``[1, 2, 3]`` becomes ``(:ids0, :ids1, :ids2)`` and the
    parameter set gains ``ids0``, ``ids1`` and ``ids2`` in place of ``ids``.
    An empty sequence becomes ``(NULL)``, which matches nothing.

    When a generated name is already used by a placeholder or a parameter,
    underscores are appended to the stem: ``:ids`` next to ``:ids0`` expands
    to ``(:ids_0, ...)``.
    """
    arrays = {key: value for key, value in params.items() if is_array_param(value)}
    if not arrays:
        return sql, dict(params)

    final = {key: value for key, value in params.items() if key not in arrays}
    additions = {}
    replacements = {}
    taken = {placeholder.name for placeholder in find_placeholders(sql)} | set(params)

    for key, values in arrays.items():
        stem = key
        while any(f"{stem}{i}" in taken for i in range(len(values))):
            stem += "_"
        names = [f"{stem}{i}" for i in range(len(values))]
        taken.update(names)
        additions.update(zip(names, values))
        if names:
            replacements[key] = "(" + ", ".join(f":{name}" for name in names) + ")"
        else:
            replacements[key] = "(NULL)"

    final.update(additions)
    return rewrite_placeholders(sql, replacements.get), final
