"""
Result types returned by schema operations.
"""

from dataclasses import dataclass
from typing import Any, TypedDict

from dialectdb.exceptions import DriverError


class ColumnInfo(TypedDict):
    type: str
    default: Any
    allow_null: bool


class IndexInfo(TypedDict):
    fields: list[str]
    unique: bool


class TableInfoResult(TypedDict):
    """Normalized table description, identical across engines."""

    columns: dict[str, ColumnInfo]
    primary_key: list[str]
    unique: list[list[str]]
    indices: dict[str, IndexInfo]


def empty_table_info() -> TableInfoResult:
    return {"columns": {}, "primary_key": [], "unique": [], "indices": {}}


@dataclass(frozen=True)
class OperationResult:
    """Outcome of a schema operation that reports failure instead of raising.

    Truthy on success. On failure ``error`` holds the driver error that
    caused it, so callers can branch with a plain ``if`` and still inspect
    the cause.
    """

    ok: bool
    error: DriverError | None = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls) -> "OperationResult":
        return cls(True)

    @classmethod
    def failure(cls, error: DriverError) -> "OperationResult":
        return cls(False, error)
