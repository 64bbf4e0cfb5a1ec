"""
Schema queries: table and field definitions, indices, existence checks and
introspection.
"""

from dataclasses import dataclass, field
from enum import Enum

from .base import TableQuery


class ColumnType(Enum):
    """Abstract column types that need per-engine mapping.

    Any other column type is given as plain SQL text.
    """

    TINYINT_UNSIGNED = "TINYINT(3) UNSIGNED"
    SMALLINT_UNSIGNED = "SMALLINT(5) UNSIGNED"
    MEDIUMINT_UNSIGNED = "MEDIUMINT(8) UNSIGNED"
    INT_UNSIGNED = "INT(10) UNSIGNED"
    BIGINT_UNSIGNED = "BIGINT(20) UNSIGNED"
    SERIAL = "SERIAL"


@dataclass
class Column:
    """Column definition."""

    name: str
    type: ColumnType | str
    allow_null: bool = True
    # SQL expression, e.g. "0" or "'guest'"
    default: str | None = None

    @property
    def is_serial(self) -> bool:
        return self.type is ColumnType.SERIAL


@dataclass
class Index:
    """Index definition; its name is the key it is stored under."""

    fields: list[str]
    unique: bool = False


@dataclass(eq=False)
class CreateTable(TableQuery):
    """CREATE TABLE query."""

    columns: list[Column] = field(default_factory=list)
    primary_key: list[str] = field(default_factory=list)
    indices: dict[str, Index] = field(default_factory=dict)

    is_operation = True


@dataclass(eq=False)
class DropTable(TableQuery):
    """DROP TABLE query."""

    is_operation = True


@dataclass(eq=False)
class AddField(TableQuery):
    """Add a column to an existing table."""

    field: Column | None = None


@dataclass(eq=False)
class DropField(TableQuery):
    """Drop a column from an existing table."""

    field: str = ""


@dataclass(eq=False)
class AlterField(TableQuery):
    """Change the definition of an existing column.

    ``field.name`` names the column to alter.
    """

    field: Column | None = None

    is_operation = True


@dataclass(eq=False)
class TableExists(TableQuery):
    returns_rows = True
    is_operation = True


@dataclass(eq=False)
class FieldExists(TableQuery):
    field: str = ""

    returns_rows = True
    is_operation = True


@dataclass(eq=False)
class IndexExists(TableQuery):
    index: str = ""

    returns_rows = True
    is_operation = True


@dataclass(eq=False)
class AddIndex(TableQuery):
    """CREATE INDEX query; the index is namespaced to its table."""

    index: str = ""
    fields: list[str] = field(default_factory=list)
    unique: bool = False

    is_operation = True


@dataclass(eq=False)
class DropIndex(TableQuery):
    index: str = ""

    is_operation = True


@dataclass(eq=False)
class TableInfo(TableQuery):
    """Describe a table's columns, primary key and indices."""

    is_operation = True
