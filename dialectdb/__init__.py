"""
dialectdb

A database access layer: engine-independent query objects compiled into
dialect-correct SQL and executed through prepared statements.
"""

from .config import ConnectionOptions, DatabaseConfigManager, load_connection_options
from .connection import Connection, QueryLogEntry
from .dialects import DialectName, list_available_dialects
from .exceptions import CompileError, ConfigurationError, DialectDBError, DriverError
from .query import (
    AddField,
    AddIndex,
    AlterField,
    Column,
    ColumnType,
    CreateTable,
    Delete,
    Direct,
    DropField,
    DropIndex,
    DropTable,
    FieldExists,
    Index,
    IndexExists,
    Insert,
    Join,
    OperationResult,
    Replace,
    Select,
    TableExists,
    TableInfo,
    Truncate,
    Update,
)

__all__ = [
    "Connection",
    "QueryLogEntry",
    "ConnectionOptions",
    "DatabaseConfigManager",
    "load_connection_options",
    "DialectName",
    "list_available_dialects",
    # Errors
    "DialectDBError",
    "ConfigurationError",
    "CompileError",
    "DriverError",
    # Queries
    "Select",
    "Join",
    "Insert",
    "Update",
    "Delete",
    "Replace",
    "Truncate",
    "Direct",
    "CreateTable",
    "DropTable",
    "AddField",
    "DropField",
    "AlterField",
    "TableExists",
    "FieldExists",
    "IndexExists",
    "AddIndex",
    "DropIndex",
    "TableInfo",
    "Column",
    "ColumnType",
    "Index",
    "OperationResult",
]
