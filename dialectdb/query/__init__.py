"""
Engine independent query model.
"""

from .base import Query, TableQuery
from .dml import Delete, Direct, Insert, Join, Replace, Select, Truncate, Update
from .results import ColumnInfo, IndexInfo, OperationResult, TableInfoResult
from .schema import (
    AddField,
    AddIndex,
    AlterField,
    Column,
    ColumnType,
    CreateTable,
    DropField,
    DropIndex,
    DropTable,
    FieldExists,
    Index,
    IndexExists,
    TableExists,
    TableInfo,
)

__all__ = [
    "Query",
    "TableQuery",
    # Data manipulation
    "Select",
    "Join",
    "Insert",
    "Update",
    "Delete",
    "Replace",
    "Truncate",
    "Direct",
    # Schema
    "Column",
    "ColumnType",
    "Index",
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
    # Results
    "OperationResult",
    "TableInfoResult",
    "ColumnInfo",
    "IndexInfo",
]
