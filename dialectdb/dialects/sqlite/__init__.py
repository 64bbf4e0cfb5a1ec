"""
SQLite dialect and driver.
"""

from .dialect import SQLiteDialect
from .driver import SQLiteDriver

__all__ = ["SQLiteDialect", "SQLiteDriver"]
