"""
DuckDB dialect and driver.
"""

from .dialect import DuckDBDialect
from .driver import DuckDBDriver

__all__ = ["DuckDBDialect", "DuckDBDriver"]
