"""
PostgreSQL dialect and driver.
"""

from .dialect import PostgreSQLDialect
from .driver import PostgreSQLDriver

__all__ = ["PostgreSQLDialect", "PostgreSQLDriver"]
