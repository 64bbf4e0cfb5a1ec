"""
Base dialect classes.

This module provides the core SQLDialect class and the driver interface.
"""

from .core import SQLDialect
from .driver import Driver, PreparedStatement

__all__ = [
    "SQLDialect",
    "Driver",
    "PreparedStatement",
]
