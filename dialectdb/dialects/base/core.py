"""
Core dialect base class.
"""

import logging
from typing import TYPE_CHECKING
from weakref import WeakKeyDictionary

from .compiler import StatementCompiler
from .metadata import MetadataHandler
from .operations import SchemaOperations

if TYPE_CHECKING:
    from dialectdb.connection import Connection


class SQLDialect(StatementCompiler, SchemaOperations, MetadataHandler):
    """
    Generic SQL dialect.

    A dialect is bound to one connection, which it uses for quoting, the
    table prefix and running multi-statement operations. Engine dialects
    subclass it and override the rules where their engine differs.
    """

    name = "sql"

    def __init__(self, connection: "Connection") -> None:
        self.connection = connection
        self.logger = logging.getLogger(self.__class__.__name__)
        # Sub-statements of operation queries, keyed by the query object
        self._statements = WeakKeyDictionary()
