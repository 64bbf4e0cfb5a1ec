"""
Custom exceptions for the database access layer.
"""


class DialectDBError(Exception):
    """Base exception for all dialectdb errors."""

    pass


class ConfigurationError(DialectDBError):
    """Raised when a required connection option is missing or invalid."""

    pass


class CompileError(DialectDBError):
    """Raised when a query is structurally invalid for compilation."""

    pass


class DriverError(DialectDBError):
    """Raised when the underlying driver reports a failure.

    The message is the driver's native error text, the original exception
    is kept on ``native``.
    """

    def __init__(self, message: str, native: BaseException | None = None) -> None:
        super().__init__(message)
        self.native = native
