"""
Command context for shared setup across CLI commands.
"""

import traceback

import typer

from dialectdb.config import ConnectionOptions, DatabaseConfigManager
from dialectdb.connection import Connection

from .utils import setup_logging


class CommandContext:
    """
    Shared context for CLI commands.

    Handles common setup: logging and opening the connection either from an
    explicit DSN or from a named configuration.
    """

    def __init__(
        self,
        dsn: str | None = None,
        config_name: str = "default",
        project_root: str | None = None,
        verbose: bool = False,
    ) -> None:
        self.verbose = verbose
        setup_logging(self.verbose)

        self.dsn = dsn
        self.config_name = config_name
        self.project_root = project_root

    def connect(self) -> Connection:
        """Open the connection selected by the command line options."""
        if self.dsn:
            return Connection.open(self.dsn, ConnectionOptions(dsn=self.dsn))

        return DatabaseConfigManager(self.project_root).connect(self.config_name)

    def handle_error(self, error: Exception, show_traceback: bool | None = None) -> None:
        """
        Handle errors consistently across commands.

        Args:
            error: The exception that occurred
            show_traceback: Whether to show traceback (defaults to verbose mode)
        """
        if show_traceback is None:
            show_traceback = self.verbose

        error_prefix = typer.style("Error: ", fg=typer.colors.RED, bold=True)
        typer.echo(f"{error_prefix}{error}", err=True)
        if show_traceback:
            traceback.print_exc()
        raise typer.Exit(1)
