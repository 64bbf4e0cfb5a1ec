"""
dialectdb CLI Main Module

Command-line interface for inspecting and querying databases through dialectdb.
"""

import typer

from dialectdb.dialects import list_available_dialects
from dialectdb.exceptions import DialectDBError
from dialectdb.query import Direct

from .context import CommandContext
from .utils import OutputFormat, parse_params, render


class AlphabeticalOrderGroup(typer.core.TyperGroup):
    """Custom Typer Group that lists commands in alphabetical order."""

    def list_commands(self, ctx: typer.Context) -> list[str]:
        return sorted(self.commands.keys())


def validate_format(value: str) -> OutputFormat:
    """Validate format option (json or yaml)."""
    if value not in ["json", "yaml"]:
        raise typer.BadParameter(
            typer.style("Error: ", fg=typer.colors.RED, bold=True)
            + f"Invalid format '{value}'. Must be 'json' or 'yaml'."
        )
    return value  # type: ignore[return-value]


app = typer.Typer(
    name="dialectdb",
    help="dialectdb - one query model, many SQL dialects",
    add_completion=False,
    cls=AlphabeticalOrderGroup,
    invoke_without_command=True,
)


@app.callback()
def main_callback(ctx: typer.Context) -> None:
    """Main CLI callback - shows help when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


# Common option definitions to reduce duplication
DSN_OPTION = typer.Option(None, "--dsn", help="Connection DSN, e.g. sqlite:app.db")
CONFIG_OPTION = typer.Option(
    "default", "-c", "--config", help="Named configuration in pyproject.toml"
)
PROJECT_ROOT_OPTION = typer.Option(
    None, "--project-root", help="Directory containing pyproject.toml"
)
FORMAT_OPTION = typer.Option(
    "json", "-f", "--format", help="Output format: json or yaml", callback=validate_format
)
VERBOSE_OPTION = typer.Option(False, "-v", "--verbose", help="Enable verbose output")


@app.command()
def dialects() -> None:
    """List the supported SQL dialects."""
    for name in list_available_dialects():
        typer.echo(name)


@app.command()
def info(
    table: str = typer.Argument(..., help="Table to describe"),
    dsn: str | None = DSN_OPTION,
    config: str = CONFIG_OPTION,
    project_root: str | None = PROJECT_ROOT_OPTION,
    format: str = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Describe a table's columns, keys and indices."""
    ctx = CommandContext(dsn, config, project_root, verbose)
    try:
        with ctx.connect() as connection:
            if not connection.table_exists(table):
                raise DialectDBError(f"Table '{table}' does not exist")
            typer.echo(render(connection.table_info(table), format))
    except DialectDBError as e:
        ctx.handle_error(e)


@app.command()
def exists(
    table: str = typer.Argument(..., help="Table to look for"),
    field: str | None = typer.Option(None, "--field", help="Check for a field of the table"),
    index: str | None = typer.Option(None, "--index", help="Check for an index of the table"),
    dsn: str | None = DSN_OPTION,
    config: str = CONFIG_OPTION,
    project_root: str | None = PROJECT_ROOT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Check whether a table, field or index exists; exits with 1 when it does not."""
    if field and index:
        raise typer.BadParameter("Use either --field or --index, not both.")

    ctx = CommandContext(dsn, config, project_root, verbose)
    try:
        with ctx.connect() as connection:
            if field:
                found = connection.field_exists(table, field)
            elif index:
                found = connection.index_exists(table, index)
            else:
                found = connection.table_exists(table)
    except DialectDBError as e:
        ctx.handle_error(e)

    typer.echo("yes" if found else "no")
    if not found:
        raise typer.Exit(1)


@app.command()
def query(
    sql: str = typer.Argument(..., help="SQL statement with optional :name placeholders"),
    params: str | None = typer.Option(
        None, "-p", "--params", help="Placeholder values (JSON object)"
    ),
    dsn: str | None = DSN_OPTION,
    config: str = CONFIG_OPTION,
    project_root: str | None = PROJECT_ROOT_OPTION,
    format: str = FORMAT_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Execute a SQL statement and print its rows or affected row count."""
    ctx = CommandContext(dsn, config, project_root, verbose)
    try:
        values = parse_params(params)
        with ctx.connect() as connection:
            result = connection.execute(Direct(sql), values)
    except (DialectDBError, ValueError) as e:
        ctx.handle_error(e)

    if isinstance(result, int):
        typer.echo(render({"affected_rows": result}, format))
    else:
        typer.echo(render(result, format))


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
