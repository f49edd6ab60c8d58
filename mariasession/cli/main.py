"""Command Line Interface for mariasession."""

import csv
import io
import json
import logging
import sys
from typing import Optional, List

import typer
from rich.console import Console
from rich.table import Table
from tabulate import tabulate

from ..config.settings import Settings, get_settings
from ..database.connection import Connection
from ..database.exceptions import SessionError
from ..database.models import QueryResult

# Initialize CLI app
app = typer.Typer(
    name="mariasession",
    help="Run statements and queries against a MySQL or MariaDB server.",
    add_completion=False
)

# Rich console for beautiful output
console = Console()

MAX_TABLE_ROWS = 50


def setup_logging(debug: bool = False, log_file: Optional[str] = None) -> None:
    """Set up logging configuration."""
    level = logging.DEBUG if debug else logging.INFO
    handlers: List[logging.Handler] = [
        logging.StreamHandler(sys.stdout) if debug else logging.NullHandler()
    ]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


def open_connection(settings: Settings) -> Connection:
    """Connect using the configured options, exiting the CLI on failure."""
    conn = Connection()
    try:
        conn.connect(settings.to_connection_options(), settings.port, settings.client_flag)
    except SessionError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    return conn


def display_query_result(result: QueryResult, output_format: str = "table") -> None:
    """Display query results in the specified format."""
    if result.row_count == 0:
        console.print("[yellow]No results found.[/yellow]")
        return

    output_format = output_format.lower()
    if output_format == "json":
        data = [dict(zip(result.columns, row)) for row in result.rows]
        console.print(json.dumps(data, indent=2, default=str))

    elif output_format == "csv":
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(result.columns)
        writer.writerows(result.rows)
        console.print(output.getvalue())

    elif output_format == "plain":
        console.print(tabulate(result.rows, headers=result.columns, tablefmt="plain"))

    else:  # table format (default)
        table = Table(show_header=True, header_style="bold magenta")
        for column in result.columns:
            table.add_column(column)

        for row in result.rows[:MAX_TABLE_ROWS]:
            table.add_row(*[str(val) if val is not None else "NULL" for val in row])

        console.print(table)

        if result.row_count > MAX_TABLE_ROWS:
            console.print(f"[yellow]Showing first {MAX_TABLE_ROWS} of {result.row_count} results[/yellow]")

    console.print(f"[dim]Fetched in {result.execution_time:.3f} seconds[/dim]")


@app.command()
def test_connection() -> None:
    """Test database connection."""
    settings = get_settings()
    setup_logging(settings.debug, settings.log_file)

    console.print("Testing database connection...")
    with open_connection(settings) as conn:
        info = conn.connection_info()
    console.print(f"[green]✓ Connected to {info.server_version} ({info.con_type})[/green]")


@app.command()
def info() -> None:
    """Show details about the server session."""
    settings = get_settings()
    setup_logging(settings.debug, settings.log_file)

    with open_connection(settings) as conn:
        details = conn.connection_info().to_dict()

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Property")
    table.add_column("Value")
    for key, value in details.items():
        table.add_row(key, str(value))
    console.print(table)


@app.command("exec")
def exec_statements(
    statements: List[str] = typer.Argument(..., help="SQL statements, run in order"),
    transaction: bool = typer.Option(False, "--transaction", "-t", help="Run all statements in one transaction"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging")
) -> None:
    """Execute statements whose results are not needed (DDL, DML)."""
    settings = get_settings()
    setup_logging(debug or settings.debug, settings.log_file)

    with open_connection(settings) as conn:
        try:
            if transaction:
                conn.begin_transaction()
            for sql in statements:
                conn.exec(sql)
                console.print(f"[green]✓[/green] {sql}")
            if transaction:
                conn.commit()
        except SessionError as e:
            if conn.is_transacting:
                conn.rollback()
                console.print("[yellow]Transaction rolled back[/yellow]")
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)


@app.command()
def query(
    sql: str = typer.Argument(..., help="Query returning rows"),
    output_format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: table, json, csv, plain"),
    limit: int = typer.Option(-1, "--limit", "-n", help="Fetch at most this many rows (-1 for all)"),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging")
) -> None:
    """Run a query and print its rows."""
    settings = get_settings()
    setup_logging(debug or settings.debug, settings.log_file)

    with open_connection(settings) as conn:
        try:
            with conn.send_query(sql) as result:
                fetched = result.fetch(limit)
        except SessionError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

    display_query_result(fetched, output_format or settings.default_output_format)


@app.command()
def quote(
    value: Optional[str] = typer.Argument(None, help="String to quote"),
    null: bool = typer.Option(False, "--null", help="Quote a missing value")
) -> None:
    """Print a value as an SQL string literal escaped by the server session."""
    settings = get_settings()
    setup_logging(settings.debug, settings.log_file)

    if value is None and not null:
        console.print("[red]Provide a value or pass --null[/red]")
        raise typer.Exit(1)

    with open_connection(settings) as conn:
        literal = conn.quote(None if null else value)
    console.print(literal, markup=False, highlight=False)


@app.command()
def version() -> None:
    """Show version information."""
    from .. import __version__
    console.print(f"mariasession v{__version__}")


if __name__ == "__main__":
    app()
