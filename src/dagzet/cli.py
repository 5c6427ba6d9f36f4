"""CLI for checking, exporting and querying dagzet graphs."""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .constants import (
    DEFAULT_DB_NAME,
    DEFAULT_LOG_LEVEL,
    ENV_DB_PATH,
    ENV_LOG_LEVEL,
    STDIN_FILENAME,
)
from .errors import (
    AmbiguousSuffixError,
    CycleError,
    InvalidGraphError,
    LineError,
    SuffixNotFoundError,
    UnknownNodesError,
    ValidationError,
)
from .export import SourceFile, SQLiteExporter
from .interpreter import DagZet
from .validate import validate
from .views import node_rows

console = Console()
logger = logging.getLogger("dagzet")


def load_files(paths: tuple[str, ...]) -> tuple[DagZet, list[SourceFile]]:
    """Interpret every file into one builder.

    Returns the builder plus the node id range each file declared.

    Raises:
        LineError: first directive that failed, with file and line number
    """
    dz = DagZet()
    sources: list[SourceFile] = []

    for path in paths:
        first_id = len(dz.store.nodes) + 1
        name = "<stdin>" if path == STDIN_FILENAME else path
        with click.open_file(path, "r", encoding="utf-8") as f:
            lines = (line.rstrip("\r\n") for line in f)
            count = dz.parse_lines(lines, filename=name)
        logger.debug(f"Read {count} lines from {name}")
        sources.append(SourceFile(name, first_id, len(dz.store.nodes) + 1))

    return dz, sources


def _report_line_error(e: LineError) -> None:
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    console.print(f"  {e.line}", style="dim", markup=False, highlight=False)


def _report_validation_error(e: ValidationError) -> None:
    if isinstance(e, InvalidGraphError):
        for error in e.errors:
            _report_validation_error(error)
        return
    if isinstance(e, UnknownNodesError):
        table = Table(title="Unknown nodes")
        table.add_column("Name", style="red")
        for name in sorted(e.nodes):
            table.add_row(name)
    elif isinstance(e, CycleError):
        table = Table(title="Cycles")
        table.add_column("From", style="cyan")
        table.add_column("To", style="cyan")
        for left, right in e.names:
            table.add_row(left, right)
    else:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        return
    console.print(table)


def _load_and_validate(ctx: click.Context, files: tuple[str, ...]):
    """Shared front half of check/export: exits 1 on any failure."""
    try:
        dz, sources = load_files(files)
    except LineError as e:
        _report_line_error(e)
        ctx.exit(1)

    try:
        validate(dz)
    except ValidationError as e:
        _report_validation_error(e)
        ctx.exit(1)

    return dz, sources


@click.group()
@click.option(
    "--log-level",
    envvar=ENV_LOG_LEVEL,
    default=DEFAULT_LOG_LEVEL,
    show_default=True,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging level for diagnostics on stderr",
)
@click.pass_context
def cli(ctx, log_level):
    """dagzet - build and validate knowledge graphs from directive files."""
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


files_argument = click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, allow_dash=True, dir_okay=False),
)


@cli.command()
@files_argument
@click.pass_context
def check(ctx, files):
    """Interpret FILES and validate the resulting graph."""
    dz, _ = _load_and_validate(ctx, files)
    store = dz.store
    console.print(
        f"[green]✓[/green] [bold]{len(store.nodes)}[/bold] nodes, "
        f"[bold]{len(store.connections)}[/bold] connections"
    )


@cli.command()
@files_argument
@click.option(
    "--db",
    "db_path",
    envvar=ENV_DB_PATH,
    default=DEFAULT_DB_NAME,
    show_default=True,
    type=click.Path(path_type=Path, dir_okay=False),
    help="SQLite database to write",
)
@click.pass_context
def export(ctx, files, db_path):
    """Validate FILES and write the graph to a SQLite database."""
    dz, sources = _load_and_validate(ctx, files)

    with SQLiteExporter(db_path) as exporter:
        counts = exporter.export(dz, sources)

    table = Table(title=f"Exported to {db_path}")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right", style="green")
    for name, rows in counts.items():
        if rows:
            table.add_row(name, str(rows))
    console.print(table)


@cli.command()
@files_argument
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def nodes(ctx, files, as_json):
    """List declared nodes with their ids."""
    try:
        dz, _ = load_files(files)
    except LineError as e:
        _report_line_error(e)
        ctx.exit(1)

    rows = [node.to_summary() for node in node_rows(dz.store)]
    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    table = Table()
    table.add_column("ID", justify="right", style="yellow")
    table.add_column("Name", style="cyan")
    for row in rows:
        table.add_row(str(row["id"]), row["name"])
    console.print(table)


@cli.command()
@click.argument("suffix")
@files_argument
@click.pass_context
def find(ctx, suffix, files):
    """Resolve a unique path SUFFIX against the nodes declared in FILES."""
    try:
        dz, _ = load_files(files)
    except LineError as e:
        _report_line_error(e)
        ctx.exit(1)

    trie = dz.build_trie()
    try:
        path = trie.search(suffix)
    except (SuffixNotFoundError, AmbiguousSuffixError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        ctx.exit(1)

    click.echo(path)


if __name__ == "__main__":
    cli()
