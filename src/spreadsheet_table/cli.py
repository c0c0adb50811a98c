"""Typer CLI: inspect, aggregate, concatenate and compare delimited tables."""

import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import typer

from spreadsheet_table.aggregation import CellRange, Coordinate
from spreadsheet_table.config import settings, validate_settings_on_startup
from spreadsheet_table.ingestion import DelimitedReadOptions, DelimitedTableReader
from spreadsheet_table.models import EmptyRangePolicy, Operation, RaggedRowPolicy
from spreadsheet_table.rendering import TableRenderer
from spreadsheet_table.table import Table
from spreadsheet_table.utils.exceptions import SpreadsheetError
from spreadsheet_table.utils.logging import (
    clear_context,
    configure_logging,
    get_logger,
    set_command,
    set_source,
)

logger = get_logger(__name__)

_MAIN_HELP = """\
Read delimited text files as typed tables and compute range aggregates.

Coordinates are zero-based ROW,COL pairs; ranges are inclusive.

Exit codes: 0=success, 1=tables differ (compare), 2=error
"""

app = typer.Typer(
    help=_MAIN_HELP,
    no_args_is_help=True,
    add_completion=False,
)

PathArg = Annotated[
    Path, typer.Argument(help="Delimited text file to read.", show_default=False)
]
DelimiterOpt = Annotated[
    Optional[str],
    typer.Option("--delimiter", "-d", help="Field delimiter (defaults to settings)."),
]
RaggedOpt = Annotated[
    Optional[RaggedRowPolicy],
    typer.Option("--ragged", help="How to reconcile rows of differing length."),
]


def parse_coordinate(text: str) -> Coordinate:
    """Parse a ``ROW,COL`` pair."""
    parts = text.split(",")
    if len(parts) != 2:
        raise typer.BadParameter(f"expected ROW,COL, got {text!r}")
    try:
        return (int(parts[0].strip()), int(parts[1].strip()))
    except ValueError:
        raise typer.BadParameter(f"expected integer ROW,COL, got {text!r}") from None


def _read(
    path: Path,
    delimiter: str | None,
    ragged: RaggedRowPolicy | None,
) -> Table:
    set_source(str(path))
    options = DelimitedReadOptions.from_settings(settings)
    if delimiter is not None:
        options.delimiter = delimiter
    if ragged is not None:
        options.ragged_rows = ragged
    return DelimitedTableReader().read_path(path, options).table


def _fail(error: SpreadsheetError) -> NoReturn:
    if settings.debug:
        logger.exception("Command failed", error_code=error.error_code.value)
    typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=2)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log at DEBUG level.")
    ] = False,
) -> None:
    clear_context()
    configure_logging(logging.DEBUG if verbose else settings.log_level_int)
    validate_settings_on_startup(settings)


@app.command()
def show(
    path: PathArg,
    delimiter: DelimiterOpt = None,
    ragged: RaggedOpt = None,
) -> None:
    """Print a file as a bordered table."""
    set_command("show")
    try:
        table = _read(path, delimiter, ragged)
    except SpreadsheetError as e:
        _fail(e)
    typer.echo(TableRenderer.from_settings(settings).render(table))


@app.command()
def header(
    path: PathArg,
    delimiter: DelimiterOpt = None,
) -> None:
    """Print the first-row column names, one per line."""
    set_command("header")
    try:
        table = _read(path, delimiter, None)
    except SpreadsheetError as e:
        _fail(e)
    for name in table.header(TableRenderer.from_settings(settings)):
        typer.echo(name)


@app.command()
def aggregate(
    path: PathArg,
    operation: Annotated[
        str, typer.Argument(help="Sum, Prod or Mean (aliases: product, average, avg).")
    ],
    start: Annotated[
        str, typer.Option("--start", "-s", help="Top-left corner as ROW,COL.")
    ],
    end: Annotated[
        Optional[str],
        typer.Option(
            "--end", "-e", help="Bottom-right corner as ROW,COL; defaults to --start."
        ),
    ] = None,
    policy: Annotated[
        Optional[EmptyRangePolicy],
        typer.Option("--policy", help="Behaviour when the range has no numbers."),
    ] = None,
    delimiter: DelimiterOpt = None,
) -> None:
    """Aggregate the numeric cells of an inclusive range."""
    set_command("aggregate")
    if end is None:
        cell_range = CellRange.single(*parse_coordinate(start))
    else:
        cell_range = CellRange.from_corners(
            parse_coordinate(start), parse_coordinate(end)
        )
    try:
        table = _read(path, delimiter, None)
        result = table.aggregate(
            Operation.parse(operation),
            cell_range,
            policy=policy or settings.empty_range_policy,
        )
    except SpreadsheetError as e:
        _fail(e)
    typer.echo(format(result, settings.number_format))


@app.command()
def concat(
    left: PathArg,
    right: PathArg,
    delimiter: DelimiterOpt = None,
) -> None:
    """Print RIGHT's columns appended to LEFT's."""
    set_command("concat")
    try:
        table = _read(left, delimiter, None) + _read(right, delimiter, None)
    except SpreadsheetError as e:
        _fail(e)
    typer.echo(TableRenderer.from_settings(settings).render(table))


@app.command()
def compare(
    left: PathArg,
    right: PathArg,
    delimiter: DelimiterOpt = None,
) -> None:
    """Report whether two files hold equal tables (exit 1 when they differ)."""
    set_command("compare")
    try:
        equal = _read(left, delimiter, None) == _read(right, delimiter, None)
    except SpreadsheetError as e:
        _fail(e)
    typer.echo("equal" if equal else "different")
    if not equal:
        raise typer.Exit(code=1)
