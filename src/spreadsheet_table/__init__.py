"""Spreadsheet Table - typed cell grids with range aggregation."""

from spreadsheet_table.aggregation import CellRange, aggregate_cells, aggregate_range
from spreadsheet_table.cell import Cell
from spreadsheet_table.formula import Formula
from spreadsheet_table.ingestion import DelimitedTableReader, read_table
from spreadsheet_table.models import (
    CellKind,
    EmptyRangePolicy,
    Operation,
    RaggedRowPolicy,
)
from spreadsheet_table.rendering import TableRenderer
from spreadsheet_table.table import Table

__all__ = [
    "Cell",
    "CellKind",
    "CellRange",
    "DelimitedTableReader",
    "EmptyRangePolicy",
    "Formula",
    "Operation",
    "RaggedRowPolicy",
    "Table",
    "TableRenderer",
    "aggregate_cells",
    "aggregate_range",
    "read_table",
]
__version__ = "0.1.0"


def main() -> None:
    """Run the command line interface."""
    from spreadsheet_table.cli import app

    app()
