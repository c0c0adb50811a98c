"""Conversion between tables and pandas DataFrames."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any

import pandas as pd

from spreadsheet_table.cell import Cell
from spreadsheet_table.table import Table
from spreadsheet_table.utils.exceptions import InvalidDimensionsError


def to_dataframe(table: Table, header: bool = False) -> pd.DataFrame:
    """Convert a table to a DataFrame.

    Empty cells become ``None``, numbers floats and text strings. With
    ``header=True`` the first row supplies the column labels.
    """
    rows = [[cell.value for cell in row] for row in table.iter_rows()]
    if header:
        columns = table.header()
        return pd.DataFrame(rows[1:], columns=columns, dtype=object)
    return pd.DataFrame(rows, dtype=object)


def _cell_from_value(value: Any) -> Cell:
    if value is None or value is pd.NA or value is pd.NaT:
        return Cell.make_empty()
    if isinstance(value, bool):
        return Cell.make_text(str(value))
    if isinstance(value, Real):
        # pandas stores missing numbers as NaN
        if math.isnan(float(value)):
            return Cell.make_empty()
        return Cell.make_number(float(value))
    if isinstance(value, str):
        return Cell.make_text(value) if value else Cell.make_empty()
    return Cell.make_text(str(value))


def from_dataframe(df: pd.DataFrame, include_header: bool = False) -> Table:
    """Build a table from a DataFrame.

    Missing values (None, NaN, NA) and empty strings become empty cells,
    real numbers become numbers and everything else becomes text. Booleans
    are kept as text ("True"/"False") since cells have no boolean kind.

    Raises:
        InvalidDimensionsError: If the DataFrame has no rows or columns.
    """
    grid: list[list[Cell]] = []
    if include_header:
        grid.append([_cell_from_value(str(label)) for label in df.columns])
    for record in df.itertuples(index=False, name=None):
        grid.append([_cell_from_value(value) for value in record])

    if not grid or not grid[0]:
        raise InvalidDimensionsError(len(df.index), len(df.columns))
    return Table.from_cells(grid)
