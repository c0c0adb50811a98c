"""In-memory table: a fixed rows x columns grid of typed cells."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import Any

from spreadsheet_table.aggregation import (
    CellRange,
    Coordinate,
    aggregate_range,
)
from spreadsheet_table.cell import Cell
from spreadsheet_table.models import EmptyRangePolicy, Operation
from spreadsheet_table.rendering import TableRenderer
from spreadsheet_table.utils.exceptions import (
    InvalidDimensionsError,
    OutOfRangeError,
    RowMismatchError,
)
from spreadsheet_table.utils.logging import get_logger

logger = get_logger(__name__)


class Table:
    """A rows x columns grid of cells with range aggregation.

    Every slot is populated (empty by default) and the dimensions never
    change after construction, except through in-place concatenation which
    appends columns. The table owns its cells: copies and concatenations
    duplicate them, so no cell is ever shared between two tables.
    """

    def __init__(self, rows: int = 1, columns: int = 1) -> None:
        """Create a table of empty cells.

        Args:
            rows: Number of rows, at least 1.
            columns: Number of columns, at least 1.

        Raises:
            InvalidDimensionsError: If either dimension is below 1.
        """
        if rows < 1 or columns < 1:
            raise InvalidDimensionsError(rows, columns)
        self._rows = rows
        self._columns = columns
        self._cells: list[list[Cell]] = [
            [Cell() for _ in range(columns)] for _ in range(rows)
        ]

    @classmethod
    def from_cells(cls, rows: Sequence[Sequence[Cell]]) -> Table:
        """Build a table from a rectangular grid of cells.

        The cells are copied; the caller keeps ownership of its own grid.

        Raises:
            InvalidDimensionsError: If the grid is empty or not rectangular.
        """
        row_count = len(rows)
        column_count = len(rows[0]) if rows else 0
        if row_count == 0 or column_count == 0:
            raise InvalidDimensionsError(row_count, column_count)
        if any(len(row) != column_count for row in rows):
            raise InvalidDimensionsError(
                row_count,
                column_count,
                details={"row_lengths": [len(row) for row in rows]},
            )
        table = cls.__new__(cls)
        table._rows = row_count
        table._columns = column_count
        table._cells = [[cell.copy() for cell in row] for row in rows]
        return table

    # ------------------------------------------------------------------ #
    # Shape and access
    # ------------------------------------------------------------------ #

    @property
    def rows(self) -> int:
        return self._rows

    @property
    def columns(self) -> int:
        return self._columns

    @property
    def size(self) -> tuple[int, int]:
        """(rows, columns) of the table."""
        return (self._rows, self._columns)

    def get_size(self) -> tuple[int, int]:
        return self.size

    def _validate_coordinates(self, row: int, column: int) -> None:
        if not (0 <= row < self._rows and 0 <= column < self._columns):
            raise OutOfRangeError(row, column, self.size)

    def get_cell(self, row: int, column: int) -> Cell:
        """Return the live cell at ``(row, column)``.

        Mutating the returned cell mutates the table. Negative indices are
        rejected rather than counted from the end.

        Raises:
            OutOfRangeError: If the coordinates lie outside the table.
        """
        self._validate_coordinates(row, column)
        return self._cells[row][column]

    def set_number(self, row: int, column: int, value: float) -> None:
        self._validate_coordinates(row, column)
        self._cells[row][column].set_number(value)

    def set_text(self, row: int, column: int, text: str) -> None:
        self._validate_coordinates(row, column)
        self._cells[row][column].set_text(text)

    def clear_cell(self, row: int, column: int) -> None:
        self._validate_coordinates(row, column)
        self._cells[row][column].clear()

    def iter_rows(self) -> Iterator[tuple[Cell, ...]]:
        """Yield each row as a tuple of cells, top to bottom."""
        for row in self._cells:
            yield tuple(row)

    def iter_range(self, cell_range: CellRange) -> Iterator[Cell]:
        """Yield the cells of ``cell_range`` in row-major order.

        Raises:
            InvalidRangeError: If the range does not fit the table.
        """
        cell_range.validate(self._rows, self._columns)
        for row, column in cell_range.cells():
            yield self._cells[row][column]

    def header(self, renderer: TableRenderer | None = None) -> list[str]:
        """Names of the columns, read from the first row.

        Text is returned as-is, numbers through the renderer's number
        format and empty cells as the renderer's placeholder.
        """
        renderer = renderer or TableRenderer()
        return [renderer.format_cell(cell) for cell in self._cells[0]]

    # ------------------------------------------------------------------ #
    # Aggregation
    # ------------------------------------------------------------------ #

    def aggregate(
        self,
        operation: Operation | str,
        cell_range: CellRange,
        *,
        policy: EmptyRangePolicy = EmptyRangePolicy.STRICT,
    ) -> float:
        """Aggregate the numeric cells of ``cell_range``.

        Raises:
            InvalidRangeError: If the range is malformed or outside the table.
            InvalidOperationError: If ``operation`` is an unknown name.
            EmptyAggregateError: If the range holds no numeric cell and the
                policy requires one.
        """
        return aggregate_range(self, cell_range, operation, policy)

    def calculate_sum(self, start: Coordinate, end: Coordinate) -> float:
        return self.aggregate(Operation.SUM, CellRange.from_corners(start, end))

    def calculate_prod(self, start: Coordinate, end: Coordinate) -> float:
        return self.aggregate(Operation.PRODUCT, CellRange.from_corners(start, end))

    def calculate_mean(self, start: Coordinate, end: Coordinate) -> float:
        return self.aggregate(Operation.MEAN, CellRange.from_corners(start, end))

    def calculate_operation(
        self,
        operation: str,
        start: Coordinate,
        end: Coordinate,
        *,
        policy: EmptyRangePolicy = EmptyRangePolicy.PERMISSIVE,
    ) -> float:
        """Aggregate by operation name ("Sum", "Prod" or "Mean").

        Unlike the dedicated ``calculate_*`` methods this entry point is
        permissive by default: an all non-numeric range yields 0.0 for a sum
        and 1.0 for a product, while a mean still raises.
        """
        return self.aggregate(
            operation, CellRange.from_corners(start, end), policy=policy
        )

    # ------------------------------------------------------------------ #
    # Concatenation
    # ------------------------------------------------------------------ #

    def concat(self, other: Table) -> Table:
        """Return a new table with ``other``'s columns appended to the right.

        Raises:
            RowMismatchError: If the row counts differ.
        """
        if self._rows != other._rows:
            raise RowMismatchError(self._rows, other._rows)
        result = Table.from_cells(
            [left + right for left, right in zip(self._cells, other._cells)]
        )
        logger.debug(
            "Concatenated tables",
            left=f"{self._rows}x{self._columns}",
            right=f"{other._rows}x{other._columns}",
        )
        return result

    def concat_in_place(self, other: Table) -> Table:
        """Append ``other``'s columns to this table and return it.

        Concatenating a table with itself doubles its columns.

        Raises:
            RowMismatchError: If the row counts differ.
        """
        if self._rows != other._rows:
            raise RowMismatchError(self._rows, other._rows)
        appended = [[cell.copy() for cell in row] for row in other._cells]
        for row, extra in zip(self._cells, appended):
            row.extend(extra)
        self._columns += other._columns
        return self

    def __add__(self, other: object) -> Table:
        if not isinstance(other, Table):
            return NotImplemented
        return self.concat(other)

    def __iadd__(self, other: object) -> Table:
        if not isinstance(other, Table):
            return NotImplemented
        return self.concat_in_place(other)

    # ------------------------------------------------------------------ #
    # Value semantics
    # ------------------------------------------------------------------ #

    def copy(self) -> Table:
        return Table.from_cells(self._cells)

    __copy__ = copy

    def __deepcopy__(self, memo: dict[int, Any]) -> Table:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        """Same size and cell-by-cell equal, numbers compared exactly.

        A table is always equal to itself, but one holding a NaN number is
        never equal to its copy because NaN cells compare unequal.
        """
        if not isinstance(other, Table):
            return NotImplemented
        if other is self:
            return True
        if self.size != other.size:
            return False
        return all(
            left == right
            for left_row, right_row in zip(self._cells, other._cells)
            for left, right in zip(left_row, right_row)
        )

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return TableRenderer().render(self)

    def __repr__(self) -> str:
        return f"Table(rows={self._rows}, columns={self._columns})"
