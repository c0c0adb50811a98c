"""Range aggregation: sum, product and mean over the numeric cells of a range.

The fold visits cells in row-major, left-to-right order so floating point
results are reproducible bit for bit. Cells that are empty or hold text are
skipped; they count towards neither the total nor the mean's denominator.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from spreadsheet_table.cell import Cell
from spreadsheet_table.models import CellKind, EmptyRangePolicy, Operation
from spreadsheet_table.utils.exceptions import EmptyAggregateError, InvalidRangeError
from spreadsheet_table.utils.logging import get_logger

if TYPE_CHECKING:
    from spreadsheet_table.table import Table

logger = get_logger(__name__)

Coordinate = tuple[int, int]


@dataclass(frozen=True)
class CellRange:
    """Inclusive rectangular range between two corner coordinates."""

    top: int
    left: int
    bottom: int
    right: int

    @classmethod
    def from_corners(cls, start: Coordinate, end: Coordinate) -> CellRange:
        """Build a range from ``(row, col)`` top-left and bottom-right corners."""
        return cls(top=start[0], left=start[1], bottom=end[0], right=end[1])

    @classmethod
    def single(cls, row: int, column: int) -> CellRange:
        """Range covering one cell."""
        return cls(top=row, left=column, bottom=row, right=column)

    @property
    def start(self) -> Coordinate:
        return (self.top, self.left)

    @property
    def end(self) -> Coordinate:
        return (self.bottom, self.right)

    @property
    def shape(self) -> tuple[int, int]:
        return (self.bottom - self.top + 1, self.right - self.left + 1)

    @property
    def size(self) -> int:
        rows, columns = self.shape
        return rows * columns

    def is_valid_for(self, rows: int, columns: int) -> bool:
        return (
            0 <= self.top <= self.bottom < rows
            and 0 <= self.left <= self.right < columns
        )

    def validate(self, rows: int, columns: int) -> None:
        """Check the range against a table of the given size.

        Raises:
            InvalidRangeError: If a corner is negative, the corners are out of
                order, or the bottom-right corner lies outside the table.
        """
        if not self.is_valid_for(rows, columns):
            raise InvalidRangeError(self.start, self.end, (rows, columns))

    def cells(self) -> Iterator[Coordinate]:
        """Yield every coordinate of the range in row-major order."""
        for row in range(self.top, self.bottom + 1):
            for column in range(self.left, self.right + 1):
                yield (row, column)

    def __str__(self) -> str:
        return f"({self.top},{self.left})..({self.bottom},{self.right})"


@dataclass
class _Fold:
    total: float = 0.0
    product: float = 1.0
    numeric_cells: int = 0
    cells_visited: int = 0


def aggregate_cells(
    cells: Iterable[Cell],
    operation: Operation | str,
    policy: EmptyRangePolicy = EmptyRangePolicy.STRICT,
) -> float:
    """Fold the numeric cells of ``cells`` with ``operation``.

    Cells are consumed in the order given. Non-numeric cells are skipped.

    Args:
        cells: Cells to aggregate.
        operation: Operation or operation name.
        policy: Behaviour when no numeric cell is found.

    Returns:
        The aggregate value.

    Raises:
        InvalidOperationError: If ``operation`` is an unknown name.
        EmptyAggregateError: If no numeric cell was found and the policy
            (or the mean's division) requires one.
    """
    op = Operation.parse(operation)
    fold = _Fold()
    for cell in cells:
        fold.cells_visited += 1
        if cell.kind is not CellKind.NUMBER:
            continue
        value = cell.get_number()
        fold.numeric_cells += 1
        if op is Operation.PRODUCT:
            fold.product *= value
        else:
            fold.total += value

    if fold.numeric_cells == 0 and (
        policy is EmptyRangePolicy.STRICT or op is Operation.MEAN
    ):
        raise EmptyAggregateError(op.value, fold.cells_visited)

    if op is Operation.SUM:
        result = fold.total
    elif op is Operation.PRODUCT:
        result = fold.product
    else:
        result = fold.total / fold.numeric_cells

    logger.log_aggregate_result(
        op.value, fold.cells_visited, fold.numeric_cells, result=result
    )
    return result


def aggregate_range(
    table: Table,
    cell_range: CellRange,
    operation: Operation | str,
    policy: EmptyRangePolicy = EmptyRangePolicy.STRICT,
) -> float:
    """Validate ``cell_range`` against ``table`` and aggregate it.

    Raises:
        InvalidRangeError: If the range is malformed or outside the table.
        InvalidOperationError: If ``operation`` is an unknown name.
        EmptyAggregateError: See :func:`aggregate_cells`.
    """
    rows, columns = table.size
    cell_range.validate(rows, columns)
    return aggregate_cells(table.iter_range(cell_range), operation, policy)
