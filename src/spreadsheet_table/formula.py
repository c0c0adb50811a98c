"""Formulas: an aggregate operation bound to a range of a table.

A formula never owns or caches cells. It stores coordinates only and reads
the table it is evaluated against, so it cannot outlive or alias the data.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from spreadsheet_table.aggregation import CellRange, aggregate_range
from spreadsheet_table.cell import Cell
from spreadsheet_table.models import EmptyRangePolicy, Operation
from spreadsheet_table.table import Table
from spreadsheet_table.utils.exceptions import SpreadsheetError
from spreadsheet_table.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Formula:
    """An aggregate over a range, e.g. the mean of rows 1-3 of column 3."""

    cell_range: CellRange
    operation: Operation = Operation.SUM

    def __post_init__(self) -> None:
        object.__setattr__(self, "operation", Operation.parse(self.operation))

    def evaluate(
        self,
        table: Table,
        *,
        policy: EmptyRangePolicy = EmptyRangePolicy.STRICT,
    ) -> float:
        return aggregate_range(table, self.cell_range, self.operation, policy)

    def with_operation(self, operation: Operation | str) -> Formula:
        return replace(self, operation=Operation.parse(operation))

    def snapshot(self, table: Table) -> list[Cell]:
        """Copies of the referenced cells in row-major order."""
        return [cell.copy() for cell in table.iter_range(self.cell_range)]

    def describe(
        self,
        table: Table,
        *,
        policy: EmptyRangePolicy = EmptyRangePolicy.STRICT,
    ) -> str:
        """Evaluate and report the result as a line of text.

        Errors are reported instead of raised: ``"Error: <message>"``.
        """
        try:
            value = self.evaluate(table, policy=policy)
        except SpreadsheetError as e:
            logger.warning(
                "Formula evaluation failed",
                operation=self.operation.value,
                range=str(self.cell_range),
                error_code=e.error_code.value,
            )
            return f"Error: {e.message}"
        return f"Result: {value:g}"

    def __str__(self) -> str:
        return f"{self.operation.value.upper()}{self.cell_range}"
