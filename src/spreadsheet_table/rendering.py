"""Console rendering of tables as bordered text grids."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from spreadsheet_table.cell import Cell
from spreadsheet_table.models import CellKind

if TYPE_CHECKING:
    from spreadsheet_table.config import Settings
    from spreadsheet_table.table import Table

Alignment = Literal["left", "right"]

# Each column is followed by " |  ", and the separator line covers it.
COLUMN_PADDING = 4


class TableRenderer:
    """Render a table as text.

    Example output for a 2x2 table (each row line also ends with two
    spaces)::

        ------------------
        |user_id |  1   |
        ------------------
        |None    |  2.5 |
        ------------------

    Column widths come from a first pass over every cell, using the same
    strings that are printed afterwards.
    """

    def __init__(
        self,
        placeholder: str = "None",
        number_format: str = "g",
        align: Alignment = "left",
    ) -> None:
        """Initialize the renderer.

        Args:
            placeholder: Text shown for empty cells.
            number_format: ``format()`` spec applied to numeric cells. The
                default "g" prints up to six significant digits.
            align: Whether values are left or right justified in a column.
        """
        self.placeholder = placeholder
        self.number_format = number_format
        self.align = align

    @classmethod
    def from_settings(cls, settings: Settings) -> TableRenderer:
        return cls(
            placeholder=settings.empty_placeholder,
            number_format=settings.number_format,
            align=settings.render_align,
        )

    def format_cell(self, cell: Cell) -> str:
        if cell.kind is CellKind.EMPTY:
            return self.placeholder
        if cell.kind is CellKind.TEXT:
            return cell.get_text()
        return format(cell.get_number(), self.number_format)

    def column_widths(self, table: Table) -> list[int]:
        widths = [0] * table.columns
        for row in table.iter_rows():
            for index, cell in enumerate(row):
                widths[index] = max(widths[index], len(self.format_cell(cell)))
        return widths

    def render(self, table: Table) -> str:
        """Render ``table`` as a bordered grid, one line per row."""
        widths = self.column_widths(table)
        separator = "-" * sum(width + COLUMN_PADDING for width in widths)
        lines = [separator]
        for row in table.iter_rows():
            parts = ["|"]
            for width, cell in zip(widths, row):
                text = self.format_cell(cell)
                pad = text.ljust if self.align == "left" else text.rjust
                parts.append(f"{pad(width)} |  ")
            lines.append("".join(parts))
            lines.append(separator)
        return "\n".join(lines)
