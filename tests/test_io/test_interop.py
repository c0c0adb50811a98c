"""Tests for pandas DataFrame conversion."""

import pandas as pd
import pytest

from spreadsheet_table.interop import from_dataframe, to_dataframe
from spreadsheet_table.models import CellKind
from spreadsheet_table.table import Table
from spreadsheet_table.utils.exceptions import InvalidDimensionsError


class TestToDataFrame:
    """Tests for to_dataframe."""

    def test_shape_and_values(self, mixed_table: Table) -> None:
        """The frame has one row per table row and raw cell values."""
        df = to_dataframe(mixed_table)
        assert df.shape == (3, 2)
        assert df.iloc[0, 0] == "A"
        assert df.iloc[1, 1] == 3.5

    def test_empty_cells_become_none(self) -> None:
        """Empty cells map to None."""
        table = Table(1, 2)
        table.set_number(0, 0, 1.0)
        df = to_dataframe(table)
        assert df.iloc[0, 1] is None

    def test_header_row_becomes_columns(self, trips_table: Table) -> None:
        """With a header, the first row names the columns."""
        df = to_dataframe(trips_table, header=True)
        assert list(df.columns) == ["user_id", "trip_id", "distance", "fare"]
        assert df.shape == (3, 4)
        assert df["fare"].tolist() == [20.5, 30.5, 10.0]

    def test_dtype_is_object(self, trips_table: Table) -> None:
        """Columns keep mixed values as object dtype."""
        df = to_dataframe(trips_table)
        assert all(dtype == object for dtype in df.dtypes)


class TestFromDataFrame:
    """Tests for from_dataframe."""

    def test_numeric_frame(self) -> None:
        """Numeric columns become number cells."""
        df = pd.DataFrame({"x": [1, 2], "y": [2.5, 3.5]})
        table = from_dataframe(df)
        assert table.size == (2, 2)
        assert table.get_cell(0, 0).get_number() == 1.0
        assert table.get_cell(1, 1).get_number() == 3.5

    def test_include_header(self) -> None:
        """Column names can be written as the first row."""
        df = pd.DataFrame({"name": ["a"], "fare": [20.5]})
        table = from_dataframe(df, include_header=True)
        assert table.size == (2, 2)
        assert table.header() == ["name", "fare"]
        assert table.get_cell(1, 0).get_text() == "a"

    def test_missing_values_become_empty(self) -> None:
        """NaN, None and empty strings become empty cells."""
        df = pd.DataFrame({"a": [None, "x"], "b": [float("nan"), 1.0], "c": ["", "y"]})
        table = from_dataframe(df)
        assert table.get_cell(0, 0).is_empty
        assert table.get_cell(0, 1).is_empty
        assert table.get_cell(0, 2).is_empty
        assert table.get_cell(1, 1).get_number() == 1.0

    def test_booleans_become_text(self) -> None:
        """Booleans are stored as text, not numbers."""
        df = pd.DataFrame({"flag": [True, False]}, dtype=object)
        table = from_dataframe(df)
        assert table.get_cell(0, 0).get_text() == "True"
        assert table.get_cell(1, 0).get_text() == "False"

    def test_other_objects_become_text(self) -> None:
        """Unknown objects are stored through str()."""
        df = pd.DataFrame({"when": [pd.Timestamp("2024-01-02")]}, dtype=object)
        table = from_dataframe(df)
        assert table.get_cell(0, 0).kind is CellKind.TEXT
        assert table.get_cell(0, 0).get_text().startswith("2024-01-02")

    def test_empty_frame_is_rejected(self) -> None:
        """A frame with no rows or columns cannot become a table."""
        with pytest.raises(InvalidDimensionsError):
            from_dataframe(pd.DataFrame())

    def test_round_trip(self, trips_table: Table) -> None:
        """A table survives conversion to a frame and back."""
        table = trips_table.copy()
        table.clear_cell(2, 2)
        assert from_dataframe(to_dataframe(table)) == table

    def test_round_trip_with_header(self, trips_table: Table) -> None:
        """The header row survives a round trip."""
        df = to_dataframe(trips_table, header=True)
        assert from_dataframe(df, include_header=True) == trips_table
