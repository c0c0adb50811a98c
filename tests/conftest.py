from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from spreadsheet_table.table import Table
from spreadsheet_table.utils.logging import clear_context

TRIPS_CSV = (
    "user_id,trip_id,distance,fare\n"
    "1,100,2.5,20.5\n"
    "2,101,3.5,30.5\n"
    "3,102,15,10\n"
)


@pytest.fixture
def trips_table() -> Table:
    """4x4 table of trips: a text header row above three numeric rows."""
    table = Table(4, 4)
    for column, name in enumerate(["user_id", "trip_id", "distance", "fare"]):
        table.set_text(0, column, name)
    rows = [
        [1, 100, 2.5, 20.5],
        [2, 101, 3.5, 30.5],
        [3, 102, 15, 10],
    ]
    for row, values in enumerate(rows, start=1):
        for column, value in enumerate(values):
            table.set_number(row, column, value)
    return table


@pytest.fixture
def mixed_table() -> Table:
    """3x2 table with a text header row over two numeric rows.

        A    B
        2.5  3.5
        15   10
    """
    table = Table(3, 2)
    table.set_text(0, 0, "A")
    table.set_text(0, 1, "B")
    table.set_number(1, 0, 2.5)
    table.set_number(1, 1, 3.5)
    table.set_number(2, 0, 15)
    table.set_number(2, 1, 10)
    return table


@pytest.fixture
def trips_csv(tmp_path: Path) -> Path:
    path = tmp_path / "trips.csv"
    path.write_text(TRIPS_CSV, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _reset_log_context() -> Iterator[None]:
    clear_context()
    yield
    clear_context()


@pytest.fixture
def restore_root_logging() -> Iterator[None]:
    """Undo handler and level changes made by configure_logging."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
