"""Utilities package for spreadsheet tables.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from spreadsheet_table.utils.exceptions import (
    AggregationError,
    CellError,
    ErrorCode,
    FileError,
    SpreadsheetError,
    TableError,
)
from spreadsheet_table.utils.logging import (
    LogContext,
    StructuredLogger,
    configure_logging,
    get_logger,
    get_source,
    set_source,
)

__all__ = [
    # Exceptions
    "AggregationError",
    "CellError",
    "ErrorCode",
    "FileError",
    "SpreadsheetError",
    "TableError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "configure_logging",
    "get_logger",
    "get_source",
    "set_source",
]
