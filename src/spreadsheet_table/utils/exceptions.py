"""Centralized exception classes for spreadsheet tables.

Every error raised by the package derives from SpreadsheetError and carries
a stable code plus a details dict describing the offending input.

Exception Hierarchy:
    SpreadsheetError (base)
    ├── CellError
    │   ├── EmptyTextError
    │   └── TypeMismatchError
    ├── TableError
    │   ├── OutOfRangeError
    │   ├── InvalidDimensionsError
    │   └── RowMismatchError
    ├── AggregationError
    │   ├── InvalidRangeError
    │   ├── InvalidOperationError
    │   └── EmptyAggregateError
    └── FileError
        ├── FileOpenError
        ├── FileTooLargeError
        ├── DecodingError
        ├── InvalidDelimiterError
        ├── RaggedRowsError
        ├── EmptyDocumentError
        └── DocumentParseError

The string form is "[Exxxx] message", which is what the CLI prints.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes, one per concrete failure.

    The first digit is the category:
    - E1xxx: Cell errors
    - E2xxx: Table errors
    - E3xxx: Aggregation errors
    - E4xxx: File/ingestion errors
    - E9xxx: Internal/unexpected errors
    """

    # Cell errors (E1xxx)
    EMPTY_TEXT = "E1001"
    TYPE_MISMATCH = "E1002"

    # Table errors (E2xxx)
    OUT_OF_RANGE = "E2001"
    INVALID_DIMENSIONS = "E2002"
    ROW_MISMATCH = "E2003"

    # Aggregation errors (E3xxx)
    INVALID_RANGE = "E3001"
    INVALID_OPERATION = "E3002"
    EMPTY_AGGREGATE = "E3003"

    # File errors (E4xxx)
    FILE_OPEN_FAILED = "E4001"
    FILE_TOO_LARGE = "E4002"
    DECODING_FAILED = "E4003"
    INVALID_DELIMITER = "E4004"
    RAGGED_ROWS = "E4005"
    EMPTY_DOCUMENT = "E4006"
    PARSE_FAILED = "E4007"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"


class SpreadsheetError(Exception):
    """Base exception for all spreadsheet table errors.

    Attributes:
        message: Message without the code prefix.
        error_code: Code identifying the failure.
        details: Structured facts about the failure (coordinates, shape,
            file path, ...), suitable for logging.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Code, message and (when present) details as a plain dict."""
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Cell Errors (E1xxx)
# =============================================================================


class CellError(SpreadsheetError):
    """Base class for cell-level errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.TYPE_MISMATCH,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, error_code, details)


class EmptyTextError(CellError):
    """Raised when a cell is given an empty string as text."""

    def __init__(
        self,
        message: str = "Text cannot be empty",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, ErrorCode.EMPTY_TEXT, details)


class TypeMismatchError(CellError):
    """Raised when a cell is read as a kind it does not hold."""

    def __init__(
        self,
        expected: str,
        actual: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the expected and actual cell kinds.

        Args:
            expected: Kind the caller asked for.
            actual: Kind the cell actually holds.
            message: Replaces the default message.
        """
        details = details or {}
        details["expected_kind"] = expected
        details["actual_kind"] = actual
        message = message or f"Cell does not contain {expected} (holds {actual})"
        super().__init__(message, ErrorCode.TYPE_MISMATCH, details)
        self.expected = expected
        self.actual = actual


# =============================================================================
# Table Errors (E2xxx)
# =============================================================================


class TableError(SpreadsheetError):
    """Base class for table-level errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.OUT_OF_RANGE,
        shape: tuple[int, int] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """``shape`` is the (rows, columns) of the table involved, if known."""
        details = details or {}
        if shape is not None:
            details["shape"] = list(shape)
        super().__init__(message, error_code, details)
        self.shape = shape


class OutOfRangeError(TableError):
    """Raised when a cell coordinate lies outside the table."""

    def __init__(
        self,
        row: int,
        column: int,
        shape: tuple[int, int],
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["row"] = row
        details["column"] = column
        super().__init__(
            f"Invalid cell coordinates ({row}, {column}) for table "
            f"of size {shape[0]}x{shape[1]}",
            error_code=ErrorCode.OUT_OF_RANGE,
            shape=shape,
            details=details,
        )
        self.row = row
        self.column = column


class InvalidDimensionsError(TableError):
    """Raised when a table is built with fewer than one row or column."""

    def __init__(
        self,
        rows: int,
        columns: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Table dimensions must be at least 1x1, got {rows}x{columns}",
            error_code=ErrorCode.INVALID_DIMENSIONS,
            shape=(rows, columns),
            details=details,
        )


class RowMismatchError(TableError):
    """Raised when concatenating tables with different row counts."""

    def __init__(
        self,
        left_rows: int,
        right_rows: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["left_rows"] = left_rows
        details["right_rows"] = right_rows
        super().__init__(
            f"Cannot concatenate tables with {left_rows} and {right_rows} rows",
            error_code=ErrorCode.ROW_MISMATCH,
            details=details,
        )
        self.left_rows = left_rows
        self.right_rows = right_rows


# =============================================================================
# Aggregation Errors (E3xxx)
# =============================================================================


class AggregationError(SpreadsheetError):
    """Base class for range aggregation errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INVALID_RANGE,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, error_code, details)
        self.operation = operation


class InvalidRangeError(AggregationError):
    """Raised when a cell range is malformed or exceeds the table."""

    def __init__(
        self,
        start: tuple[int, int],
        end: tuple[int, int],
        shape: tuple[int, int],
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["start"] = list(start)
        details["end"] = list(end)
        details["shape"] = list(shape)
        super().__init__(
            f"Invalid cell range {start}..{end} for table "
            f"of size {shape[0]}x{shape[1]}",
            error_code=ErrorCode.INVALID_RANGE,
            details=details,
        )
        self.start = start
        self.end = end


class InvalidOperationError(AggregationError):
    """Raised when an aggregate operation name is not recognized."""

    def __init__(
        self,
        name: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"Invalid operation: {name!r}",
            error_code=ErrorCode.INVALID_OPERATION,
            operation=name,
            details=details,
        )


class EmptyAggregateError(AggregationError):
    """Raised when a range holds no numeric cells to aggregate."""

    def __init__(
        self,
        operation: str,
        cells_visited: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["cells_visited"] = cells_visited
        super().__init__(
            f"No numbers in range to calculate {operation}",
            error_code=ErrorCode.EMPTY_AGGREGATE,
            operation=operation,
            details=details,
        )
        self.cells_visited = cells_visited


# =============================================================================
# File Errors (E4xxx)
# =============================================================================


class FileError(SpreadsheetError):
    """Base class for file and ingestion errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.FILE_OPEN_FAILED,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if file_path:
            details["file_path"] = file_path
        super().__init__(message, error_code, details)
        self.file_path = file_path


class FileOpenError(FileError):
    """Raised when a delimited file cannot be opened or read."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = message or f"Unable to open file: {file_path}"
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_OPEN_FAILED,
            file_path=file_path,
            details=details,
        )


class FileTooLargeError(FileError):
    """Raised before reading a file larger than ``max_file_size_mb``."""

    def __init__(
        self,
        file_size: int,
        max_size: int,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["file_size_bytes"] = file_size
        details["max_size_bytes"] = max_size
        message = f"File is {file_size} bytes, the limit is {max_size} bytes"
        super().__init__(
            message=message,
            error_code=ErrorCode.FILE_TOO_LARGE,
            file_path=file_path,
            details=details,
        )
        self.file_size = file_size
        self.max_size = max_size


class DecodingError(FileError):
    """Raised when file content cannot be decoded to text."""

    def __init__(
        self,
        message: str,
        encoding: str | None = None,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if encoding:
            details["encoding"] = encoding
        super().__init__(
            message=message,
            error_code=ErrorCode.DECODING_FAILED,
            file_path=file_path,
            details=details,
        )
        self.encoding = encoding


class InvalidDelimiterError(FileError):
    """Raised when the field delimiter is not a single usable character."""

    def __init__(
        self,
        delimiter: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["delimiter"] = delimiter
        super().__init__(
            message=(
                "Delimiter must be a single non-newline character, "
                f"got {delimiter!r}"
            ),
            error_code=ErrorCode.INVALID_DELIMITER,
            details=details,
        )
        self.delimiter = delimiter


class RaggedRowsError(FileError):
    """Raised when rows differ in length and ragged rows are rejected."""

    def __init__(
        self,
        line_numbers: list[int],
        expected_columns: int,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending lines.

        Args:
            line_numbers: 1-based line numbers whose length differs.
            expected_columns: Column count of the first line.
            file_path: File the lines came from, if any.
        """
        details = details or {}
        details["line_numbers"] = line_numbers
        details["expected_columns"] = expected_columns
        super().__init__(
            message=(
                f"Rows differ in length from the first row ({expected_columns} "
                f"fields) on lines {', '.join(str(n) for n in line_numbers)}"
            ),
            error_code=ErrorCode.RAGGED_ROWS,
            file_path=file_path,
            details=details,
        )
        self.line_numbers = line_numbers
        self.expected_columns = expected_columns


class EmptyDocumentError(FileError):
    """Raised when a delimited document contains no rows."""

    def __init__(
        self,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message="Document contains no rows",
            error_code=ErrorCode.EMPTY_DOCUMENT,
            file_path=file_path,
            details=details,
        )


class DocumentParseError(FileError):
    """Raised when the tokenizer rejects a delimited document."""

    def __init__(
        self,
        reason: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        details["reason"] = reason
        super().__init__(
            message=f"Failed to parse delimited document: {reason}",
            error_code=ErrorCode.PARSE_FAILED,
            file_path=file_path,
            details=details,
        )
