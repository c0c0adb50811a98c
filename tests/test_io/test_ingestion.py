"""Tests for delimited text ingestion."""

import logging
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from spreadsheet_table.cell import Cell
from spreadsheet_table.ingestion import (
    DelimitedReadOptions,
    DelimitedReadResult,
    DelimitedTableReader,
    read_table,
)
from spreadsheet_table.models import CellKind, RaggedRowPolicy
from spreadsheet_table.table import Table
from spreadsheet_table.utils.exceptions import (
    DecodingError,
    DocumentParseError,
    EmptyDocumentError,
    ErrorCode,
    FileError,
    FileOpenError,
    FileTooLargeError,
    InvalidDelimiterError,
    RaggedRowsError,
)


@pytest.fixture
def reader() -> DelimitedTableReader:
    return DelimitedTableReader()


def _options(**kwargs: object) -> DelimitedReadOptions:
    return DelimitedReadOptions(**kwargs)  # type: ignore[arg-type]


class TestParseField:
    """Tests for single-field parsing."""

    def test_empty_field(self) -> None:
        """An empty field becomes an empty cell."""
        assert DelimitedTableReader.parse_field("").is_empty

    @pytest.mark.parametrize(
        ("field", "expected"),
        [
            ("20.5", 20.5),
            ("100", 100.0),
            ("-3", -3.0),
            ("+4.", 4.0),
            (".5", 0.5),
            ("1e3", 1000.0),
            ("2.5E-1", 0.25),
            (" 7 ", 7.0),
            ("-Infinity", float("-inf")),
        ],
    )
    def test_numbers(self, field: str, expected: float) -> None:
        """ASCII decimal and exponent literals become numbers."""
        assert DelimitedTableReader.parse_field(field).get_number() == expected

    def test_nan_literal(self) -> None:
        """The nan literal is a number, not text."""
        cell = DelimitedTableReader.parse_field("NaN")
        assert cell.kind is CellKind.NUMBER

    @pytest.mark.parametrize(
        "field",
        ["user_id", "12abc", "1,5", " ", "1_000", "١٢", "１２", "0x1A", "e5", "."],
    )
    def test_text(self, field: str) -> None:
        """Anything that is not a plain ASCII number literal stays text."""
        cell = DelimitedTableReader.parse_field(field)
        assert cell.kind is CellKind.TEXT
        assert cell.get_text() == field


class TestSplitLines:
    """Tests for tokenizing lines into fields."""

    def test_plain_split(self) -> None:
        """Fields are separated by the delimiter."""
        assert DelimitedTableReader.split_lines(["a,b,c"], ",") == [["a", "b", "c"]]

    def test_trailing_delimiter_is_ignored(self) -> None:
        """A line ending in the delimiter has no trailing empty field."""
        assert DelimitedTableReader.split_lines(["a,b,"], ",") == [["a", "b"]]

    def test_only_one_trailing_field_is_dropped(self) -> None:
        """Only the last empty field is dropped."""
        assert DelimitedTableReader.split_lines(["a,,"], ",") == [["a", ""]]

    def test_inner_empty_fields_are_kept(self) -> None:
        """Empty fields between delimiters survive as empty strings."""
        assert DelimitedTableReader.split_lines(["a,,c"], ",") == [["a", "", "c"]]

    def test_line_without_delimiter(self) -> None:
        """A line without the delimiter is a single field."""
        assert DelimitedTableReader.split_lines(["abc"], ";") == [["abc"]]

    def test_rows_keep_their_own_length(self) -> None:
        """Short rows are not padded to the widest row."""
        rows = DelimitedTableReader.split_lines(["a,b,c", "1", "2,3"], ",")
        assert rows == [["a", "b", "c"], ["1"], ["2", "3"]]

    def test_quotes_are_literal(self) -> None:
        """Quote characters do not group fields."""
        rows = DelimitedTableReader.split_lines(['"a,b",c'], ",")
        assert rows == [['"a', 'b"', "c"]]

    def test_na_markers_stay_text(self) -> None:
        """Strings pandas would read as missing are kept verbatim."""
        rows = DelimitedTableReader.split_lines(["NA,None,null,"], ",")
        assert rows == [["NA", "None", "null"]]

    def test_whitespace_is_preserved(self) -> None:
        """Leading and trailing spaces stay inside the field."""
        assert DelimitedTableReader.split_lines([" a ; b"], ";") == [[" a ", " b"]]


class TestParseText:
    """Tests for building tables from decoded text."""

    def test_trips_document(self, reader: DelimitedTableReader) -> None:
        """Header and numeric rows are parsed into typed cells."""
        text = "user_id,fare\n1,20.5\n2,30.5\n"
        result = reader.parse_text(text, _options())

        assert isinstance(result, DelimitedReadResult)
        assert result.row_count == 3
        assert result.column_count == 2
        table = result.table
        assert table.header() == ["user_id", "fare"]
        assert table.get_cell(2, 1).get_number() == 30.5
        assert table.calculate_mean((1, 1), (2, 1)) == 25.5

    def test_custom_delimiter(self, reader: DelimitedTableReader) -> None:
        """A configured delimiter is used to split fields."""
        result = reader.parse_text("a;b\n1;2", _options(delimiter=";"))
        assert result.table.size == (2, 2)
        assert result.table.get_cell(1, 1).get_number() == 2.0

    def test_blank_lines_are_skipped(self, reader: DelimitedTableReader) -> None:
        """Blank lines do not produce rows."""
        result = reader.parse_text("a,b\n\n1,2\n\n", _options())
        assert result.table.size == (2, 2)

    def test_crlf_line_endings(self, reader: DelimitedTableReader) -> None:
        """Windows line endings are normalized."""
        result = reader.parse_text("a,b\r\n1,2\r\n", _options())
        assert result.table.get_cell(0, 1).get_text() == "b"
        assert result.table.get_cell(1, 1).get_number() == 2.0

    def test_empty_fields_become_empty_cells(
        self, reader: DelimitedTableReader
    ) -> None:
        """An empty field yields an empty cell."""
        result = reader.parse_text("1,,3", _options())
        assert result.table.get_cell(0, 1).is_empty

    def test_empty_document(self, reader: DelimitedTableReader) -> None:
        """Text without content lines raises EmptyDocumentError."""
        with pytest.raises(EmptyDocumentError) as exc_info:
            reader.parse_text("\n\n", _options(), source="blank.csv")
        assert exc_info.value.error_code == ErrorCode.EMPTY_DOCUMENT
        assert exc_info.value.file_path == "blank.csv"

    @pytest.mark.parametrize("delimiter", ["", ",,", "\n", "\r"])
    def test_invalid_delimiter(
        self, reader: DelimitedTableReader, delimiter: str
    ) -> None:
        """Delimiters that are not one non-newline character are rejected."""
        with pytest.raises(InvalidDelimiterError) as exc_info:
            reader.parse_text("a,b", _options(delimiter=delimiter))
        assert exc_info.value.error_code == ErrorCode.INVALID_DELIMITER

    def test_read_is_logged(
        self, reader: DelimitedTableReader, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A successful read is logged with its row count."""
        with caplog.at_level(logging.INFO, logger="spreadsheet_table.ingestion"):
            reader.parse_text("a,b\n1,2", _options(), source="inline")
        assert "Read delimited table" in caplog.text
        assert "rows=2" in caplog.text

    def test_tokenizer_failure_is_a_file_error(
        self, reader: DelimitedTableReader
    ) -> None:
        """A pandas ParserError surfaces as DocumentParseError."""
        with patch.object(
            pd, "read_csv", side_effect=pd.errors.ParserError("bad line")
        ):
            with pytest.raises(DocumentParseError) as exc_info:
                reader.parse_text("a,b\n1,2", _options(), source="broken.csv")
        error = exc_info.value
        assert isinstance(error, FileError)
        assert error.error_code == ErrorCode.PARSE_FAILED
        assert error.file_path == "broken.csv"
        assert error.details["reason"] == "bad line"

    def test_tokenizer_empty_data_is_an_empty_document(
        self, reader: DelimitedTableReader
    ) -> None:
        """A pandas EmptyDataError surfaces as EmptyDocumentError."""
        with patch.object(
            pd, "read_csv", side_effect=pd.errors.EmptyDataError("no columns")
        ):
            with pytest.raises(EmptyDocumentError):
                reader.parse_text("a,b", _options(), source="inline")

    def test_quoted_fields_are_not_unquoted(
        self, reader: DelimitedTableReader
    ) -> None:
        """Quoted fields are split on every delimiter."""
        result = reader.parse_text('"x,y",1', _options())
        assert result.table.header() == ['"x', 'y"', "1"]


class TestRaggedRows:
    """Tests for each ragged-row policy."""

    TEXT = "a,b,c\n1,2\n3,4,5,6\n"

    def test_pad(self, reader: DelimitedTableReader) -> None:
        """Short rows are padded with empty cells to the widest row."""
        result = reader.parse_text(self.TEXT, _options(ragged_rows=RaggedRowPolicy.PAD))
        table = result.table
        assert table.size == (3, 4)
        assert table.get_cell(0, 3).is_empty
        assert table.get_cell(1, 2).is_empty
        assert table.get_cell(2, 3).get_number() == 6.0
        assert result.ragged_line_count == 2

    def test_trim(self, reader: DelimitedTableReader) -> None:
        """Every row is cut to the shortest row."""
        result = reader.parse_text(
            self.TEXT, _options(ragged_rows=RaggedRowPolicy.TRIM)
        )
        assert result.table.size == (3, 2)
        assert result.table.header() == ["a", "b"]
        assert result.ragged_line_count == 2

    def test_reject(self, reader: DelimitedTableReader) -> None:
        """Ragged rows raise with their line numbers."""
        with pytest.raises(RaggedRowsError) as exc_info:
            reader.parse_text(
                self.TEXT,
                _options(ragged_rows=RaggedRowPolicy.REJECT),
                source="ragged.csv",
            )
        error = exc_info.value
        assert error.error_code == ErrorCode.RAGGED_ROWS
        assert error.line_numbers == [2, 3]
        assert error.expected_columns == 3
        assert error.file_path == "ragged.csv"

    def test_reject_line_numbers_count_blank_lines(
        self, reader: DelimitedTableReader
    ) -> None:
        """Reported line numbers are physical line numbers."""
        with pytest.raises(RaggedRowsError) as exc_info:
            reader.parse_text(
                "a,b\n\n1\n", _options(ragged_rows=RaggedRowPolicy.REJECT)
            )
        assert exc_info.value.line_numbers == [3]

    def test_rectangular_input_is_not_ragged(
        self, reader: DelimitedTableReader
    ) -> None:
        """Rectangular input passes the reject policy."""
        result = reader.parse_text(
            "a,b\n1,2", _options(ragged_rows=RaggedRowPolicy.REJECT)
        )
        assert result.ragged_line_count == 0


class TestReadPath:
    """Tests for reading files from disk."""

    def test_read_trips_file(
        self, reader: DelimitedTableReader, trips_csv: Path, trips_table: Table
    ) -> None:
        """A file on disk reads into the expected table."""
        result = reader.read_path(trips_csv, _options())
        assert result.table == trips_table
        assert result.source == str(trips_csv)
        assert result.encoding in {"ascii", "utf-8"}

    def test_missing_file(self, reader: DelimitedTableReader, tmp_path: Path) -> None:
        """A missing file raises FileOpenError."""
        missing = tmp_path / "missing.csv"
        with pytest.raises(FileOpenError) as exc_info:
            reader.read_path(missing, _options())
        error = exc_info.value
        assert isinstance(error, FileError)
        assert error.error_code == ErrorCode.FILE_OPEN_FAILED
        assert error.file_path == str(missing)
        assert str(error) == f"[E4001] Unable to open file: {missing}"

    def test_directory_is_not_a_file(
        self, reader: DelimitedTableReader, tmp_path: Path
    ) -> None:
        """A directory path raises FileOpenError."""
        with pytest.raises(FileOpenError):
            reader.read_path(tmp_path, _options())

    def test_file_too_large(
        self, reader: DelimitedTableReader, trips_csv: Path
    ) -> None:
        """Files over the size limit are refused."""
        with pytest.raises(FileTooLargeError) as exc_info:
            reader.read_path(trips_csv, _options(max_file_size_bytes=10))
        assert exc_info.value.max_size == 10
        assert exc_info.value.error_code == ErrorCode.FILE_TOO_LARGE

    def test_explicit_encoding(
        self, reader: DelimitedTableReader, tmp_path: Path
    ) -> None:
        """An explicit encoding is used as given."""
        path = tmp_path / "latin.csv"
        path.write_bytes("café;prix\nthé;2.5\n".encode("latin-1"))
        result = reader.read_path(path, _options(delimiter=";", encoding="latin-1"))
        assert result.encoding == "latin-1"
        assert result.encoding_confidence == 1.0
        assert result.table.header() == ["café", "prix"]
        assert result.table.get_cell(1, 0).get_text() == "thé"

    def test_explicit_encoding_must_decode(
        self, reader: DelimitedTableReader, tmp_path: Path
    ) -> None:
        """An explicit encoding that fails raises DecodingError."""
        path = tmp_path / "bad.csv"
        path.write_bytes(b"a,\xff\xfe\xfa\n")
        with pytest.raises(DecodingError) as exc_info:
            reader.read_path(path, _options(encoding="utf-8"))
        assert exc_info.value.encoding == "utf-8"
        assert exc_info.value.error_code == ErrorCode.DECODING_FAILED

    def test_detected_encoding_falls_back(self, reader: DelimitedTableReader) -> None:
        """A wrong guess is recovered by the fallback list, which is reported."""
        text, used = reader._decode_content(b"caf\xe9", "utf-8", None, strict=False)
        assert text == "café"
        assert used == "cp1252"

    def test_result_to_dict(
        self, reader: DelimitedTableReader, trips_csv: Path
    ) -> None:
        """The result summary leaves out the table."""
        data = reader.read_path(trips_csv, _options()).to_dict()
        assert data["row_count"] == 4
        assert data["column_count"] == 4
        assert data["ragged_line_count"] == 0
        assert "table" not in data


class TestReadContent:
    """Tests for reading raw bytes."""

    def test_empty_bytes(self, reader: DelimitedTableReader) -> None:
        """Empty content raises EmptyDocumentError."""
        with pytest.raises(EmptyDocumentError):
            reader.read_content(b"", _options())

    def test_ascii_content(self, reader: DelimitedTableReader) -> None:
        """Raw bytes are decoded and parsed."""
        result = reader.read_content(b"x,1\ny,2\n", _options(), source="bytes")
        assert result.table.get_cell(1, 1).get_number() == 2.0
        assert result.source == "bytes"


class TestReadTable:
    """Tests for the read_table convenience function."""

    def test_read_table(self, trips_csv: Path, trips_table: Table) -> None:
        """read_table returns the parsed table."""
        assert read_table(trips_csv) == trips_table

    def test_read_table_with_overrides(self, tmp_path: Path) -> None:
        """Keyword overrides reach the reader options."""
        path = tmp_path / "semi.csv"
        path.write_text("a;b\n1\n", encoding="utf-8")
        with pytest.raises(RaggedRowsError):
            read_table(path, delimiter=";", ragged_rows=RaggedRowPolicy.REJECT)

    def test_round_trip_through_rendered_cells(self, tmp_path: Path) -> None:
        """Text, empty and number fields keep their kinds."""
        path = tmp_path / "mixed.csv"
        path.write_text("name,,3\n", encoding="utf-8")
        table = read_table(path)
        assert list(table.iter_rows())[0] == (
            Cell.make_text("name"),
            Cell.make_empty(),
            Cell.make_number(3.0),
        )
