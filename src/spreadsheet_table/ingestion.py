"""Delimited text ingestion: build a Table from lines of separated fields.

Lines are tokenized by pandas on a single-character delimiter with quoting
turned off. Every field becomes a cell: an empty field is an empty cell, a
field that is an ASCII number literal in full is a number, anything else is
text. Rows of differing length are reconciled according to a RaggedRowPolicy.
"""

import codecs
import csv
import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import chardet
import pandas as pd

from spreadsheet_table.cell import Cell
from spreadsheet_table.config import Settings, settings
from spreadsheet_table.models import RaggedRowPolicy
from spreadsheet_table.table import Table
from spreadsheet_table.utils.exceptions import (
    DecodingError,
    DocumentParseError,
    EmptyDocumentError,
    FileOpenError,
    FileTooLargeError,
    InvalidDelimiterError,
    RaggedRowsError,
)
from spreadsheet_table.utils.logging import LogContext, get_logger, timed_operation

logger = get_logger(__name__)

_NUMBER_PATTERN = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?|nan|inf(?:inity)?)",
    re.ASCII | re.IGNORECASE,
)


@dataclass
class DelimitedReadOptions:
    """Options controlling delimited file ingestion."""

    delimiter: str = ","
    ragged_rows: RaggedRowPolicy = RaggedRowPolicy.PAD
    encoding: str | None = None
    max_file_size_bytes: int | None = None

    @classmethod
    def from_settings(cls, s: Settings) -> "DelimitedReadOptions":
        return cls(
            delimiter=s.default_delimiter,
            ragged_rows=s.ragged_rows,
            encoding=s.file_encoding,
            max_file_size_bytes=s.max_file_size_bytes,
        )


@dataclass
class DelimitedReadResult:
    """Result of reading a delimited document."""

    table: Table
    """The table built from the document."""

    source: str | None
    """File path or other identifier of the input, if known."""

    encoding: str
    """Detected or configured encoding (e.g., 'utf-8', 'latin-1')."""

    encoding_confidence: float
    """Confidence score for encoding detection (0.0-1.0)."""

    row_count: int
    """Number of rows in the table (blank lines excluded)."""

    column_count: int
    """Number of columns after ragged-row reconciliation."""

    ragged_line_count: int = 0
    """Number of lines that were padded or trimmed."""

    def to_dict(self) -> dict[str, Any]:
        """Convert result metadata to a dictionary.

        Returns:
            Dictionary representation without the table itself.
        """
        return {
            "source": self.source,
            "encoding": self.encoding,
            "encoding_confidence": self.encoding_confidence,
            "row_count": self.row_count,
            "column_count": self.column_count,
            "ragged_line_count": self.ragged_line_count,
        }


class DelimitedTableReader:
    """Reads delimited text files into tables.

    Encoding is taken from the options when set, otherwise detected with
    chardet and falling back through common encodings.
    """

    FALLBACK_ENCODINGS = ["utf-8", "cp1252", "latin-1"]

    MIN_ENCODING_CONFIDENCE = 0.5

    def read_path(
        self,
        file_path: str | Path,
        options: DelimitedReadOptions | None = None,
    ) -> DelimitedReadResult:
        """Read a delimited file from disk.

        Args:
            file_path: Path of the file to read.
            options: Read options; defaults come from settings.

        Returns:
            DelimitedReadResult with the table and read metadata.

        Raises:
            FileOpenError: If the file is missing, not a file, or unreadable.
            FileTooLargeError: If the file exceeds the configured size limit.
            DecodingError: If the content cannot be decoded.
            InvalidDelimiterError: If the delimiter is unusable.
            RaggedRowsError: If rows differ in length under the REJECT policy.
            EmptyDocumentError: If the file holds no rows.
        """
        opts = options or DelimitedReadOptions.from_settings(settings)
        path = Path(file_path)
        if not path.is_file():
            raise FileOpenError(str(file_path))

        try:
            file_size = path.stat().st_size
            if (
                opts.max_file_size_bytes is not None
                and file_size > opts.max_file_size_bytes
            ):
                raise FileTooLargeError(
                    file_size, opts.max_file_size_bytes, file_path=str(file_path)
                )
            content = path.read_bytes()
        except OSError as e:
            raise FileOpenError(
                str(file_path), message=f"Unable to open file {file_path}: {e}"
            ) from e

        return self.read_content(content, opts, source=str(file_path))

    def read_content(
        self,
        content: bytes,
        options: DelimitedReadOptions | None = None,
        source: str | None = None,
    ) -> DelimitedReadResult:
        """Read a delimited document from raw bytes.

        Args:
            content: Document bytes.
            options: Read options; defaults come from settings.
            source: Identifier used in errors and logs.

        Returns:
            DelimitedReadResult with the table and read metadata.
        """
        opts = options or DelimitedReadOptions.from_settings(settings)
        if opts.encoding:
            encoding, confidence = opts.encoding, 1.0
        else:
            encoding, confidence = self._detect_encoding(content)
        text, encoding = self._decode_content(
            content, encoding, source, strict=bool(opts.encoding)
        )
        return self.parse_text(
            text,
            opts,
            source=source,
            encoding=encoding,
            encoding_confidence=confidence,
        )

    def parse_text(
        self,
        text: str,
        options: DelimitedReadOptions | None = None,
        *,
        source: str | None = None,
        encoding: str = "utf-8",
        encoding_confidence: float = 1.0,
    ) -> DelimitedReadResult:
        """Build a table from already decoded text.

        Blank lines are skipped. A line ending in the delimiter does not
        produce a trailing empty field.
        """
        opts = options or DelimitedReadOptions.from_settings(settings)
        delimiter = opts.delimiter
        if len(delimiter) != 1 or delimiter in "\r\n":
            raise InvalidDelimiterError(delimiter)

        with LogContext(source=source):
            with timed_operation(logger, "read_delimited") as metrics:
                text = text.replace("\r\n", "\n").replace("\r", "\n")
                numbered = [
                    (number, line)
                    for number, line in enumerate(text.split("\n"), start=1)
                    if line != ""
                ]
                if not numbered:
                    raise EmptyDocumentError(file_path=source)

                try:
                    rows = self.split_lines([line for _, line in numbered], delimiter)
                except pd.errors.EmptyDataError as e:
                    raise EmptyDocumentError(file_path=source) from e
                except (pd.errors.ParserError, csv.Error) as e:
                    raise DocumentParseError(str(e), file_path=source) from e

                parsed = [
                    (number, [self.parse_field(field) for field in fields])
                    for (number, _), fields in zip(numbered, rows)
                ]
                grid, ragged_count = self._reconcile(parsed, opts.ragged_rows, source)
                table = Table.from_cells(grid)
                metrics.rows_read = len(parsed)
                metrics.cells_visited = table.rows * table.columns

            logger.info(
                "Read delimited table",
                rows=table.rows,
                columns=table.columns,
                encoding=encoding,
                ragged_lines=ragged_count,
            )

        return DelimitedReadResult(
            table=table,
            source=source,
            encoding=encoding,
            encoding_confidence=encoding_confidence,
            row_count=table.rows,
            column_count=table.columns,
            ragged_line_count=ragged_count,
        )

    @staticmethod
    def split_lines(lines: list[str], delimiter: str) -> list[list[str]]:
        """Tokenize non-blank lines into fields with pandas.

        Quoting is off, so every delimiter separates two fields and a line
        holds ``count(delimiter) + 1`` of them; pandas pads shorter rows up
        to the widest one and the padding is cut off again here. One trailing
        empty field from a line ending in the delimiter is dropped.

        Raises:
            pandas.errors.ParserError: The tokenizer rejected the text.
        """
        widths = [line.count(delimiter) + 1 for line in lines]
        frame = pd.read_csv(
            io.StringIO("\n".join(lines)),
            sep=delimiter,
            header=None,
            names=list(range(max(widths))),
            index_col=False,
            dtype=str,
            keep_default_na=False,
            quoting=csv.QUOTE_NONE,
            # quotechar must differ from the delimiter even with QUOTE_NONE
            quotechar="'" if delimiter == '"' else '"',
            skip_blank_lines=False,
            engine="python",
        )
        if len(frame) != len(lines):
            raise pd.errors.ParserError(
                f"expected {len(lines)} rows, tokenizer produced {len(frame)}"
            )

        rows: list[list[str]] = []
        for width, values in zip(widths, frame.itertuples(index=False, name=None)):
            fields = ["" if pd.isna(value) else value for value in values[:width]]
            if len(fields) > 1 and fields[-1] == "":
                fields.pop()
            rows.append(fields)
        return rows

    @staticmethod
    def parse_field(field: str) -> Cell:
        """Turn one field into a cell.

        A field is a number only when all of it, surrounding whitespace aside,
        is an ASCII decimal or exponent literal, ``nan`` or ``inf``. So
        "12abc", "1_000" and non-ASCII digits stay text.
        """
        if field == "":
            return Cell.make_empty()
        if _NUMBER_PATTERN.fullmatch(field.strip()):
            return Cell.make_number(float(field))
        return Cell.make_text(field)

    def _reconcile(
        self,
        parsed: list[tuple[int, list[Cell]]],
        policy: RaggedRowPolicy,
        source: str | None,
    ) -> tuple[list[list[Cell]], int]:
        """Bring every row to the same length according to ``policy``.

        Returns:
            Tuple of (rectangular rows, number of rows that changed length).
        """
        lengths = [len(cells) for _, cells in parsed]
        if policy is RaggedRowPolicy.REJECT:
            expected = lengths[0]
            offending = [
                line_number
                for (line_number, cells) in parsed
                if len(cells) != expected
            ]
            if offending:
                raise RaggedRowsError(offending, expected, file_path=source)
            return [cells for _, cells in parsed], 0

        target = max(lengths) if policy is RaggedRowPolicy.PAD else min(lengths)
        grid: list[list[Cell]] = []
        ragged = 0
        for _, cells in parsed:
            if len(cells) != target:
                ragged += 1
            if len(cells) < target:
                cells = cells + [Cell.make_empty() for _ in range(target - len(cells))]
            grid.append(cells[:target])

        if ragged:
            logger.debug(
                "Reconciled ragged rows",
                policy=policy.value,
                ragged_lines=ragged,
                columns=target,
            )
        return grid, ragged

    def _detect_encoding(self, content: bytes) -> tuple[str, float]:
        """Guess the encoding of ``content`` with chardet.

        Returns the codec name and chardet's confidence. When chardet is
        unsure the first fallback that decodes cleanly is used with a fixed
        confidence of 0.5.
        """
        if not content:
            return "utf-8", 1.0

        guess = chardet.detect(content)
        name = guess.get("encoding")
        confidence = guess.get("confidence") or 0.0
        if name and confidence >= self.MIN_ENCODING_CONFIDENCE:
            try:
                codec = codecs.lookup(name).name
            except LookupError:
                logger.debug("chardet proposed an unknown codec", encoding=name)
            else:
                logger.debug("Detected encoding", encoding=codec, confidence=confidence)
                return codec, confidence

        for candidate in self.FALLBACK_ENCODINGS:
            try:
                content.decode(candidate)
            except UnicodeDecodeError:
                continue
            logger.debug("Using fallback encoding", encoding=candidate)
            return candidate, 0.5

        # Unreachable in practice: latin-1 maps every byte.
        return "latin-1", 0.0

    def _decode_content(
        self,
        content: bytes,
        encoding: str,
        source: str | None,
        *,
        strict: bool,
    ) -> tuple[str, str]:
        """Decode ``content`` and return the text with the codec that worked.

        With ``strict`` only ``encoding`` is tried. Otherwise the fallback
        encodings are tried in order after it.

        Raises:
            DecodingError: No candidate codec decodes the content.
        """
        candidates = [encoding]
        if not strict:
            candidates += [c for c in self.FALLBACK_ENCODINGS if c != encoding]

        failure: UnicodeDecodeError | LookupError | None = None
        for candidate in candidates:
            try:
                return content.decode(candidate), candidate
            except (UnicodeDecodeError, LookupError) as exc:
                failure = failure or exc

        raise DecodingError(
            f"Cannot decode content as {encoding}: {failure}",
            encoding=encoding,
            file_path=source,
        ) from failure


def read_table(
    file_path: str | Path,
    delimiter: str | None = None,
    ragged_rows: RaggedRowPolicy | None = None,
) -> Table:
    """Read a delimited file and return just the table.

    Unspecified options fall back to the global settings.
    """
    options = DelimitedReadOptions.from_settings(settings)
    if delimiter is not None:
        options.delimiter = delimiter
    if ragged_rows is not None:
        options.ragged_rows = ragged_rows
    return DelimitedTableReader().read_path(file_path, options).table


# Silence chardet's verbose debug output when the root logger is at DEBUG
logging.getLogger("chardet").setLevel(logging.WARNING)
