"""Structured logging for spreadsheet tables.

Log lines carry ``key=value`` fields after the message and, through
``StructuredLogFormatter``, a bracketed prefix built from context variables:
the CLI command being run, the source file being read and any extra fields
pushed with ``LogContext``.

Usage:
    from spreadsheet_table.utils.logging import LogContext, get_logger

    logger = get_logger(__name__)

    with LogContext(source="data/trips.csv", operation="mean"):
        logger.info("Aggregating range", cells=3)
    # [source=data/trips.csv operation=mean] Aggregating range | cells=3

    with timed_operation(logger, "read_delimited") as metrics:
        metrics.rows_read = 120
"""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, field
from typing import Any

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_source_var: ContextVar[str | None] = ContextVar("source", default=None)
_command_var: ContextVar[str | None] = ContextVar("command", default=None)
_fields_var: ContextVar[dict[str, Any] | None] = ContextVar("fields", default=None)


def get_source() -> str | None:
    """File path (or other identifier) of the data being processed."""
    return _source_var.get()


def set_source(source: str | None) -> None:
    _source_var.set(source)


def get_command() -> str | None:
    """Name of the CLI command being run, if any."""
    return _command_var.get()


def set_command(command: str | None) -> None:
    _command_var.set(command)


def get_extra_context() -> dict[str, Any]:
    return dict(_fields_var.get() or {})


def clear_context() -> None:
    """Reset source, command and extra fields."""
    _source_var.set(None)
    _command_var.set(None)
    _fields_var.set(None)


def context_prefix() -> str:
    """Bracketed ``[k=v ...]`` prefix for the current context, or ""."""
    pairs: list[tuple[str, Any]] = []
    if command := get_command():
        pairs.append(("command", command))
    if source := get_source():
        pairs.append(("source", source))
    pairs.extend(get_extra_context().items())
    if not pairs:
        return ""
    return "[" + " ".join(f"{key}={value}" for key, value in pairs) + "] "


@dataclass
class PerformanceMetrics:
    """Counters collected while reading or aggregating a table.

    Attributes:
        operation: Name of the measured operation.
        duration_seconds: Wall time, set by ``finish()``.
        cells_visited: Cells read.
        numeric_cells: Numeric cells folded into an aggregate.
        rows_read: Input rows parsed.
        custom_metrics: Any other counters worth logging.
    """

    operation: str
    started_at: float = field(default_factory=time.perf_counter)
    finished_at: float | None = None
    duration_seconds: float = 0.0
    cells_visited: int = 0
    numeric_cells: int = 0
    rows_read: int = 0
    custom_metrics: dict[str, Any] = field(default_factory=dict)

    def finish(self) -> None:
        self.finished_at = time.perf_counter()
        self.duration_seconds = self.finished_at - self.started_at

    def to_dict(self) -> dict[str, Any]:
        """Operation, duration and every counter that is non-zero."""
        data: dict[str, Any] = {
            "operation": self.operation,
            "duration_seconds": round(self.duration_seconds, 6),
        }
        counters = {
            "cells_visited": self.cells_visited,
            "numeric_cells": self.numeric_cells,
            "rows_read": self.rows_read,
        }
        data.update({name: count for name, count in counters.items() if count})
        if self.custom_metrics:
            data["custom_metrics"] = self.custom_metrics
        return data


class StructuredLogFormatter(logging.Formatter):
    """Formatter that prepends the context prefix to every message.

    The record is copied before the prefix is added so other handlers still
    see the original message.
    """

    def format(self, record: logging.LogRecord) -> str:
        prefix = context_prefix()
        if not prefix:
            return super().format(record)
        prefixed = logging.makeLogRecord(record.__dict__)
        prefixed.msg = f"{prefix}{record.msg}"
        return super().format(prefixed)


class StructuredLogger:
    """Thin wrapper over ``logging.Logger`` taking fields as keyword arguments.

    ``logger.info("Read table", rows=4)`` logs ``"Read table | rows=4"``.
    """

    def __init__(self, name: str) -> None:
        self._logger = logging.getLogger(name)

    @property
    def logger(self) -> logging.Logger:
        """The wrapped standard library logger."""
        return self._logger

    @staticmethod
    def _build_message(message: str, **fields: Any) -> str:
        if not fields:
            return message
        rendered = ", ".join(f"{key}={value}" for key, value in fields.items())
        return f"{message} | {rendered}"

    def debug(self, message: str, **fields: Any) -> None:
        self._logger.debug(self._build_message(message, **fields))

    def info(self, message: str, **fields: Any) -> None:
        self._logger.info(self._build_message(message, **fields))

    def warning(self, message: str, **fields: Any) -> None:
        self._logger.warning(self._build_message(message, **fields))

    def error(self, message: str, exc_info: bool = False, **fields: Any) -> None:
        self._logger.error(self._build_message(message, **fields), exc_info=exc_info)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR with the active exception's traceback."""
        self._logger.exception(self._build_message(message, **fields))

    def log_performance(self, metrics: PerformanceMetrics) -> None:
        self.debug(f"Performance: {metrics.operation}", **metrics.to_dict())

    def log_aggregate_result(
        self,
        operation: str,
        cells_visited: int,
        numeric_cells: int,
        result: float,
    ) -> None:
        """Record a computed range aggregate at DEBUG.

        Failed aggregations are not logged here; the caller that catches the
        error reports it.
        """
        self.debug(
            "Aggregate computed",
            operation=operation,
            cells_visited=cells_visited,
            numeric_cells=numeric_cells,
            result=result,
        )


class LogContext:
    """Temporarily add context to every log line emitted inside the block.

    ``source`` and ``command`` set their dedicated variables (a None value
    leaves the current one in place); any other keyword becomes an extra
    field. Everything is restored on exit, also when the block raises.

    Usage:
        with LogContext(source="trips.csv", operation="sum"):
            logger.info("Processing")  # [source=trips.csv operation=sum] ...
    """

    def __init__(self, **kwargs: Any) -> None:
        self._values = kwargs
        self._tokens: list[tuple[ContextVar[Any], Token[Any]]] = []

    def __enter__(self) -> "LogContext":
        fields = dict(self._values)
        for var, key in ((_source_var, "source"), (_command_var, "command")):
            value = fields.pop(key, None)
            if value is not None:
                self._tokens.append((var, var.set(str(value))))
        merged = {**get_extra_context(), **fields}
        self._tokens.append((_fields_var, _fields_var.set(merged)))
        return self

    def __exit__(self, *args: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


@contextmanager
def timed_operation(
    logger: StructuredLogger,
    operation: str,
) -> Generator[PerformanceMetrics, None, None]:
    """Time the enclosed block and log its metrics at DEBUG on exit.

    Usage:
        with timed_operation(logger, "read_delimited") as metrics:
            metrics.rows_read = 10
    """
    metrics = PerformanceMetrics(operation=operation)
    try:
        yield metrics
    finally:
        metrics.finish()
        logger.log_performance(metrics)


def configure_logging(
    level: int | str = logging.INFO,
    format_string: str | None = None,
    use_structured_formatter: bool = True,
) -> None:
    """Install a single stderr handler on the root logger.

    Existing root handlers are removed so repeated calls do not duplicate
    output. Log lines go to stderr, leaving stdout to rendered tables.

    Args:
        level: Level as an int or a name such as "DEBUG".
        format_string: ``logging.Formatter`` format; DEFAULT_FORMAT if None.
        use_structured_formatter: Prefix lines with the log context.
    """
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]

    fmt = format_string or DEFAULT_FORMAT
    formatter: logging.Formatter
    if use_structured_formatter:
        formatter = StructuredLogFormatter(fmt)
    else:
        formatter = logging.Formatter(fmt)
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def get_logger(name: str) -> StructuredLogger:
    """Return a StructuredLogger for ``name`` (usually ``__name__``)."""
    return StructuredLogger(name)
