"""Configuration management for spreadsheet tables.

Settings are read once at import into the module-level ``settings``. Each
field can be overridden with an SPT_-prefixed environment variable or a
line in a .env file in the working directory.

Environment Variables:
    SPT_DEFAULT_DELIMITER: Field delimiter for delimited files (default: ,)
    SPT_EMPTY_PLACEHOLDER: Text rendered for empty cells (default: None)
    SPT_NUMBER_FORMAT: format() spec for rendered numbers (default: g)
    SPT_RENDER_ALIGN: Column alignment, left or right (default: left)
    SPT_EMPTY_RANGE_POLICY: strict or permissive empty-range aggregation (default: strict)
    SPT_RAGGED_ROWS: pad, trim or reject rows of differing length (default: pad)
    SPT_FILE_ENCODING: Fixed input encoding; unset means detect (default: unset)
    SPT_MAX_FILE_SIZE_MB: Maximum input file size in MB (default: 10)
    SPT_LOG_LEVEL: Logging level (default: WARNING)
    SPT_DEBUG: Enable debug mode (default: false)
"""

import codecs
import logging
from typing import Any, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from spreadsheet_table.models import EmptyRangePolicy, RaggedRowPolicy


class Settings(BaseSettings):
    """Settings loaded from environment variables.

    Example .env file:
        SPT_DEFAULT_DELIMITER=;
        SPT_RAGGED_ROWS=reject
        SPT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="SPT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Ingestion Settings
    # =========================================================================

    default_delimiter: str = ","
    """Single character separating fields in delimited files."""

    ragged_rows: RaggedRowPolicy = RaggedRowPolicy.PAD
    """How rows of differing length are reconciled when reading files."""

    file_encoding: str | None = None
    """Fixed encoding for input files. None detects it with chardet."""

    max_file_size_mb: int = 10
    """Maximum input file size in megabytes."""

    # =========================================================================
    # Rendering Settings
    # =========================================================================

    empty_placeholder: str = "None"
    """Text rendered in place of an empty cell."""

    number_format: str = "g"
    """format() spec applied to numeric cells when rendering."""

    render_align: Literal["left", "right"] = "left"
    """Justification of values inside their column."""

    # =========================================================================
    # Aggregation Settings
    # =========================================================================

    empty_range_policy: EmptyRangePolicy = EmptyRangePolicy.STRICT
    """Behaviour of CLI aggregations over ranges without numeric cells."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "WARNING"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with tracebacks on CLI errors."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("default_delimiter")
    @classmethod
    def validate_delimiter(cls, v: str) -> str:
        """Validate the delimiter is one character and not a line break."""
        if len(v) != 1 or v in "\r\n":
            raise ValueError(
                f"default_delimiter must be a single non-newline character, got {v!r}"
            )
        return v

    @field_validator("empty_placeholder")
    @classmethod
    def validate_placeholder(cls, v: str) -> str:
        """Validate the placeholder is non-empty."""
        if not v:
            raise ValueError("empty_placeholder must be a non-empty string")
        return v

    @field_validator("number_format")
    @classmethod
    def validate_number_format(cls, v: str) -> str:
        """Validate the spec can format a float."""
        try:
            format(1.5, v)
        except ValueError as e:
            raise ValueError(f"Invalid number_format {v!r}: {e}") from e
        return v

    @field_validator("file_encoding")
    @classmethod
    def validate_encoding(cls, v: str | None) -> str | None:
        """Validate the encoding is known to Python."""
        if v is None or not v.strip():
            return None
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown file_encoding: {v}") from e
        return v.strip()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 500:
            raise ValueError(f"max_file_size_mb must be between 1 and 500, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary.

        Returns:
            Dictionary representation with enum values as strings.
        """
        return {
            "default_delimiter": self.default_delimiter,
            "ragged_rows": self.ragged_rows.value,
            "file_encoding": self.file_encoding,
            "max_file_size_mb": self.max_file_size_mb,
            "empty_placeholder": self.empty_placeholder,
            "number_format": self.number_format,
            "render_align": self.render_align,
            "empty_range_policy": self.empty_range_policy.value,
            "log_level": self.log_level,
            "debug": self.debug,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Log warnings for settings that silently change results.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.ragged_rows is RaggedRowPolicy.TRIM:
        logger.warning(
            "Ragged rows are trimmed to the shortest row; fields beyond it are "
            "dropped. Set SPT_RAGGED_ROWS=pad or reject to keep them."
        )

    if s.empty_range_policy is EmptyRangePolicy.PERMISSIVE:
        logger.warning(
            "Empty-range policy is permissive: sums and products over ranges "
            "without numbers return 0 and 1 instead of failing."
        )

    logger.info(
        f"Configuration loaded: log_level={s.log_level}, debug={s.debug}, "
        f"delimiter={s.default_delimiter!r}, ragged_rows={s.ragged_rows.value}, "
        f"empty_range_policy={s.empty_range_policy.value}"
    )


# Create the global settings instance
settings = Settings()
