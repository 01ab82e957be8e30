"""Configuration management for the xlsx reader.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
XLSX_READER_ prefix, or via a .env file in the working directory.

Environment Variables:
    XLSX_READER_MAX_MEMBER_SIZE_MB: Largest decompressed member accepted (default: 256)
    XLSX_READER_READ_CHUNK_SIZE: Bytes fed to the XML parser per step (default: 65536)
    XLSX_READER_DEFAULT_WORKBOOK_PART: Workbook part used when the package
        root relationships do not name one (default: xl/workbook.xml)
    XLSX_READER_SHARED_STRINGS_PART: Shared-strings part (default: xl/sharedStrings.xml)
    XLSX_READER_WORKSHEET_FALLBACK_PATTERN: Worksheet part pattern used only when
        the workbook has no relationship part
        (default: xl/worksheets/sheet{sheet_id}.xml)
    XLSX_READER_LOG_LEVEL: Logging level (default: INFO)
    XLSX_READER_DEBUG: Enable debug mode (default: false)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Reader settings loaded from environment variables.

    Example .env file:
        XLSX_READER_MAX_MEMBER_SIZE_MB=512
        XLSX_READER_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="XLSX_READER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Package Settings
    # =========================================================================

    max_member_size_mb: int = 256
    """Largest recorded uncompressed size accepted for a single member."""

    read_chunk_size: int = 65536
    """Number of decompressed bytes fed to the XML parser at a time."""

    # =========================================================================
    # Part Name Settings
    # =========================================================================

    default_workbook_part: str = "xl/workbook.xml"
    """Workbook part used when ``_rels/.rels`` is missing or names none."""

    shared_strings_part: str = "xl/sharedStrings.xml"
    """Shared-strings part; its absence yields an empty string table."""

    worksheet_fallback_pattern: str = "xl/worksheets/sheet{sheet_id}.xml"
    """Naive worksheet part convention, used only without a relationship part."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with additional logging."""

    # =========================================================================
    # Validators
    # =========================================================================

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

    @field_validator("max_member_size_mb")
    @classmethod
    def validate_member_size(cls, v: int) -> int:
        """Validate member size limit is positive and reasonable."""
        if not 1 <= v <= 4096:
            raise ValueError(f"max_member_size_mb must be between 1 and 4096, got {v}")
        return v

    @field_validator("read_chunk_size")
    @classmethod
    def validate_chunk_size(cls, v: int) -> int:
        """Validate the parser feed size."""
        if v < 1024:
            raise ValueError(f"read_chunk_size must be at least 1024, got {v}")
        return v

    @field_validator("default_workbook_part", "shared_strings_part")
    @classmethod
    def validate_part_name(cls, v: str) -> str:
        """Normalize part names to archive member form."""
        name = v.strip().replace("\\", "/").lstrip("/")
        if not name:
            raise ValueError("part name must be a non-empty string")
        return name

    @field_validator("worksheet_fallback_pattern")
    @classmethod
    def validate_fallback_pattern(cls, v: str) -> str:
        """Validate the fallback pattern names the sheet id placeholder."""
        if "{sheet_id}" not in v:
            raise ValueError(
                "worksheet_fallback_pattern must contain the {sheet_id} placeholder"
            )
        return v.strip().lstrip("/")

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_member_size_bytes(self) -> int:
        """Get the member size limit in bytes."""
        return self.max_member_size_mb * 1024 * 1024

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def fallback_worksheet_part(self, sheet_id: str) -> str:
        """Build the naive worksheet part name for a sheet id."""
        return self.worksheet_fallback_pattern.format(sheet_id=sheet_id)

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary for logging.

        Returns:
            Dictionary representation of all settings.
        """
        return {
            "max_member_size_mb": self.max_member_size_mb,
            "read_chunk_size": self.read_chunk_size,
            "default_workbook_part": self.default_workbook_part,
            "shared_strings_part": self.shared_strings_part,
            "worksheet_fallback_pattern": self.worksheet_fallback_pattern,
            "log_level": self.log_level,
            "debug": self.debug,
        }


# Create the global settings instance
settings = Settings()
