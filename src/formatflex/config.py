"""Configuration management for the FormatFlex command line.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
FORMATFLEX_ prefix, or via a .env file in the working directory.

The conversion core reads none of these settings; they only shape the
command line shell.

Environment Variables:
    FORMATFLEX_LOG_LEVEL: Logging level (default: INFO)
    FORMATFLEX_DEBUG: Enable debug mode (default: false)
    FORMATFLEX_DEFAULT_OUTPUT_FORMAT: Format used when --to is omitted (default: JSON)
    FORMATFLEX_OUTPUT_ENCODING: Encoding for files written with --output (default: utf-8)
"""

import codecs
import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from formatflex.models import OutputFormat


class Settings(BaseSettings):
    """Shell settings loaded from environment variables.

    Example .env file:
        FORMATFLEX_LOG_LEVEL=DEBUG
        FORMATFLEX_DEFAULT_OUTPUT_FORMAT=csv
    """

    model_config = SettingsConfigDict(
        env_prefix="FORMATFLEX_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Enable debug mode with DEBUG logging and tracebacks on failure."""

    # =========================================================================
    # Conversion Settings
    # =========================================================================

    default_output_format: OutputFormat = OutputFormat.JSON
    """Output format used when the command line does not name one."""

    output_encoding: str = "utf-8"
    """Text encoding for files written with --output."""

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
                f"Invalid log level: {v}. Must be one of: {', '.join(sorted(valid_levels))}"
            )
        return upper_v

    @field_validator("default_output_format", mode="before")
    @classmethod
    def validate_default_output_format(cls, v: Any) -> OutputFormat:
        """Accept format names in any case."""
        return OutputFormat.parse(v)

    @field_validator("output_encoding")
    @classmethod
    def validate_output_encoding(cls, v: str) -> str:
        """Validate the encoding is known to Python."""
        try:
            return codecs.lookup(v.strip()).name
        except LookupError:
            raise ValueError(f"Unknown output encoding: {v}") from None

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def effective_log_level(self) -> str:
        """Get the log level, forced to DEBUG in debug mode."""
        return "DEBUG" if self.debug else self.log_level

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.effective_log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary for logging.

        Returns:
            Dictionary representation of the settings.
        """
        return {
            "log_level": self.log_level,
            "debug": self.debug,
            "default_output_format": self.default_output_format.value,
            "output_encoding": self.output_encoding,
        }


def validate_settings_on_startup(s: Settings) -> None:
    """Log a summary of the settings when the shell starts.

    Args:
        s: Settings instance to validate.
    """
    logger = logging.getLogger(__name__)

    if s.debug and s.log_level != "DEBUG":
        logger.info(f"Debug mode overrides log_level={s.log_level} with DEBUG")

    summary = ", ".join(f"{k}={v}" for k, v in s.to_safe_dict().items())
    logger.debug(f"Configuration loaded: {summary}")
