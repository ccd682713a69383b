"""Utilities package for FormatFlex.

This package provides:
- Centralized exception classes (exceptions.py)
- Structured logging utilities (logging.py)
"""

from formatflex.utils.exceptions import (
    ConversionError,
    ConversionStage,
    CorruptArchiveError,
    ErrorCode,
    ErrorKind,
    FormatFlexError,
    InvalidSyntaxError,
    SerializationFailureError,
    SheetUnavailableError,
    SourceNotFoundError,
    UnreadableSourceError,
    UnsupportedShapeError,
)
from formatflex.utils.logging import (
    LogContext,
    StructuredLogger,
    get_conversion_id,
    get_logger,
    set_conversion_id,
)

__all__ = [
    # Exceptions
    "ConversionError",
    "ConversionStage",
    "CorruptArchiveError",
    "ErrorCode",
    "ErrorKind",
    "FormatFlexError",
    "InvalidSyntaxError",
    "SerializationFailureError",
    "SheetUnavailableError",
    "SourceNotFoundError",
    "UnreadableSourceError",
    "UnsupportedShapeError",
    # Logging
    "LogContext",
    "StructuredLogger",
    "get_conversion_id",
    "get_logger",
    "set_conversion_id",
]
