"""Centralized exception classes for FormatFlex.

This module provides a hierarchy of custom exceptions with error codes,
conversion stage and failure kind, and structured error details for
consistent error handling throughout the conversion pipeline.

Exception Hierarchy:
    FormatFlexError (base)
    ├── ConversionError
    │   ├── SourceNotFoundError          (read, NotFound)
    │   ├── UnreadableSourceError        (read, Unreadable)
    │   ├── CorruptArchiveError          (read, CorruptArchive)
    │   ├── InvalidSyntaxError           (parse, InvalidSyntax)
    │   ├── UnsupportedShapeError        (parse, UnsupportedShape)
    │   └── SerializationFailureError    (serialize, SerializationFailure)
    └── SheetUnavailableError            (per sheet, contained by the spreadsheet parser)

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the package.

    Error codes are grouped by category:
    - E1xxx: Read stage (source files and archives)
    - E2xxx: Parse stage
    - E3xxx: Serialize stage
    - E9xxx: Internal/unexpected errors
    """

    # Read errors (E1xxx)
    FILE_NOT_FOUND = "E1001"
    FILE_READ_ERROR = "E1002"
    ENCODING_ERROR = "E1003"
    CORRUPT_ARCHIVE = "E1004"
    SHEET_UNAVAILABLE = "E1005"

    # Parse errors (E2xxx)
    INVALID_SYNTAX = "E2001"
    UNSUPPORTED_SHAPE = "E2002"

    # Serialize errors (E3xxx)
    SERIALIZATION_FAILED = "E3001"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"
    CONFIGURATION_ERROR = "E9002"


class ConversionStage(str, Enum):
    """Pipeline stage in which a failure happened."""

    READ = "read"
    PARSE = "parse"
    SERIALIZE = "serialize"


class ErrorKind(str, Enum):
    """Failure taxonomy reported to callers."""

    NOT_FOUND = "NotFound"
    UNREADABLE = "Unreadable"
    INVALID_SYNTAX = "InvalidSyntax"
    UNSUPPORTED_SHAPE = "UnsupportedShape"
    CORRUPT_ARCHIVE = "CorruptArchive"
    SERIALIZATION_FAILURE = "SerializationFailure"


# Default error code for each failure kind
KIND_TO_ERROR_CODE: dict[ErrorKind, ErrorCode] = {
    ErrorKind.NOT_FOUND: ErrorCode.FILE_NOT_FOUND,
    ErrorKind.UNREADABLE: ErrorCode.FILE_READ_ERROR,
    ErrorKind.CORRUPT_ARCHIVE: ErrorCode.CORRUPT_ARCHIVE,
    ErrorKind.INVALID_SYNTAX: ErrorCode.INVALID_SYNTAX,
    ErrorKind.UNSUPPORTED_SHAPE: ErrorCode.UNSUPPORTED_SHAPE,
    ErrorKind.SERIALIZATION_FAILURE: ErrorCode.SERIALIZATION_FAILED,
}

# Kind used when an unexpected exception escapes a stage
STAGE_DEFAULT_KIND: dict[ConversionStage, ErrorKind] = {
    ConversionStage.READ: ErrorKind.UNREADABLE,
    ConversionStage.PARSE: ErrorKind.INVALID_SYNTAX,
    ConversionStage.SERIALIZE: ErrorKind.SERIALIZATION_FAILURE,
}


class FormatFlexError(Exception):
    """Base exception for all FormatFlex errors.

    All custom exceptions in the package should inherit from this class.
    It provides:
    - Unique error codes for programmatic handling
    - Structured error details for logging and debugging

    Attributes:
        message: Human-readable error message.
        error_code: Unique error code from ErrorCode enum.
        details: Optional dictionary with additional error details.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Error code from ErrorCode enum.
            details: Optional additional details about the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary.

        Returns:
            Dictionary with error information.
        """
        result: dict[str, Any] = {
            "error_code": self.error_code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        """Return string representation with error code."""
        return f"[{self.error_code.value}] {self.message}"


# =============================================================================
# Conversion Errors
# =============================================================================


class ConversionError(FormatFlexError):
    """A failed conversion, tagged with the stage and kind of failure.

    Attributes:
        stage: Pipeline stage where the failure happened.
        kind: Failure kind from the ErrorKind taxonomy.
        detail: Human-readable detail, may embed a library message.
        file_path: Source file involved, if any.
    """

    def __init__(
        self,
        detail: str,
        stage: ConversionStage,
        kind: ErrorKind,
        file_path: str | None = None,
        error_code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with stage and kind.

        Args:
            detail: Error message.
            stage: Stage in which the error occurred.
            kind: Failure kind.
            file_path: Path to the problematic file.
            error_code: Error code, derived from kind when omitted.
            details: Additional details.
        """
        details = details or {}
        details["stage"] = stage.value
        details["kind"] = kind.value
        if file_path:
            details["file_path"] = file_path
        super().__init__(
            detail,
            error_code or KIND_TO_ERROR_CODE[kind],
            details,
        )
        self.stage = stage
        self.kind = kind
        self.file_path = file_path

    @property
    def detail(self) -> str:
        """Human-readable failure detail."""
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert the exception to a dictionary.

        Returns:
            Dictionary with error information including stage and kind.
        """
        result = super().to_dict()
        result["stage"] = self.stage.value
        result["kind"] = self.kind.value
        return result

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        stage: ConversionStage,
        file_path: str | None = None,
    ) -> "ConversionError":
        """Wrap an unexpected exception raised inside a stage.

        Args:
            exc: The original exception.
            stage: Stage that was running.
            file_path: Source file being converted.

        Returns:
            ConversionError using the stage's default kind.
        """
        return cls(
            detail=f"{type(exc).__name__}: {exc}",
            stage=stage,
            kind=STAGE_DEFAULT_KIND[stage],
            file_path=file_path,
            error_code=ErrorCode.INTERNAL_ERROR,
        )


class SourceNotFoundError(ConversionError):
    """Raised when the source file does not exist."""

    def __init__(
        self,
        file_path: str,
        message: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path.

        Args:
            file_path: Path to the file that was not found.
            message: Optional custom message.
            details: Additional details.
        """
        super().__init__(
            detail=message or f"File not found: {file_path}",
            stage=ConversionStage.READ,
            kind=ErrorKind.NOT_FOUND,
            file_path=file_path,
            details=details,
        )


class UnreadableSourceError(ConversionError):
    """Raised when the source exists but cannot be read or decoded."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        encoding: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with encoding information.

        Args:
            message: Error message.
            file_path: Optional file path.
            encoding: The encoding that failed, for decoding errors.
            details: Additional details.
        """
        details = details or {}
        if encoding:
            details["encoding"] = encoding
        super().__init__(
            detail=message,
            stage=ConversionStage.READ,
            kind=ErrorKind.UNREADABLE,
            file_path=file_path,
            error_code=ErrorCode.ENCODING_ERROR if encoding else None,
            details=details,
        )
        self.encoding = encoding


class CorruptArchiveError(ConversionError):
    """Raised when a spreadsheet container cannot be opened."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with file path.

        Args:
            message: Error message.
            file_path: Optional file path.
            details: Additional details.
        """
        super().__init__(
            detail=message,
            stage=ConversionStage.READ,
            kind=ErrorKind.CORRUPT_ARCHIVE,
            file_path=file_path,
            details=details,
        )


class InvalidSyntaxError(ConversionError):
    """Raised when a decoder cannot produce a structure from the text."""

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the position of the problem.

        Args:
            message: Error message.
            line: 1-based line of the problem, if known.
            column: 1-based column of the problem, if known.
            details: Additional details.
        """
        details = details or {}
        if line is not None:
            details["line"] = line
        if column is not None:
            details["column"] = column
        super().__init__(
            detail=message,
            stage=ConversionStage.PARSE,
            kind=ErrorKind.INVALID_SYNTAX,
            details=details,
        )
        self.line = line
        self.column = column


class UnsupportedShapeError(ConversionError):
    """Raised when a decoded value has a shape the output cannot carry."""

    def __init__(
        self,
        message: str,
        found_type: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending type.

        Args:
            message: Error message.
            found_type: Name of the type that could not be converted.
            details: Additional details.
        """
        details = details or {}
        if found_type:
            details["found_type"] = found_type
        super().__init__(
            detail=message,
            stage=ConversionStage.PARSE,
            kind=ErrorKind.UNSUPPORTED_SHAPE,
            details=details,
        )
        self.found_type = found_type


class SerializationFailureError(ConversionError):
    """Raised when a writer cannot represent the model in its format."""

    def __init__(
        self,
        message: str,
        output_format: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the target format.

        Args:
            message: Error message.
            output_format: Format being written.
            details: Additional details.
        """
        details = details or {}
        if output_format:
            details["output_format"] = output_format
        super().__init__(
            detail=message,
            stage=ConversionStage.SERIALIZE,
            kind=ErrorKind.SERIALIZATION_FAILURE,
            details=details,
        )


# =============================================================================
# Spreadsheet Sheet Errors
# =============================================================================


class SheetUnavailableError(FormatFlexError):
    """Raised when a single sheet of a workbook cannot be resolved.

    Contained by the spreadsheet parser, which turns it into a placeholder
    sheet instead of failing the whole document.
    """

    def __init__(
        self,
        sheet_name: str,
        reason: str = "Invalid path",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the sheet name.

        Args:
            sheet_name: Name of the unavailable sheet.
            reason: Short reason shown in the report.
            details: Additional details.
        """
        details = details or {}
        details["sheet_name"] = sheet_name
        super().__init__(
            message=reason,
            error_code=ErrorCode.SHEET_UNAVAILABLE,
            details=details,
        )
        self.sheet_name = sheet_name
        self.reason = reason
