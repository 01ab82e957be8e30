"""Centralized exception classes for the xlsx reader.

This module provides a hierarchy of custom exceptions with error codes and
structured error details for consistent error handling across the package.

Exception Hierarchy:
    XlsxReaderError (base)
    ├── PackageIOError
    │   └── MemberNotFoundError
    ├── FormatError
    │   └── CellReferenceError
    ├── WorksheetIndexError (also an IndexError)
    └── WorksheetNotFoundError (also a KeyError)

Error Codes:
    All errors have a unique error code (e.g., "E1001") that can be used
    for programmatic error handling and documentation.
"""

from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Enumeration of all error codes used in the package.

    Error codes are grouped by category:
    - E1xxx: Package (zip archive) errors
    - E2xxx: Format (XML / reference) errors
    - E3xxx: Worksheet lookup errors
    - E9xxx: Internal/unexpected errors
    """

    # Package errors (E1xxx)
    PACKAGE_OPEN_FAILED = "E1001"
    MEMBER_NOT_FOUND = "E1002"
    MEMBER_SIZE_MISMATCH = "E1003"
    MEMBER_READ_FAILED = "E1004"
    MEMBER_TOO_LARGE = "E1005"
    PACKAGE_CLOSED = "E1006"

    # Format errors (E2xxx)
    MALFORMED_XML = "E2001"
    INVALID_CELL_REFERENCE = "E2002"
    SHARED_STRING_OUT_OF_RANGE = "E2003"
    INVALID_SHARED_STRING_INDEX = "E2004"
    UNRESOLVED_RELATIONSHIP = "E2005"
    INVALID_ROW_NUMBER = "E2006"

    # Worksheet lookup errors (E3xxx)
    WORKSHEET_INDEX_OUT_OF_RANGE = "E3001"
    WORKSHEET_NOT_FOUND = "E3002"

    # Internal errors (E9xxx)
    INTERNAL_ERROR = "E9001"


class XlsxReaderError(Exception):
    """Base exception for all xlsx reader errors.

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
        """Convert the exception to a dictionary for structured logging.

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
# Package Errors (E1xxx)
# =============================================================================


class PackageIOError(XlsxReaderError):
    """Raised when the zip package or one of its members cannot be read."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.MEMBER_READ_FAILED,
        package_path: str | None = None,
        member: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with package and member information.

        Args:
            message: Error message.
            error_code: Error code.
            package_path: Path of the archive on disk.
            member: Name of the archive member involved, if any.
            details: Additional details.
        """
        details = details or {}
        if package_path:
            details["package_path"] = package_path
        if member:
            details["member"] = member
        super().__init__(message, error_code, details)
        self.package_path = package_path
        self.member = member


class MemberNotFoundError(PackageIOError):
    """Raised when a required member is missing from the package."""

    def __init__(
        self,
        member: str,
        package_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the missing member name.

        Args:
            member: Name of the member that was not found.
            package_path: Path of the archive on disk.
            details: Additional details.
        """
        super().__init__(
            message=f"Package member not found: {member}",
            error_code=ErrorCode.MEMBER_NOT_FOUND,
            package_path=package_path,
            member=member,
            details=details,
        )


# =============================================================================
# Format Errors (E2xxx)
# =============================================================================


class FormatError(XlsxReaderError):
    """Raised when package content does not follow the expected layout."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.MALFORMED_XML,
        part: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the offending part name.

        Args:
            message: Error message.
            error_code: Error code.
            part: Package part being decoded when the error occurred.
            details: Additional details.
        """
        details = details or {}
        if part:
            details["part"] = part
        super().__init__(message, error_code, details)
        self.part = part


class CellReferenceError(FormatError):
    """Raised when a cell or range reference cannot be decoded."""

    def __init__(
        self,
        reference: str,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the reference text.

        Args:
            reference: The reference string that failed to decode.
            reason: Optional explanation appended to the message.
            details: Additional details.
        """
        details = details or {}
        details["reference"] = reference
        message = f"Invalid cell reference: {reference!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_CELL_REFERENCE,
            details=details,
        )
        self.reference = reference


# =============================================================================
# Worksheet Lookup Errors (E3xxx)
# =============================================================================


class WorksheetIndexError(XlsxReaderError, IndexError):
    """Raised when a worksheet index is outside ``[0, num_worksheets)``."""

    def __init__(
        self,
        index: int,
        num_worksheets: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the requested index and the valid bound.

        Args:
            index: The requested worksheet index.
            num_worksheets: Number of worksheets in the workbook.
            details: Additional details.
        """
        details = details or {}
        details["index"] = index
        details["num_worksheets"] = num_worksheets
        super().__init__(
            f"Worksheet index {index} out of range [0, {num_worksheets})",
            ErrorCode.WORKSHEET_INDEX_OUT_OF_RANGE,
            details,
        )
        self.index = index
        self.num_worksheets = num_worksheets


class WorksheetNotFoundError(XlsxReaderError, KeyError):
    """Raised when no worksheet carries the requested name."""

    def __init__(
        self,
        name: str,
        available: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with the requested name.

        Args:
            name: The worksheet name that was not found.
            available: Names of the worksheets that do exist.
            details: Additional details.
        """
        details = details or {}
        details["name"] = name
        if available is not None:
            details["available"] = available
        super().__init__(
            f"Worksheet not found: {name}",
            ErrorCode.WORKSHEET_NOT_FOUND,
            details,
        )
        self.name = name
