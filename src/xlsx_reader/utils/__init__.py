"""Utility modules for the xlsx reader."""

from xlsx_reader.utils.exceptions import (
    CellReferenceError,
    ErrorCode,
    FormatError,
    MemberNotFoundError,
    PackageIOError,
    WorksheetIndexError,
    WorksheetNotFoundError,
    XlsxReaderError,
)
from xlsx_reader.utils.logging import (
    LogContext,
    get_logger,
    timed_operation,
)

__all__ = [
    "CellReferenceError",
    "ErrorCode",
    "FormatError",
    "LogContext",
    "MemberNotFoundError",
    "PackageIOError",
    "WorksheetIndexError",
    "WorksheetNotFoundError",
    "XlsxReaderError",
    "get_logger",
    "timed_operation",
]
