"""xlsx reader - read-only access to OOXML spreadsheet packages."""

from xlsx_reader.models import BoundingBox, Cell, CellType, Row, SheetDescriptor
from xlsx_reader.spreadsheet import Spreadsheet, open_spreadsheet
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
from xlsx_reader.worksheet import Worksheet

__all__ = [
    "BoundingBox",
    "Cell",
    "CellReferenceError",
    "CellType",
    "ErrorCode",
    "FormatError",
    "MemberNotFoundError",
    "PackageIOError",
    "Row",
    "SheetDescriptor",
    "Spreadsheet",
    "Worksheet",
    "WorksheetIndexError",
    "WorksheetNotFoundError",
    "XlsxReaderError",
    "open_spreadsheet",
]
__version__ = "0.1.0"
