"""Parsing services for the xlsx reader."""

from xlsx_reader.services.cell_reference import (
    column_to_index,
    decode_range,
    decode_reference,
    encode_reference,
    index_to_column,
)
from xlsx_reader.services.package_reader import PackageReader
from xlsx_reader.services.shared_strings import SharedStringTable
from xlsx_reader.services.workbook_index import WorkbookIndex
from xlsx_reader.services.worksheet_decoder import WorksheetDecoder

__all__ = [
    "PackageReader",
    "SharedStringTable",
    "WorkbookIndex",
    "WorksheetDecoder",
    "column_to_index",
    "decode_range",
    "decode_reference",
    "encode_reference",
    "index_to_column",
]
