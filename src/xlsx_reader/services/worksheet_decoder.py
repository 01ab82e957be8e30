"""Streaming decode of a worksheet part into sparse rows and cells.

The part is scanned once, front to back, with no backtracking:

- ``<dimension ref="A1:C10">`` sets the bounding box.
- ``<row r="N">`` opens row N and records it, even when it holds no cells.
- ``<c r="B2" t="...">`` opens a cell; ``t`` selects how its value is read.
- ``<v>`` holds the value; for ``t="inlineStr"`` the text sits in ``<is>``.
- ``</c>`` resolves the value and stores the cell.

Formulas (``<f>``) are not evaluated; the cached ``<v>`` is what the cell
shows.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from xml.etree import ElementTree as ET

from xlsx_reader.models import BoundingBox, Cell, CellType, Row
from xlsx_reader.services.cell_reference import decode_range, decode_reference
from xlsx_reader.services.shared_strings import SharedStringTable
from xlsx_reader.services.xml_events import iter_events
from xlsx_reader.utils.exceptions import ErrorCode, FormatError
from xlsx_reader.utils.logging import PerformanceMetrics, get_logger, timed_operation
from xlsx_reader.worksheet import Worksheet

logger = get_logger(__name__)

NUMERIC_ZERO_FRACTION = ".0"


@dataclass
class _PendingCell:
    column: int
    row: int
    cell_type: CellType
    inline_string: bool
    parts: list[str] = field(default_factory=list)
    has_value: bool = False


def normalize_numeric(text: str) -> str:
    """Drop one exact trailing ``".0"``: ``"3.0"`` becomes ``"3"``.

    Other spellings such as ``"3.00"`` or ``"3.14"`` are returned unchanged.
    """
    return text.removesuffix(NUMERIC_ZERO_FRACTION)


class WorksheetDecoder:
    """Decode worksheet parts against a shared-string table."""

    def __init__(self, shared_strings: SharedStringTable) -> None:
        self._shared_strings = shared_strings

    def decode(
        self,
        chunks: Iterable[bytes],
        *,
        name: str,
        index: int = 0,
        part_name: str | None = None,
    ) -> Worksheet:
        """Decode one worksheet part.

        Args:
            chunks: The part's bytes, typically streamed from the package.
            name: Display name of the worksheet.
            index: Public 0-based worksheet index.
            part_name: Package part being decoded, used in errors.

        Returns:
            The fully decoded worksheet.

        Raises:
            FormatError: If the XML is malformed, a reference or row number
                cannot be decoded, or a shared-string index is invalid.
        """
        rows: dict[int, Row] = {}
        bounding_box = BoundingBox()
        sheet_data: ET.Element | None = None
        row_number = 0
        row_cells: dict[int, Cell] | None = None
        pending: _PendingCell | None = None
        last_column = 0
        phonetic_depth = 0

        with timed_operation(logger, "decode_worksheet") as metrics:
            events = iter_events(self._count_bytes(chunks, metrics), part_name)
            for event, tag, element in events:
                if event == "start":
                    if tag == "row":
                        row_number = self._row_number(element.get("r"), row_number, part_name)
                        row_cells = {}
                        last_column = 0
                    elif tag == "c":
                        if row_cells is None:
                            raise FormatError(
                                "Cell found outside of a row",
                                error_code=ErrorCode.MALFORMED_XML,
                                part=part_name,
                            )
                        reference = element.get("r")
                        if reference:
                            column = decode_reference(reference)[0]
                        else:
                            column = last_column + 1
                        cell_type_attr = element.get("t")
                        pending = _PendingCell(
                            column=column,
                            row=row_number,
                            cell_type=CellType.from_attribute(cell_type_attr),
                            inline_string=cell_type_attr == "inlineStr",
                        )
                    elif tag == "sheetData":
                        sheet_data = element
                    elif tag == "dimension":
                        ref = element.get("ref")
                        if ref:
                            bounding_box = decode_range(ref)
                    elif tag == "rPh":
                        phonetic_depth += 1
                    continue

                if pending is not None:
                    if tag == "v" and not pending.inline_string:
                        pending.parts.append(element.text or "")
                        pending.has_value = True
                    elif tag == "t" and pending.inline_string and phonetic_depth == 0:
                        pending.parts.append(element.text or "")
                        pending.has_value = True
                    elif tag == "rPh":
                        phonetic_depth -= 1
                    elif tag == "c" and row_cells is not None:
                        row_cells[pending.column] = Cell(
                            column=pending.column,
                            row=pending.row,
                            value=self._resolve(pending, part_name),
                            cell_type=pending.cell_type,
                        )
                        last_column = pending.column
                        metrics.cells_decoded += 1
                        pending = None
                elif tag == "row" and row_cells is not None:
                    rows[row_number] = Row(row_number, row_cells)
                    row_cells = None
                    element.clear()
                    if sheet_data is not None and len(sheet_data) and sheet_data[-1] is element:
                        del sheet_data[-1]

            metrics.rows_decoded = len(rows)

        return Worksheet(
            name=name,
            rows=rows,
            bounding_box=bounding_box,
            index=index,
            part_name=part_name,
        )

    def _resolve(self, pending: _PendingCell, part_name: str | None) -> str:
        if not pending.has_value:
            return ""
        text = "".join(pending.parts)
        if pending.cell_type is CellType.SHARED_STRING:
            return self._lookup_shared_string(text, pending, part_name)
        if pending.cell_type is CellType.NUMERIC:
            return normalize_numeric(text)
        return text

    def _lookup_shared_string(
        self, text: str, pending: _PendingCell, part_name: str | None
    ) -> str:
        details = {"column": pending.column, "row": pending.row, "value": text}
        try:
            position = int(text)
        except ValueError as exc:
            raise FormatError(
                f"Shared string index is not an integer: {text!r}",
                error_code=ErrorCode.INVALID_SHARED_STRING_INDEX,
                part=part_name,
                details=details,
            ) from exc
        if not 0 <= position < len(self._shared_strings):
            raise FormatError(
                f"Shared string index {position} out of range "
                f"[0, {len(self._shared_strings)})",
                error_code=ErrorCode.SHARED_STRING_OUT_OF_RANGE,
                part=part_name,
                details=details,
            )
        return self._shared_strings[position]

    @staticmethod
    def _row_number(value: str | None, previous: int, part_name: str | None) -> int:
        if value is None:
            return previous + 1
        try:
            number = int(value)
        except ValueError as exc:
            raise FormatError(
                f"Invalid row number: {value!r}",
                error_code=ErrorCode.INVALID_ROW_NUMBER,
                part=part_name,
            ) from exc
        if number < 1:
            raise FormatError(
                f"Row numbers start at 1, got {number}",
                error_code=ErrorCode.INVALID_ROW_NUMBER,
                part=part_name,
            )
        return number

    @staticmethod
    def _count_bytes(
        chunks: Iterable[bytes], metrics: PerformanceMetrics
    ) -> Iterator[bytes]:
        for chunk in chunks:
            metrics.bytes_read += len(chunk)
            yield chunk
