"""Spreadsheet access API.

``open_spreadsheet`` reads the workbook index, its relationships and the
shared strings up front. Worksheets are decoded on first access and cached,
so repeated ``get_worksheet`` calls return the same object.

Usage:
    with open_spreadsheet("book.xlsx") as book:
        sheet = book.get_worksheet(0)
        sheet.cell(1, 2)  # column A, row 2
"""

import os
import threading
from collections.abc import Iterator
from contextlib import closing
from types import TracebackType

from xlsx_reader.config import Settings
from xlsx_reader.config import settings as default_settings
from xlsx_reader.models import SheetDescriptor
from xlsx_reader.services.package_reader import PackageReader
from xlsx_reader.services.shared_strings import SharedStringTable
from xlsx_reader.services.workbook_index import WorkbookIndex
from xlsx_reader.services.worksheet_decoder import WorksheetDecoder
from xlsx_reader.utils.exceptions import WorksheetIndexError, XlsxReaderError
from xlsx_reader.utils.logging import LogContext, get_logger, timed_operation
from xlsx_reader.worksheet import Worksheet

logger = get_logger(__name__)


class Spreadsheet:
    """An open ``.xlsx`` package.

    Use ``Spreadsheet.open`` or ``open_spreadsheet`` rather than calling the
    constructor directly.
    """

    def __init__(
        self,
        reader: PackageReader,
        workbook: WorkbookIndex,
        shared_strings: SharedStringTable,
    ) -> None:
        self._reader = reader
        self._workbook = workbook
        self._shared_strings = shared_strings
        self._decoder = WorksheetDecoder(shared_strings)
        self._worksheets: dict[int, Worksheet] = {}
        self._lock = threading.Lock()

    @classmethod
    def open(
        cls, path: str | os.PathLike[str], settings: Settings | None = None
    ) -> "Spreadsheet":
        """Open a package and read its workbook index and shared strings.

        Raises:
            PackageIOError: If the archive or a required member is unreadable.
            FormatError: If the workbook, relationships or shared strings are
                malformed, or a worksheet resolves to no package member.
        """
        settings = settings or default_settings
        reader = PackageReader(path, settings)
        with LogContext(package=reader.path):
            try:
                with timed_operation(logger, "open_spreadsheet"):
                    workbook = WorkbookIndex.from_package(reader, settings)
                    shared_strings = SharedStringTable.from_package(reader, settings)
            except XlsxReaderError as exc:
                logger.error("Failed to open spreadsheet", error=str(exc))
                reader.close()
                raise
            logger.info(
                "Opened spreadsheet",
                worksheets=len(workbook),
                shared_strings=len(shared_strings),
            )
        return cls(reader, workbook, shared_strings)

    def __enter__(self) -> "Spreadsheet":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __len__(self) -> int:
        return self.num_worksheets()

    def __repr__(self) -> str:
        return f"Spreadsheet(path={self.path!r}, worksheets={len(self._workbook)})"

    @property
    def path(self) -> str:
        return self._reader.path

    @property
    def shared_strings(self) -> SharedStringTable:
        return self._shared_strings

    @property
    def descriptors(self) -> list[SheetDescriptor]:
        return list(self._workbook)

    def close(self) -> None:
        """Release the archive. Worksheets decoded so far stay usable."""
        self._reader.close()

    def num_worksheets(self) -> int:
        return len(self._workbook)

    def sheet_names(self) -> list[str]:
        return self._workbook.names()

    def get_worksheet(self, index: int) -> Worksheet:
        """Return the worksheet at ``index``, decoding it on first access.

        Args:
            index: 0-based position in workbook order.

        Raises:
            WorksheetIndexError: If ``index`` is outside ``[0, num_worksheets())``.
            PackageIOError: If the worksheet part cannot be read.
            FormatError: If the worksheet part is malformed.
        """
        count = len(self._workbook)
        if not 0 <= index < count:
            raise WorksheetIndexError(index, count)

        with self._lock:
            cached = self._worksheets.get(index)
            if cached is not None:
                return cached

            descriptor = self._workbook[index]
            with LogContext(package=self.path, worksheet=descriptor.name):
                chunks = self._reader.iter_member_chunks(descriptor.part_name)
                try:
                    with closing(chunks):
                        worksheet = self._decoder.decode(
                            chunks,
                            name=descriptor.name,
                            index=index,
                            part_name=descriptor.part_name,
                        )
                except XlsxReaderError as exc:
                    logger.error(
                        "Failed to decode worksheet",
                        part=descriptor.part_name,
                        error=str(exc),
                    )
                    raise
                logger.debug(
                    "Decoded worksheet",
                    part=descriptor.part_name,
                    rows=len(worksheet.rows),
                    cells=worksheet.num_cells,
                )

            self._worksheets[index] = worksheet
            return worksheet

    def get_worksheet_by_name(self, name: str) -> Worksheet:
        """Return the worksheet called ``name``.

        Raises:
            WorksheetNotFoundError: If no worksheet has that name.
        """
        return self.get_worksheet(self._workbook.index_of(name))

    def iter_worksheets(self) -> Iterator[Worksheet]:
        """Yield every worksheet in workbook order, decoding as needed."""
        for index in range(len(self._workbook)):
            yield self.get_worksheet(index)


def open_spreadsheet(
    path: str | os.PathLike[str], settings: Settings | None = None
) -> Spreadsheet:
    """Open the ``.xlsx`` package at ``path``. See ``Spreadsheet.open``."""
    return Spreadsheet.open(path, settings)
