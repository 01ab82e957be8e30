"""Decoded worksheet with sparse row/cell storage."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from types import MappingProxyType

import pandas as pd

from xlsx_reader.models import BoundingBox, Cell, Row
from xlsx_reader.services.cell_reference import decode_reference, index_to_column


class Worksheet:
    """A read-only worksheet.

    Only cells present in the source are stored; every other coordinate is
    blank. Cell accessors take ``(column, row)``, both starting at 1, so
    ``cell(2, 5)`` is the cell at ``B5``.
    """

    def __init__(
        self,
        name: str,
        rows: Mapping[int, Row],
        bounding_box: BoundingBox | None = None,
        index: int = 0,
        part_name: str | None = None,
    ) -> None:
        self.name = name
        self.index = index
        self.part_name = part_name
        self._rows = MappingProxyType(dict(rows))
        self._bounding_box = bounding_box or BoundingBox()

    def __repr__(self) -> str:
        return (
            f"Worksheet(name={self.name!r}, index={self.index}, "
            f"rows={len(self._rows)}, cells={self.num_cells})"
        )

    # ------------------------------------------------------------------ #
    # Bounding box
    # ------------------------------------------------------------------ #

    @property
    def bounding_box(self) -> BoundingBox:
        return self._bounding_box

    @property
    def min_row(self) -> int:
        return self._bounding_box.min_row

    @property
    def max_row(self) -> int:
        return self._bounding_box.max_row

    @property
    def min_column(self) -> int:
        return self._bounding_box.min_column

    @property
    def max_column(self) -> int:
        return self._bounding_box.max_column

    # ------------------------------------------------------------------ #
    # Cell access
    # ------------------------------------------------------------------ #

    @property
    def rows(self) -> Mapping[int, Row]:
        return self._rows

    @property
    def num_cells(self) -> int:
        return sum(len(row) for row in self._rows.values())

    def get_cell(self, column: int, row: int) -> Cell | None:
        """Return the cell at ``(column, row)``, or None when it is blank."""
        source_row = self._rows.get(row)
        if source_row is None:
            return None
        return source_row.cells.get(column)

    def cell(self, column: int, row: int) -> str:
        """Return the text at ``(column, row)``; blank cells give ``""``."""
        found = self.get_cell(column, row)
        return found.value if found is not None else ""

    def cell_at(self, reference: str) -> str:
        """Return the text at an A1-style reference such as ``"B2"``.

        Raises:
            CellReferenceError: If ``reference`` cannot be decoded.
        """
        column, row = decode_reference(reference)
        return self.cell(column, row)

    def iter_rows(self) -> Iterator[Row]:
        """Yield the stored rows in ascending row order."""
        for number in sorted(self._rows):
            yield self._rows[number]

    def to_dataframe(self) -> pd.DataFrame:
        """Render the worksheet as a DataFrame of strings.

        The frame covers every stored cell. It starts at the declared
        bounding box's top-left corner when that lies above or left of the
        data, and ends at the last occupied row and column; a declared box
        that is larger than the data does not add trailing blanks. Blank
        cells are None. Columns are labelled with their letters and the
        index holds the 1-based row numbers.
        """
        occupied = self._occupied_box()
        if occupied.is_empty:
            return pd.DataFrame()

        declared = self._bounding_box
        min_column, min_row = occupied.min_column, occupied.min_row
        if not declared.is_empty:
            min_column = min(min_column, declared.min_column)
            min_row = min(min_row, declared.min_row)

        columns = range(min_column, occupied.max_column + 1)
        row_numbers = range(min_row, occupied.max_row + 1)
        data = [
            [self._value_or_none(column, number) for column in columns]
            for number in row_numbers
        ]
        return pd.DataFrame(
            data,
            index=pd.Index(list(row_numbers), name="row"),
            columns=[index_to_column(column) for column in columns],
        )

    def _value_or_none(self, column: int, row: int) -> str | None:
        found = self.get_cell(column, row)
        return found.value if found is not None else None

    def _occupied_box(self) -> BoundingBox:
        columns = [col for row in self._rows.values() for col in row.cells]
        row_numbers = [number for number, row in self._rows.items() if row.cells]
        if not columns:
            return BoundingBox()
        return BoundingBox(
            min_column=min(columns),
            min_row=min(row_numbers),
            max_column=max(columns),
            max_row=max(row_numbers),
        )
