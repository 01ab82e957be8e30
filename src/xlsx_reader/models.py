"""Dataclasses representing the decoded spreadsheet structure."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType


class CellType(str, Enum):
    """Type tag recorded for a decoded cell."""

    INLINE = "inline"
    SHARED_STRING = "s"
    NUMERIC = "n"

    @classmethod
    def from_attribute(cls, value: str | None) -> CellType:
        """Map a cell's ``t`` attribute to a type tag.

        Types other than ``s`` and ``n`` (booleans, errors, formula strings,
        inline strings) are surfaced verbatim and therefore tagged INLINE.
        """
        if value == "s":
            return cls.SHARED_STRING
        if value == "n":
            return cls.NUMERIC
        return cls.INLINE


@dataclass(frozen=True)
class Cell:
    """A single non-blank cell with its normalized text value."""

    column: int
    row: int
    value: str
    cell_type: CellType = CellType.INLINE


@dataclass(frozen=True)
class Row:
    """A worksheet row holding only the cells present in the source.

    ``cells`` is exposed as a read-only mapping keyed by column.
    """

    number: int
    cells: Mapping[int, Cell] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cells", MappingProxyType(dict(self.cells)))

    def __len__(self) -> int:
        return len(self.cells)


@dataclass(frozen=True)
class BoundingBox:
    """Declared extent of a worksheet. All zero when no dimension is declared."""

    min_column: int = 0
    min_row: int = 0
    max_column: int = 0
    max_row: int = 0

    @property
    def is_empty(self) -> bool:
        return self.max_column == 0 and self.max_row == 0


@dataclass(frozen=True)
class SheetDescriptor:
    """A worksheet entry from the workbook part, resolved to its package part."""

    name: str
    sheet_id: str
    relationship_id: str
    part_name: str
    state: str = "visible"
