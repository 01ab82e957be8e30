"""Conversion between A1-style cell references and (column, row) pairs.

Column letters form a bijective base-26 numeral: ``A`` is 1, ``Z`` is 26
and ``AA`` is 27. There is no zero digit. Rows are plain decimal numbers.
All coordinates are 1-based.
"""

import re

from xlsx_reader.models import BoundingBox
from xlsx_reader.utils.exceptions import CellReferenceError

_REFERENCE_RE = re.compile(r"([A-Z]+)([0-9]+)")
_COLUMN_RE = re.compile(r"[A-Z]+")


def column_to_index(letters: str) -> int:
    """Convert column letters to a 1-based column number.

    Args:
        letters: Uppercase column letters, e.g. ``"AC"``.

    Returns:
        The column number, e.g. 29.

    Raises:
        CellReferenceError: If ``letters`` is empty or not all uppercase A-Z.
    """
    if not _COLUMN_RE.fullmatch(letters):
        raise CellReferenceError(letters, "expected uppercase column letters")
    index = 0
    for char in letters:
        index = index * 26 + (ord(char) - ord("A") + 1)
    return index


def index_to_column(index: int) -> str:
    """Convert a 1-based column number to its letters.

    Raises:
        CellReferenceError: If ``index`` is less than 1.
    """
    if index < 1:
        raise CellReferenceError(str(index), "column numbers start at 1")
    letters = []
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))


def decode_reference(reference: str) -> tuple[int, int]:
    """Decode a reference such as ``"AC101"`` into ``(column, row)``.

    Args:
        reference: A single-cell reference.

    Returns:
        Tuple of (column, row), both 1-based.

    Raises:
        CellReferenceError: If the letter run or digit run is missing, the
            runs are interleaved, or the row number is zero.
    """
    match = _REFERENCE_RE.fullmatch(reference)
    if match is None:
        raise CellReferenceError(
            reference, "expected column letters followed by row digits"
        )
    letters, digits = match.groups()
    row = int(digits)
    if row < 1:
        raise CellReferenceError(reference, "row numbers start at 1")
    return column_to_index(letters), row


def encode_reference(column: int, row: int) -> str:
    """Encode ``(column, row)`` as an A1-style reference.

    Raises:
        CellReferenceError: If ``column`` or ``row`` is less than 1.
    """
    if row < 1:
        raise CellReferenceError(f"{column},{row}", "row numbers start at 1")
    return f"{index_to_column(column)}{row}"


def decode_range(reference: str) -> BoundingBox:
    """Decode a range such as ``"A1:AC101"`` into a bounding box.

    A lone reference (``"A1"``) is treated as a one-cell range.

    Raises:
        CellReferenceError: If either side fails to decode or the range has
            more than one colon.
    """
    parts = reference.split(":")
    if len(parts) == 1:
        column, row = decode_reference(parts[0])
        return BoundingBox(column, row, column, row)
    if len(parts) != 2:
        raise CellReferenceError(reference, "expected a single colon")
    min_column, min_row = decode_reference(parts[0])
    max_column, max_row = decode_reference(parts[1])
    return BoundingBox(
        min_column=min_column,
        min_row=min_row,
        max_column=max_column,
        max_row=max_row,
    )
