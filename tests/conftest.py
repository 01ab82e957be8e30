from __future__ import annotations

from pathlib import Path

import pytest
from fixtures import build_package, sheet_xml, standard_parts
from openpyxl import Workbook

from xlsx_reader.utils.logging import clear_context


@pytest.fixture(autouse=True)
def _reset_log_context() -> None:
    clear_context()


@pytest.fixture
def two_sheet_package(tmp_path: Path) -> Path:
    """Two worksheets; the first spans A1:B5 with "A" and "B" in row 2."""
    first = sheet_xml(
        "A1:B5",
        [
            (1, ['<c r="A1" t="s"><v>2</v></c>', '<c r="B1"><v>10</v></c>']),
            (2, ['<c r="A2" t="s"><v>0</v></c>', '<c r="B2" t="s"><v>1</v></c>']),
            (5, ['<c r="B5" t="n"><v>3.0</v></c>']),
        ],
    )
    second = sheet_xml("C3", [(3, ['<c r="C3" t="n"><v>3.14</v></c>'])])
    return build_package(
        tmp_path / "two_sheets.xlsx",
        standard_parts([("First", first), ("Second", second)], strings=["A", "B", "Header"]),
    )


@pytest.fixture
def openpyxl_package(tmp_path: Path) -> Path:
    """A workbook written by openpyxl, with a reordered sheet list."""
    wb = Workbook()
    ws1 = wb.active
    ws1.title = "Summary"
    ws1["A1"] = "Name"
    ws1["B1"] = "Amount"
    ws1["A2"] = "Alice"
    ws1["B2"] = 123.45
    ws1["A3"] = "Bob"
    ws1["B3"] = 10
    ws1["C3"] = "=SUM(B2,B3)"

    ws2 = wb.create_sheet("Details")
    ws2["AC101"] = "far away"

    ws3 = wb.create_sheet("Empty")
    wb.move_sheet(ws3, offset=-2)

    path = tmp_path / "openpyxl.xlsx"
    wb.save(path)
    return path
