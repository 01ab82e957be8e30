"""Tests for workbook decoding and worksheet part resolution."""

from pathlib import Path

import pytest
from fixtures import (
    CONTENT_TYPES_XML,
    build_package,
    root_rels_xml,
    sheet_xml,
    workbook_rels_xml,
    workbook_xml,
)

from xlsx_reader.config import Settings
from xlsx_reader.services.package_reader import PackageReader
from xlsx_reader.services.workbook_index import (
    WorkbookIndex,
    locate_workbook_part,
    relationships_part_for,
    resolve_target,
)
from xlsx_reader.utils.exceptions import (
    ErrorCode,
    FormatError,
    MemberNotFoundError,
    WorksheetNotFoundError,
)

EMPTY_SHEET = sheet_xml(None, [])


def _index(path: Path, settings: Settings | None = None) -> WorkbookIndex:
    with PackageReader(path) as reader:
        return WorkbookIndex.from_package(reader, settings)


class TestPathHelpers:
    """Tests for relationship part naming and target resolution."""

    def test_relationships_part_for(self) -> None:
        assert relationships_part_for("xl/workbook.xml") == "xl/_rels/workbook.xml.rels"
        assert relationships_part_for("workbook.xml") == "_rels/workbook.xml.rels"

    def test_relative_target(self) -> None:
        assert resolve_target("xl/workbook.xml", "worksheets/sheet1.xml") == (
            "xl/worksheets/sheet1.xml"
        )

    def test_parent_relative_target(self) -> None:
        assert resolve_target("xl/workbook.xml", "../other/sheet.xml") == "other/sheet.xml"

    def test_absolute_target(self) -> None:
        assert resolve_target("xl/workbook.xml", "/xl/worksheets/sheet2.xml") == (
            "xl/worksheets/sheet2.xml"
        )


class TestFromPackage:
    """Tests for building the index from a package."""

    def test_descriptor_order_follows_workbook(self, tmp_path: Path) -> None:
        path = build_package(
            tmp_path / "p.xlsx",
            {
                "xl/workbook.xml": workbook_xml(
                    [("Zeta", "7", "rId2"), ("Alpha", "3", "rId1")]
                ),
                "xl/_rels/workbook.xml.rels": workbook_rels_xml(
                    {"rId1": "worksheets/sheet1.xml", "rId2": "worksheets/sheet2.xml"}
                ),
                "xl/worksheets/sheet1.xml": EMPTY_SHEET,
                "xl/worksheets/sheet2.xml": EMPTY_SHEET,
            },
        )
        index = _index(path)
        assert index.names() == ["Zeta", "Alpha"]
        assert index[0].sheet_id == "7"
        assert index[0].relationship_id == "rId2"

    def test_part_name_comes_from_relationships_not_sheet_id(
        self, tmp_path: Path
    ) -> None:
        # sheetId 1 lives in sheet3.xml; a sheet1.xml exists but belongs to id 3
        path = build_package(
            tmp_path / "p.xlsx",
            {
                "xl/workbook.xml": workbook_xml([("First", "1", "rId5"), ("Third", "3", "rId9")]),
                "xl/_rels/workbook.xml.rels": workbook_rels_xml(
                    {"rId5": "worksheets/sheet3.xml", "rId9": "/xl/worksheets/sheet1.xml"}
                ),
                "xl/worksheets/sheet1.xml": EMPTY_SHEET,
                "xl/worksheets/sheet3.xml": EMPTY_SHEET,
            },
        )
        index = _index(path)
        assert [d.part_name for d in index] == [
            "xl/worksheets/sheet3.xml",
            "xl/worksheets/sheet1.xml",
        ]

    def test_fallback_without_relationship_part(self, tmp_path: Path) -> None:
        path = build_package(
            tmp_path / "p.xlsx",
            {
                "xl/workbook.xml": workbook_xml([("Only", "4", "rId1")]),
                "xl/worksheets/sheet4.xml": EMPTY_SHEET,
            },
        )
        index = _index(path)
        assert index[0].part_name == "xl/worksheets/sheet4.xml"

    def test_unknown_relationship_id(self, tmp_path: Path) -> None:
        path = build_package(
            tmp_path / "p.xlsx",
            {
                "xl/workbook.xml": workbook_xml([("Lost", "1", "rId42")]),
                "xl/_rels/workbook.xml.rels": workbook_rels_xml({"rId1": "worksheets/sheet1.xml"}),
                "xl/worksheets/sheet1.xml": EMPTY_SHEET,
            },
        )
        with pytest.raises(FormatError) as exc_info:
            _index(path)
        assert exc_info.value.error_code == ErrorCode.UNRESOLVED_RELATIONSHIP
        assert exc_info.value.details["relationship_id"] == "rId42"

    def test_target_missing_from_package(self, tmp_path: Path) -> None:
        path = build_package(
            tmp_path / "p.xlsx",
            {
                "xl/workbook.xml": workbook_xml([("Gone", "1", "rId1")]),
                "xl/_rels/workbook.xml.rels": workbook_rels_xml({"rId1": "worksheets/gone.xml"}),
            },
        )
        with pytest.raises(FormatError) as exc_info:
            _index(path)
        assert exc_info.value.details["target"] == "xl/worksheets/gone.xml"

    def test_missing_workbook_part(self, tmp_path: Path) -> None:
        path = build_package(tmp_path / "p.xlsx", {"[Content_Types].xml": CONTENT_TYPES_XML})
        with pytest.raises(MemberNotFoundError):
            _index(path)

    def test_malformed_workbook(self, tmp_path: Path) -> None:
        path = build_package(tmp_path / "p.xlsx", {"xl/workbook.xml": "<workbook><sheets>"})
        with pytest.raises(FormatError):
            _index(path)

    def test_workbook_located_through_root_relationships(self, tmp_path: Path) -> None:
        path = build_package(
            tmp_path / "p.xlsx",
            {
                "_rels/.rels": root_rels_xml("/book/main.xml"),
                "book/main.xml": workbook_xml([("S", "1", "rId1")]),
                "book/_rels/main.xml.rels": workbook_rels_xml({"rId1": "sheets/s.xml"}),
                "book/sheets/s.xml": EMPTY_SHEET,
            },
        )
        with PackageReader(path) as reader:
            assert locate_workbook_part(reader) == "book/main.xml"
        index = _index(path)
        assert index.workbook_part == "book/main.xml"
        assert index[0].part_name == "book/sheets/s.xml"

    def test_index_of(self, tmp_path: Path) -> None:
        path = build_package(
            tmp_path / "p.xlsx",
            {
                "xl/workbook.xml": workbook_xml([("A", "1", "rId1"), ("B", "2", "rId2")]),
                "xl/worksheets/sheet1.xml": EMPTY_SHEET,
                "xl/worksheets/sheet2.xml": EMPTY_SHEET,
            },
        )
        index = _index(path)
        assert index.index_of("B") == 1
        with pytest.raises(WorksheetNotFoundError):
            index.index_of("C")
