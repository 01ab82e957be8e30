"""Helpers for writing small ``.xlsx`` packages in tests.

Packages are assembled part by part with ``zipfile`` so tests control
exactly which members exist and what they contain.

Example usage:
    from fixtures import build_package, sheet_xml, workbook_xml

    build_package(
        tmp_path / "book.xlsx",
        {
            "xl/workbook.xml": workbook_xml([("Data", "1", "rId1")]),
            "xl/_rels/workbook.xml.rels": workbook_rels_xml(
                {"rId1": "worksheets/sheet1.xml"}
            ),
            "xl/worksheets/sheet1.xml": sheet_xml("A1", [(1, ['<c r="A1"><v>1</v></c>'])]),
        },
    )
"""

import zipfile
from pathlib import Path
from xml.sax.saxutils import escape

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PACKAGE_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
WORKSHEET_REL_TYPE = f"{REL_NS}/worksheet"
SHARED_STRINGS_REL_TYPE = f"{REL_NS}/sharedStrings"
OFFICE_DOCUMENT_REL_TYPE = f"{REL_NS}/officeDocument"

CONTENT_TYPES_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="xml" ContentType="application/xml"/>'
    "</Types>"
)


def root_rels_xml(workbook_target: str = "xl/workbook.xml") -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<Relationships xmlns="{PACKAGE_REL_NS}">'
        f'<Relationship Id="rId1" Type="{OFFICE_DOCUMENT_REL_TYPE}" '
        f'Target="{workbook_target}"/>'
        "</Relationships>"
    )


def workbook_xml(sheets: list[tuple[str, str, str]]) -> str:
    """Build a workbook part from ``(name, sheet_id, relationship_id)`` tuples."""
    entries = "".join(
        f'<sheet name="{escape(name)}" sheetId="{sheet_id}" r:id="{rel_id}"/>'
        for name, sheet_id, rel_id in sheets
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}">'
        f"<sheets>{entries}</sheets>"
        "</workbook>"
    )


def workbook_rels_xml(targets: dict[str, str], shared_strings: bool = True) -> str:
    """Build a workbook relationship part mapping ids to worksheet targets."""
    entries = "".join(
        f'<Relationship Id="{rel_id}" Type="{WORKSHEET_REL_TYPE}" Target="{target}"/>'
        for rel_id, target in targets.items()
    )
    if shared_strings:
        entries += (
            f'<Relationship Id="rIdStrings" Type="{SHARED_STRINGS_REL_TYPE}" '
            'Target="sharedStrings.xml"/>'
        )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<Relationships xmlns="{PACKAGE_REL_NS}">{entries}</Relationships>'
    )


def shared_strings_xml(strings: list[str]) -> str:
    entries = "".join(f"<si><t>{escape(text)}</t></si>" for text in strings)
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<sst xmlns="{MAIN_NS}" count="{len(strings)}" '
        f'uniqueCount="{len(strings)}">{entries}</sst>'
    )


def sheet_xml(dimension: str | None, rows: list[tuple[int, list[str]]]) -> str:
    """Build a worksheet part.

    Args:
        dimension: Value of ``<dimension ref>``, or None to omit the element.
        rows: ``(row_number, [cell_xml, ...])`` pairs.
    """
    dim = f'<dimension ref="{dimension}"/>' if dimension else ""
    body = "".join(
        f'<row r="{number}">{"".join(cells)}</row>' for number, cells in rows
    )
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<worksheet xmlns="{MAIN_NS}" xmlns:r="{REL_NS}">'
        f"{dim}<sheetData>{body}</sheetData>"
        "</worksheet>"
    )


def build_package(
    path: Path,
    parts: dict[str, str | bytes],
    compression: int = zipfile.ZIP_DEFLATED,
) -> Path:
    """Write ``parts`` into a zip archive at ``path`` and return the path."""
    with zipfile.ZipFile(path, "w", compression=compression) as archive:
        for name, content in parts.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            archive.writestr(name, data)
    return path


def standard_parts(
    sheets: list[tuple[str, str]],
    strings: list[str] | None = None,
) -> dict[str, str]:
    """Build a complete package from ``(sheet_name, sheet_part_xml)`` pairs.

    Sheet ``i`` (0-based) gets sheet id ``i + 1``, relationship ``rId{i + 1}``
    and part ``xl/worksheets/sheet{i + 1}.xml``.
    """
    parts: dict[str, str] = {
        "[Content_Types].xml": CONTENT_TYPES_XML,
        "_rels/.rels": root_rels_xml(),
        "xl/workbook.xml": workbook_xml(
            [(name, str(i + 1), f"rId{i + 1}") for i, (name, _) in enumerate(sheets)]
        ),
        "xl/_rels/workbook.xml.rels": workbook_rels_xml(
            {f"rId{i + 1}": f"worksheets/sheet{i + 1}.xml" for i in range(len(sheets))},
            shared_strings=strings is not None,
        ),
    }
    for i, (_, content) in enumerate(sheets):
        parts[f"xl/worksheets/sheet{i + 1}.xml"] = content
    if strings is not None:
        parts["xl/sharedStrings.xml"] = shared_strings_xml(strings)
    return parts
