"""Workbook part decoding and worksheet part resolution.

The workbook lists its sheets in display order; that order is the public
worksheet index. Each sheet names a relationship id, and the workbook's
relationship part maps the id to the worksheet part. Part file names carry
no meaning of their own: after sheets are reordered, renamed or deleted,
``sheet3.xml`` may well hold the sheet with id 1. The ``sheet{id}.xml``
convention is therefore used only when a package has no relationship part.
"""

import posixpath
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from xlsx_reader.config import Settings
from xlsx_reader.config import settings as default_settings
from xlsx_reader.models import SheetDescriptor
from xlsx_reader.services.package_reader import PackageReader
from xlsx_reader.services.xml_events import get_attribute, iter_events
from xlsx_reader.utils.exceptions import (
    ErrorCode,
    FormatError,
    MemberNotFoundError,
    WorksheetNotFoundError,
)
from xlsx_reader.utils.logging import get_logger

logger = get_logger(__name__)

ROOT_RELATIONSHIPS_PART = "_rels/.rels"
OFFICE_DOCUMENT_TYPE_SUFFIX = "/officeDocument"


@dataclass(frozen=True)
class Relationship:
    """One ``<Relationship>`` entry of a relationship part."""

    id: str
    type: str
    target: str
    external: bool = False


@dataclass(frozen=True)
class _SheetEntry:
    name: str
    sheet_id: str
    relationship_id: str
    state: str


def relationships_part_for(part: str) -> str:
    """Return the relationship part that belongs to ``part``.

    ``xl/workbook.xml`` maps to ``xl/_rels/workbook.xml.rels``.
    """
    directory, filename = posixpath.split(part)
    return posixpath.join(directory, "_rels", f"{filename}.rels")


def resolve_target(source_part: str, target: str) -> str:
    """Resolve a relationship target against the part that declares it.

    Targets starting with ``/`` are relative to the package root; all others
    are relative to the directory of ``source_part``.
    """
    target = target.replace("\\", "/")
    if target.startswith("/"):
        return posixpath.normpath(target.lstrip("/"))
    base = posixpath.dirname(source_part)
    return posixpath.normpath(posixpath.join(base, target))


def parse_relationships(
    chunks: Iterable[bytes], part: str | None = None
) -> dict[str, Relationship]:
    """Decode a relationship part into a mapping keyed by relationship id."""
    relationships: dict[str, Relationship] = {}
    for event, name, element in iter_events(chunks, part):
        if event != "end" or name != "Relationship":
            continue
        rel_id = element.get("Id")
        target = element.get("Target")
        if not rel_id or target is None:
            continue
        relationships[rel_id] = Relationship(
            id=rel_id,
            type=element.get("Type", ""),
            target=target,
            external=element.get("TargetMode") == "External",
        )
    return relationships


def _parse_sheet_entries(
    chunks: Iterable[bytes], part: str | None = None
) -> list[_SheetEntry]:
    entries: list[_SheetEntry] = []
    for event, name, element in iter_events(chunks, part):
        if event != "start" or name != "sheet":
            continue
        entries.append(
            _SheetEntry(
                name=element.get("name", ""),
                sheet_id=element.get("sheetId", ""),
                relationship_id=get_attribute(element, "id") or "",
                state=element.get("state", "visible"),
            )
        )
    return entries


class WorkbookIndex:
    """Ordered worksheet descriptors of a workbook."""

    def __init__(self, descriptors: Iterable[SheetDescriptor], workbook_part: str) -> None:
        self._descriptors: tuple[SheetDescriptor, ...] = tuple(descriptors)
        self.workbook_part = workbook_part

    @classmethod
    def from_package(
        cls, reader: PackageReader, settings: Settings | None = None
    ) -> "WorkbookIndex":
        """Decode the workbook and resolve every sheet to its worksheet part.

        Raises:
            MemberNotFoundError: If the workbook part is missing.
            FormatError: If a part is malformed, a relationship id is unknown,
                or a resolved worksheet part is not in the package.
        """
        settings = settings or default_settings
        workbook_part = locate_workbook_part(reader, settings)
        if not reader.has_member(workbook_part):
            raise MemberNotFoundError(workbook_part, package_path=reader.path)

        entries = _parse_sheet_entries(
            reader.iter_member_chunks(workbook_part), workbook_part
        )

        rels_part = relationships_part_for(workbook_part)
        if reader.has_member(rels_part):
            relationships = parse_relationships(
                reader.iter_member_chunks(rels_part), rels_part
            )
            descriptors = [
                cls._resolve(entry, relationships, workbook_part, rels_part)
                for entry in entries
            ]
        else:
            logger.warning(
                "Workbook has no relationship part, using sheet id convention",
                part=rels_part,
            )
            descriptors = [
                SheetDescriptor(
                    name=entry.name,
                    sheet_id=entry.sheet_id,
                    relationship_id=entry.relationship_id,
                    part_name=settings.fallback_worksheet_part(entry.sheet_id),
                    state=entry.state,
                )
                for entry in entries
            ]

        for descriptor in descriptors:
            if not reader.has_member(descriptor.part_name):
                raise FormatError(
                    f"Worksheet {descriptor.name!r} resolves to missing part "
                    f"{descriptor.part_name}",
                    error_code=ErrorCode.UNRESOLVED_RELATIONSHIP,
                    part=workbook_part,
                    details={
                        "worksheet": descriptor.name,
                        "target": descriptor.part_name,
                    },
                )

        logger.debug(
            "Indexed workbook", part=workbook_part, worksheets=len(descriptors)
        )
        return cls(descriptors, workbook_part)

    @staticmethod
    def _resolve(
        entry: _SheetEntry,
        relationships: dict[str, Relationship],
        workbook_part: str,
        rels_part: str,
    ) -> SheetDescriptor:
        relationship = relationships.get(entry.relationship_id)
        if relationship is None or relationship.external:
            raise FormatError(
                f"Worksheet {entry.name!r} references unknown relationship "
                f"{entry.relationship_id!r}",
                error_code=ErrorCode.UNRESOLVED_RELATIONSHIP,
                part=rels_part,
                details={
                    "worksheet": entry.name,
                    "relationship_id": entry.relationship_id,
                },
            )
        return SheetDescriptor(
            name=entry.name,
            sheet_id=entry.sheet_id,
            relationship_id=entry.relationship_id,
            part_name=resolve_target(workbook_part, relationship.target),
            state=entry.state,
        )

    def names(self) -> list[str]:
        return [descriptor.name for descriptor in self._descriptors]

    def index_of(self, name: str) -> int:
        """Return the 0-based index of the worksheet called ``name``.

        Raises:
            WorksheetNotFoundError: If no worksheet has that name.
        """
        for index, descriptor in enumerate(self._descriptors):
            if descriptor.name == name:
                return index
        raise WorksheetNotFoundError(name, available=self.names())

    def __getitem__(self, index: int) -> SheetDescriptor:
        return self._descriptors[index]

    def __len__(self) -> int:
        return len(self._descriptors)

    def __iter__(self) -> Iterator[SheetDescriptor]:
        return iter(self._descriptors)


def locate_workbook_part(reader: PackageReader, settings: Settings | None = None) -> str:
    """Find the workbook part through the package root relationships.

    Falls back to ``default_workbook_part`` when ``_rels/.rels`` is absent or
    declares no office document.
    """
    settings = settings or default_settings
    if reader.has_member(ROOT_RELATIONSHIPS_PART):
        relationships = parse_relationships(
            reader.iter_member_chunks(ROOT_RELATIONSHIPS_PART),
            ROOT_RELATIONSHIPS_PART,
        )
        for relationship in relationships.values():
            if relationship.type.endswith(OFFICE_DOCUMENT_TYPE_SUFFIX):
                return resolve_target("", relationship.target)
    return settings.default_workbook_part
