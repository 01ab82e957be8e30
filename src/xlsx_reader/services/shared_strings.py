"""Shared-string table decoding.

Cells of type ``s`` store an index into this table rather than their text.
Each ``<si>`` entry contributes one string: either its single ``<t>`` or the
concatenated ``<t>`` of its rich-text runs. Phonetic hints (``<rPh>``) are
not part of the displayed text and are skipped.
"""

from collections.abc import Iterable, Iterator
from xml.etree import ElementTree as ET

from xlsx_reader.config import Settings
from xlsx_reader.config import settings as default_settings
from xlsx_reader.services.package_reader import PackageReader
from xlsx_reader.services.xml_events import get_attribute, iter_events
from xlsx_reader.utils.logging import get_logger

logger = get_logger(__name__)


class SharedStringTable:
    """Ordered, immutable pool of strings addressed by 0-based index."""

    def __init__(self, strings: Iterable[str] = ()) -> None:
        self._strings: tuple[str, ...] = tuple(strings)

    @classmethod
    def from_chunks(
        cls, chunks: Iterable[bytes], part: str | None = None
    ) -> "SharedStringTable":
        """Decode a shared-strings part.

        Raises:
            FormatError: If the part is not well-formed XML.
        """
        strings: list[str] = []
        parts: list[str] = []
        declared_unique: str | None = None
        root: ET.Element | None = None
        in_entry = False
        phonetic_depth = 0

        for event, name, element in iter_events(chunks, part):
            if event == "start":
                if name == "sst":
                    root = element
                    declared_unique = get_attribute(element, "uniqueCount")
                elif name == "si":
                    in_entry = True
                    parts = []
                elif name == "rPh":
                    phonetic_depth += 1
                continue

            if name == "t" and in_entry and phonetic_depth == 0:
                parts.append(element.text or "")
            elif name == "rPh":
                phonetic_depth -= 1
            elif name == "si":
                strings.append("".join(parts))
                in_entry = False
                element.clear()
                if root is not None and len(root) and root[-1] is element:
                    del root[-1]

        if declared_unique is not None and declared_unique != str(len(strings)):
            logger.debug(
                "Shared string count differs from declaration",
                declared=declared_unique,
                parsed=len(strings),
            )
        return cls(strings)

    @classmethod
    def from_package(
        cls, reader: PackageReader, settings: Settings | None = None
    ) -> "SharedStringTable":
        """Load the table from a package; a missing part yields an empty table."""
        part = (settings or default_settings).shared_strings_part
        if not reader.has_member(part):
            logger.debug("No shared strings part", part=part)
            return cls()
        table = cls.from_chunks(reader.iter_member_chunks(part), part)
        logger.debug("Loaded shared strings", part=part, count=len(table))
        return table

    def get(self, index: int) -> str:
        """Return the string at ``index``.

        Raises:
            IndexError: If ``index`` is outside ``[0, len(self))``.
        """
        if not 0 <= index < len(self._strings):
            raise IndexError(
                f"Shared string index {index} out of range [0, {len(self._strings)})"
            )
        return self._strings[index]

    def __getitem__(self, index: int) -> str:
        return self.get(index)

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self) -> Iterator[str]:
        return iter(self._strings)

    def __repr__(self) -> str:
        return f"SharedStringTable(count={len(self._strings)})"
