"""Pull-style XML event source over a stream of byte chunks.

Parts are scanned once, front to back. Callers receive ``(event, name,
element)`` tuples where ``event`` is ``"start"`` or ``"end"`` and ``name`` is
the element's local name with any namespace removed. An element's attributes
are available on ``start``; its text is complete only on ``end``.
"""

from collections.abc import Iterable, Iterator
from xml.etree import ElementTree as ET

from xlsx_reader.utils.exceptions import ErrorCode, FormatError

XmlEvent = tuple[str, str, ET.Element]


def local_name(tag: str) -> str:
    """Strip a ``{namespace}`` prefix from a tag or attribute name."""
    return tag.rsplit("}", 1)[-1]


def get_attribute(element: ET.Element, name: str) -> str | None:
    """Look up an attribute by local name, ignoring its namespace."""
    value = element.get(name)
    if value is not None:
        return value
    for key, candidate in element.attrib.items():
        if local_name(key) == name:
            return candidate
    return None


def iter_events(chunks: Iterable[bytes], part: str | None = None) -> Iterator[XmlEvent]:
    """Parse ``chunks`` incrementally and yield start/end events.

    The returned iterator is lazy and cannot be restarted.

    Args:
        chunks: Byte strings making up one XML document.
        part: Part name used in error messages.

    Raises:
        FormatError: If the document is not well-formed, including when it
            is empty or truncated.
    """
    parser = ET.XMLPullParser(events=("start", "end"))
    try:
        for chunk in chunks:
            parser.feed(chunk)
            for event, element in parser.read_events():
                yield event, local_name(element.tag), element
        parser.close()
        for event, element in parser.read_events():
            yield event, local_name(element.tag), element
    except ET.ParseError as exc:
        where = f" in {part}" if part else ""
        raise FormatError(
            f"Malformed XML{where}: {exc}",
            error_code=ErrorCode.MALFORMED_XML,
            part=part,
            details={"position": getattr(exc, "position", None)},
        ) from exc
