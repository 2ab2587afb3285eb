"""
MarkupNormalizer - extracts record elements from an XML document.
"""

from xml.etree import ElementTree as ET

from surveillance_intake.core.models import CanonicalTable, SourceFormat

from .base_normalizer import BaseNormalizer, unique_headers

# Element name fragments that mark a record, in order of preference
RECORD_KEYWORDS = ("record", "row")


def local_name(tag) -> str:
    """Strip a '{namespace}' prefix from an element tag."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _matches(element: ET.Element, keyword: str) -> bool:
    return keyword in local_name(element.tag).lower()


class MarkupNormalizer(BaseNormalizer):
    """
    Converts an XML document into a canonical table.

    Record elements are those whose name contains "record" (falling back
    to "row" when there are none) and that directly hold field elements
    rather than further records, so a <records> wrapper is never taken for
    a record. Only elements sharing the first record's tag become rows.
    Headers are the first record's child names; each cell is the text of
    the first child with that name, or empty when absent.
    """

    @property
    def source_format(self) -> SourceFormat:
        return SourceFormat.MARKUP_TREE

    def normalize(self, payload: bytes) -> CanonicalTable:
        # Parsed from bytes so the XML declaration's encoding is honoured
        if not payload.strip():
            return CanonicalTable()
        try:
            root = ET.fromstring(payload)
        except ET.ParseError as e:
            raise self.error(f"Malformed XML: {e}") from e
        return self._extract(root)

    def parse(self, text: str) -> CanonicalTable:
        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            raise self.error(f"Malformed XML: {e}") from e
        return self._extract(root)

    def _find_records(self, root: ET.Element) -> list[ET.Element]:
        for keyword in RECORD_KEYWORDS:
            candidates = [
                element for element in root.iter()
                if _matches(element, keyword)
                and len(element) > 0
                and not any(_matches(child, keyword) for child in element)
            ]
            if candidates:
                record_tag = candidates[0].tag
                return [element for element in candidates if element.tag == record_tag]
        return []

    def _extract(self, root: ET.Element) -> CanonicalTable:
        records = self._find_records(root)
        if not records:
            return CanonicalTable()

        field_names: list[str] = []
        for child in records[0]:
            name = local_name(child.tag)
            if name and name not in field_names:
                field_names.append(name)

        rows = []
        for record in records:
            values: dict[str, str] = {}
            for child in record:
                name = local_name(child.tag)
                if name not in values:
                    values[name] = (child.text or "").strip()
            rows.append([values.get(name, "") for name in field_names])

        return CanonicalTable(headers=unique_headers(field_names), rows=rows)
