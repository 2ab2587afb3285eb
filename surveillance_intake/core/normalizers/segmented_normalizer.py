"""
SegmentedNormalizer - extracts observation segments from HL7 v2 messages.
"""

import re

from surveillance_intake.core.models import CanonicalTable, SourceFormat

from .base_normalizer import BaseNormalizer

OBSERVATION_SEGMENT = "OBX"

# Fixed output schema: column name -> OBX field position
OBSERVATION_FIELDS = (
    ("set_id", 1),
    ("value_type", 2),
    ("observation_id", 3),
    ("observation_value", 5),
    ("units", 6),
    ("result_status", 11),
    ("observation_datetime", 14),
)

_SEGMENT_BREAK = re.compile(r"\r\n|\r|\n")
_SEGMENT_ID = re.compile(r"^[A-Z][A-Z0-9]{2}$")


class SegmentedNormalizer(BaseNormalizer):
    """
    Converts an HL7 v2 message into a fixed 7-column table.

    Only OBX (observation) segments become rows; every other segment type
    is ignored. The field separator is read from the MSH header when one is
    present and defaults to "|". A payload containing no recognisable
    segment at all is rejected.
    """

    @property
    def source_format(self) -> SourceFormat:
        return SourceFormat.SEGMENTED_MESSAGE

    def parse(self, text: str) -> CanonicalTable:
        segments = [segment.strip() for segment in _SEGMENT_BREAK.split(text) if segment.strip()]

        separator = "|"
        for segment in segments:
            if segment.startswith("MSH") and len(segment) > 3:
                separator = segment[3]
                break

        recognised = 0
        rows = []
        for segment in segments:
            fields = segment.split(separator)
            if not _SEGMENT_ID.match(fields[0]):
                continue
            recognised += 1
            if fields[0] != OBSERVATION_SEGMENT:
                continue
            rows.append([
                fields[position].strip() if position < len(fields) else ""
                for _, position in OBSERVATION_FIELDS
            ])

        if not recognised:
            raise self.error("No HL7 segments found in payload")

        return CanonicalTable(headers=[name for name, _ in OBSERVATION_FIELDS], rows=rows)
