"""
StructuredNormalizer - flattens JSON documents into a table.
"""

import json
from typing import Any

from surveillance_intake.core.models import CanonicalTable, SourceFormat

from .base_normalizer import BaseNormalizer, unique_headers


def to_cell(value: Any) -> str:
    """
    Render a JSON value as a table cell.

    null becomes an empty cell, booleans and numbers keep their JSON
    spelling, nested arrays and objects are kept as compact JSON text.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(value)


class StructuredNormalizer(BaseNormalizer):
    """
    Converts a JSON document into a canonical table.

    - Array of objects: headers are the first object's keys; each object
      becomes one row and a missing key yields an empty cell. Elements
      that are not objects are skipped and counted as dropped.
    - Single object: exactly one row.
    - Any other root: a zero-row table.
    """

    @property
    def source_format(self) -> SourceFormat:
        return SourceFormat.STRUCTURED_OBJECT

    def parse(self, text: str) -> CanonicalTable:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise self.error(f"Invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e

        dropped = 0
        if isinstance(document, dict):
            records = [document]
        elif isinstance(document, list):
            records = [item for item in document if isinstance(item, dict)]
            dropped = len(document) - len(records)
        else:
            return CanonicalTable()

        if not records:
            return CanonicalTable(dropped_row_count=dropped)

        keys = list(records[0].keys())
        headers = unique_headers(keys)
        rows = [[to_cell(record.get(key)) for key in keys] for record in records]

        return CanonicalTable(headers=headers, rows=rows, dropped_row_count=dropped)
