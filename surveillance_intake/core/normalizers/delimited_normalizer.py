"""
DelimitedNormalizer - parses comma-separated (or other single-delimiter) text.
"""

from surveillance_intake.core.models import CanonicalTable, SourceFormat
from surveillance_intake.observability.logger import get_logger

from .base_normalizer import BaseNormalizer, unique_headers

logger = get_logger(__name__)


class DelimitedNormalizer(BaseNormalizer):
    """
    Splits each non-blank line on a single fixed delimiter.

    The first non-blank line is the header. There is no quoting or escaping,
    so a cell that contains the delimiter shifts the row width and the row
    is dropped. Rows whose width differs from the header are skipped and
    counted; a file where no data row aligns is rejected.

    Parameters:
    - delimiter: single character (default ",")
    """

    def __init__(self, parameters=None):
        super().__init__(parameters)
        self.delimiter = self.parameters.get("delimiter", ",")

    @property
    def source_format(self) -> SourceFormat:
        return SourceFormat.DELIMITED_TEXT

    def parse(self, text: str) -> CanonicalTable:
        lines = [line for line in text.splitlines() if line.strip()]

        headers = unique_headers(lines[0].split(self.delimiter))
        width = len(headers)

        rows: list[list[str]] = []
        dropped = 0
        for line_number, line in enumerate(lines[1:], start=2):
            cells = [cell.strip() for cell in line.split(self.delimiter)]
            if len(cells) != width:
                dropped += 1
                logger.debug(
                    f"Dropping line {line_number}: {len(cells)} cells, expected {width}"
                )
                continue
            rows.append(cells)

        if dropped and not rows:
            raise self.error(
                f"No data row matches the {width}-column header ({dropped} rows misaligned)"
            )

        if dropped:
            logger.warning(f"Dropped {dropped} misaligned rows", extra={"dropped_rows": dropped})

        return CanonicalTable(headers=headers, rows=rows, dropped_row_count=dropped)
