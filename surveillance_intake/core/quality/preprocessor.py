"""
Preprocessing: turns an assessed canonical table into the processed table.
"""

from datetime import date

from surveillance_intake.core.models import (
    CanonicalTable,
    ColumnType,
    ProcessedTable,
    QualityReport,
)
from surveillance_intake.core.normalizers.base_normalizer import unique_headers
from surveillance_intake.observability.logger import get_logger

logger = get_logger(__name__)

OUTPUT_DELIMITER = ","
DELIMITER_SUBSTITUTE = ";"

NUMERIC_FILL = "0"
CATEGORICAL_FILL = "Unknown"
DATE_FORMAT = "%Y-%m-%d"


def sanitize_value(value: str) -> str:
    """
    Make a value safe for one cell of the processed delimited text.

    Line breaks become spaces and the output delimiter becomes
    DELIMITER_SUBSTITUTE, so the processed table re-reads with the same shape.
    """
    return " ".join(value.splitlines()).replace(OUTPUT_DELIMITER, DELIMITER_SUBSTITUTE).strip()


def needs_sanitizing(value: str) -> bool:
    return sanitize_value(value) != value.strip()


def fill_value(column_type: ColumnType, today: date) -> str:
    """Replacement for a blank cell of the given column type."""
    if column_type == ColumnType.NUMERIC:
        return NUMERIC_FILL
    if column_type == ColumnType.DATE:
        return today.strftime(DATE_FORMAT)
    return CATEGORICAL_FILL


class Preprocessor:
    """
    Removes duplicate rows and imputes blank cells.

    Line breaks and commas inside values are replaced so every processed
    row has exactly one cell per header.

    Imputation uses the column types recorded in the report; they are not
    recomputed after deduplication.
    """

    def clean(
        self,
        table: CanonicalTable,
        report: QualityReport,
        today: date | None = None,
    ) -> ProcessedTable:
        """
        Produce the processed table.

        Args:
            table: Canonical table that was assessed
            report: Its quality report
            today: Date used for blank date cells (defaults to the current date)

        Returns:
            ProcessedTable with no blank cells and no more rows than the input
        """
        today = today or date.today()
        rows = [[sanitize_value(cell) for cell in row] for row in table.rows]

        if report.metadata.duplicate_row_count > 0:
            rows = self.deduplicate(rows)

        profiles = report.metadata.column_profiles
        fills = [fill_value(profiles.get(name, ColumnType.UNKNOWN), today) for name in table.headers]

        imputed = 0
        for row in rows:
            for index, cell in enumerate(row):
                if not cell:
                    row[index] = fills[index]
                    imputed += 1

        logger.debug(
            f"Preprocessed table: {table.row_count - len(rows)} duplicate rows removed, {imputed} cells imputed"
        )

        return ProcessedTable(
            headers=unique_headers(sanitize_value(name) for name in table.headers),
            rows=rows,
            dropped_row_count=table.dropped_row_count,
        )

    @staticmethod
    def deduplicate(rows: list[list[str]]) -> list[list[str]]:
        """Keep the first occurrence of each distinct row, preserving order."""
        seen: set[tuple[str, ...]] = set()
        unique_rows = []
        for row in rows:
            key = tuple(row)
            if key in seen:
                continue
            seen.add(key)
            unique_rows.append(row)
        return unique_rows


def clean(table: CanonicalTable, report: QualityReport, today: date | None = None) -> ProcessedTable:
    """Clean with the default preprocessor."""
    return Preprocessor().clean(table, report, today)
