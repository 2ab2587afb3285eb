"""
Column profiling for canonical tables.

Infers a coarse type per column and counts missing and duplicated content.
Only data rows are profiled; the header is never treated as a value.
"""

import math
import re

from dateutil import parser as dateparser

from surveillance_intake.core.models import CanonicalTable, ColumnProfile, ColumnType
from surveillance_intake.observability.logger import get_logger

logger = get_logger(__name__)

# Share of non-empty values that must parse for a column to take the type
NUMERIC_THRESHOLD = 0.8
DATE_THRESHOLD = 0.8

_HAS_DIGIT = re.compile(r"\d")


def is_numeric(value: str) -> bool:
    """True if value parses as a finite number."""
    try:
        return math.isfinite(float(value))
    except ValueError:
        return False


def is_date(value: str) -> bool:
    """
    True if value parses as a calendar date.

    Values without any digit ("May", "Monday") are not dates even though
    the parser would accept them.
    """
    if not _HAS_DIGIT.search(value):
        return False
    try:
        dateparser.parse(value)
        return True
    except (ValueError, OverflowError):
        return False


class ColumnProfiler:
    """
    Infers column types and counts missing cells and duplicate rows.
    """

    def __init__(
        self,
        numeric_threshold: float = NUMERIC_THRESHOLD,
        date_threshold: float = DATE_THRESHOLD,
    ):
        """
        Initialize profiler.

        Args:
            numeric_threshold: Share of non-empty values that must be numbers
            date_threshold: Share of non-empty values that must be dates
        """
        self.numeric_threshold = numeric_threshold
        self.date_threshold = date_threshold

    def infer_type(self, values: list[str]) -> ColumnType:
        """
        Infer the type of a column from its cells.

        Args:
            values: Every cell of the column (blank cells included)

        Returns:
            numeric, date, categorical, or unknown when no value is present
        """
        present = [value.strip() for value in values if value.strip()]
        if not present:
            return ColumnType.UNKNOWN

        total = len(present)
        numeric_count = sum(1 for value in present if is_numeric(value))
        if numeric_count / total >= self.numeric_threshold:
            return ColumnType.NUMERIC

        date_count = sum(1 for value in present if is_date(value))
        if date_count / total >= self.date_threshold:
            return ColumnType.DATE

        return ColumnType.CATEGORICAL

    def profile_column(self, name: str, values: list[str]) -> ColumnProfile:
        missing = sum(1 for value in values if not value.strip())
        return ColumnProfile(
            name=name,
            inferred_type=self.infer_type(values),
            non_empty_count=len(values) - missing,
            missing_count=missing,
        )

    def profile(self, table: CanonicalTable) -> list[ColumnProfile]:
        """Profile every column in header order."""
        profiles = [self.profile_column(name, table.column(name)) for name in table.headers]
        logger.debug(
            "Profiled columns: "
            + ", ".join(f"{p.name}={p.inferred_type.value}" for p in profiles)
        )
        return profiles


def count_missing(table: CanonicalTable) -> int:
    """Cells whose trimmed value is empty, across all rows and columns."""
    return sum(1 for row in table.rows for cell in row if not cell.strip())


def count_duplicate_rows(table: CanonicalTable) -> int:
    """Number of rows minus the number of distinct row tuples."""
    return len(table.rows) - len({tuple(row) for row in table.rows})
