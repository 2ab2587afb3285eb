"""
Quality assessment: profiles a canonical table and grades its fitness for
downstream epidemiological modeling.

The score is fully deterministic for identical inputs:

    start       100, or 85 when the content duplicates an existing artifact
    rows < 10   -20, and a further -10 when rows < 5
    missing     -15 above 10% of cells, a further -25 above 30%
    duplicates  -10 when any row repeats
    columns < 2 -10
    HL7 source  +5
    categorized +10
    clamp to [0, 100], then grade A >= 90, B >= 80, C >= 70, D >= 60, else F
"""

from surveillance_intake.core.fingerprint import fingerprint as compute_fingerprint
from surveillance_intake.core.models import (
    CanonicalTable,
    Category,
    DuplicateVerdict,
    QualityMetadata,
    QualityReport,
    SourceFormat,
    grade_for_score,
)
from surveillance_intake.observability.logger import get_logger

from .preprocessor import needs_sanitizing
from .profiler import ColumnProfiler, count_duplicate_rows, count_missing

logger = get_logger(__name__)

MAX_SCORE = 100
DUPLICATE_START_SCORE = 85

SMALL_DATASET_ROWS = 10
TINY_DATASET_ROWS = 5
MIN_COLUMNS = 2

MISSING_WARN_FRACTION = 0.10
MISSING_SEVERE_FRACTION = 0.30

SMALL_DATASET_PENALTY = 20
TINY_DATASET_PENALTY = 10
MISSING_WARN_PENALTY = 15
MISSING_SEVERE_PENALTY = 25
DUPLICATE_ROWS_PENALTY = 10
LIMITED_STRUCTURE_PENALTY = 10
SEGMENTED_MESSAGE_BONUS = 5
CATEGORY_BONUS = 10

# (issue, recommendation, preprocessing note) for each non-CSV source
FORMAT_NOTES: dict[SourceFormat, tuple[str, str, str]] = {
    SourceFormat.SEGMENTED_MESSAGE: (
        "HL7 format: OBX observation segments were extracted into a fixed 7-column table; other segments were ignored",
        "Verify that observation identifiers and units were mapped as expected",
        "HL7 OBX segments converted to tabular format",
    ),
    SourceFormat.MARKUP_TREE: (
        "XML format: record elements were flattened into rows; attributes and nested elements were discarded",
        "Prefer a CSV export where available to avoid structural loss",
        "XML records flattened to tabular format",
    ),
    SourceFormat.STRUCTURED_OBJECT: (
        "JSON format: objects were flattened into rows using the keys of the first object",
        "Ensure every object in the submission uses the same keys",
        "JSON objects flattened to tabular format",
    ),
}


def missing_fraction(missing: int, row_count: int, column_count: int) -> float:
    """
    Share of cells that are blank.

    A table without a single data cell has nothing usable, so it counts as
    entirely missing.
    """
    total_cells = row_count * column_count
    if total_cells == 0:
        return 1.0
    return missing / total_cells


class QualityAssessor:
    """
    Profiles a canonical table and derives a graded QualityReport.
    """

    def __init__(self, profiler: ColumnProfiler | None = None):
        self.profiler = profiler or ColumnProfiler()

    def assess(
        self,
        table: CanonicalTable,
        verdict: DuplicateVerdict,
        source_format: SourceFormat,
        category: Category,
        fingerprint: str | None = None,
        file_name: str | None = None,
    ) -> QualityReport:
        """
        Assess a normalized submission.

        Args:
            table: Canonical table from the normalizer
            verdict: Duplicate detection outcome
            source_format: Format the submission was parsed as
            category: Category derived from the file name
            fingerprint: Content fingerprint (computed when not supplied)
            file_name: Original upload name, kept for later name-collision checks

        Returns:
            QualityReport with grade, score, issues and metadata
        """
        profiles = self.profiler.profile(table)
        row_count = table.row_count
        column_count = table.column_count
        missing = count_missing(table)
        duplicates = count_duplicate_rows(table)
        fraction = missing_fraction(missing, row_count, column_count)

        issues: list[str] = []
        recommendations: list[str] = []
        preprocessing: list[str] = []

        if row_count < SMALL_DATASET_ROWS:
            issues.append(
                f"Small dataset: {row_count} rows may not be sufficient for robust modeling "
                f"(fewer than {SMALL_DATASET_ROWS})"
            )
            recommendations.append("Consider collecting more data before using this dataset for forecasting")

        if missing > 0:
            issues.append(f"Missing values: {missing} missing cells ({fraction * 100:.1f}%)")
            preprocessing.append("Missing values imputed by column type")
        elif row_count * column_count == 0:
            issues.append("Missing values: no data cells to assess (100.0%)")

        if duplicates > 0:
            issues.append(f"Duplicate rows: {duplicates} duplicate rows found")
            preprocessing.append("Duplicate rows removed")

        if column_count < MIN_COLUMNS:
            issues.append(f"Limited structure: only {column_count} column(s) found")
            recommendations.append("Include both feature and outcome columns, e.g. location, date and case counts")

        format_note = FORMAT_NOTES.get(source_format)
        if format_note:
            issue, recommendation, note = format_note
            issues.append(issue)
            recommendations.append(recommendation)
            preprocessing.append(note)

        if any(needs_sanitizing(value) for value in table.headers) or any(
            needs_sanitizing(cell) for row in table.rows for cell in row
        ):
            preprocessing.append("Commas and line breaks inside values replaced")

        if verdict.is_duplicate:
            issues.append(f"DATA MERGED: matches existing records in category {category.value}")
            recommendations.append(
                f"Duplicate content was merged with existing {category.value} records; no new data was added"
            )

        if verdict.name_collision and not verdict.content_match:
            issues.append(
                f"File name collision: an existing artifact ({verdict.matched_artifact}) has the same file name"
            )
            recommendations.append("Rename the file if it contains new data")

        if table.dropped_row_count > 0:
            issues.append(
                f"Malformed rows: {table.dropped_row_count} rows did not match the header width and were skipped"
            )
            recommendations.append("Check for delimiters inside values or missing fields")

        score = self.score(
            row_count=row_count,
            column_count=column_count,
            missing_fraction=fraction,
            duplicate_rows=duplicates,
            is_duplicate=verdict.is_duplicate,
            source_format=source_format,
            category=category,
        )
        grade = grade_for_score(score)

        logger.info(
            f"Assessed submission: grade {grade.value} ({score}/100)",
            extra={
                "category": category.value,
                "source_format": source_format.value,
                "row_count": row_count,
                "issue_count": len(issues),
            },
        )

        return QualityReport(
            grade=grade,
            score=score,
            issues=issues,
            recommendations=recommendations,
            preprocessing_applied=preprocessing,
            metadata=QualityMetadata(
                row_count=row_count,
                column_count=column_count,
                missing_value_count=missing,
                duplicate_row_count=duplicates,
                column_profiles={p.name: p.inferred_type for p in profiles},
                source_format=source_format,
                category=category,
                fingerprint=fingerprint or compute_fingerprint(table),
                source_file_name=file_name,
            ),
        )

    @staticmethod
    def score(
        row_count: int,
        column_count: int,
        missing_fraction: float,
        duplicate_rows: int,
        is_duplicate: bool,
        source_format: SourceFormat,
        category: Category,
    ) -> int:
        """Apply the fixed penalty/bonus table and clamp to [0, 100]."""
        score = DUPLICATE_START_SCORE if is_duplicate else MAX_SCORE

        if row_count < SMALL_DATASET_ROWS:
            score -= SMALL_DATASET_PENALTY
        if row_count < TINY_DATASET_ROWS:
            score -= TINY_DATASET_PENALTY

        if missing_fraction > MISSING_WARN_FRACTION:
            score -= MISSING_WARN_PENALTY
        if missing_fraction > MISSING_SEVERE_FRACTION:
            score -= MISSING_SEVERE_PENALTY

        if duplicate_rows > 0:
            score -= DUPLICATE_ROWS_PENALTY

        if column_count < MIN_COLUMNS:
            score -= LIMITED_STRUCTURE_PENALTY

        if source_format == SourceFormat.SEGMENTED_MESSAGE:
            score += SEGMENTED_MESSAGE_BONUS

        if category != Category.UNCATEGORIZED:
            score += CATEGORY_BONUS

        return max(0, min(MAX_SCORE, score))


def assess(
    table: CanonicalTable,
    verdict: DuplicateVerdict,
    source_format: SourceFormat,
    category: Category,
    fingerprint: str | None = None,
    file_name: str | None = None,
) -> QualityReport:
    """Assess with the default profiler."""
    return QualityAssessor().assess(table, verdict, source_format, category, fingerprint, file_name)
