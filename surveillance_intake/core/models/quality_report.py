"""
QualityReport model: the structured verdict persisted next to each processed table.
"""

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from .enums import Category, ColumnType, Grade, SourceFormat

# Lower score bound for each grade, best first
GRADE_BOUNDARIES = (
    (90, Grade.A),
    (80, Grade.B),
    (70, Grade.C),
    (60, Grade.D),
)


def grade_for_score(score: int) -> Grade:
    """
    Map a 0-100 score to its letter grade.

    >>> grade_for_score(90).value
    'A'
    >>> grade_for_score(89).value
    'B'
    """
    for lower_bound, grade in GRADE_BOUNDARIES:
        if score >= lower_bound:
            return grade
    return Grade.F


class QualityMetadata(BaseModel):
    """
    Profiling facts the grade was derived from.

    Attributes:
        row_count: Data rows (header excluded)
        column_count: Number of headers
        missing_value_count: Cells blank after trimming
        duplicate_row_count: Rows minus distinct rows
        column_profiles: Header -> inferred column type, in header order
        source_format: Format the submission was parsed as
        category: Category derived from the file name
        fingerprint: SHA-256 content fingerprint of the canonical table
        source_file_name: File name the submission was uploaded under
    """

    row_count: int = Field(..., ge=0)
    column_count: int = Field(..., ge=0)
    missing_value_count: int = Field(..., ge=0)
    duplicate_row_count: int = Field(..., ge=0)
    column_profiles: dict[str, ColumnType] = Field(default_factory=dict)
    source_format: SourceFormat
    category: Category
    fingerprint: str = Field(..., pattern=r"^[0-9a-f]{64}$")
    source_file_name: str | None = None

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True


class QualityReport(BaseModel):
    """
    Fitness-for-modeling verdict for one submission.

    Attributes:
        grade: Letter grade derived from score
        score: Integer score in [0, 100]
        issues: Problems found, in evaluation order
        recommendations: Suggested follow-ups for the submitter
        preprocessing_applied: Cleaning steps applied to produce the processed table
        metadata: Profiling facts
    """

    grade: Grade
    score: int = Field(..., ge=0, le=100)
    issues: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    preprocessing_applied: list[str] = Field(default_factory=list)
    metadata: QualityMetadata

    @model_validator(mode="after")
    def check_grade_matches_score(self):
        """Validate that the grade follows the fixed boundary table."""
        expected = grade_for_score(self.score)
        if self.grade != expected:
            raise ValueError(f"grade {self.grade.value} does not match score {self.score} (expected {expected.value})")
        return self

    def to_json(self) -> str:
        """Serialize with camelCase field names."""
        return self.model_dump_json(by_alias=True, indent=2)

    @classmethod
    def from_json(cls, data: str | bytes) -> "QualityReport":
        return cls.model_validate_json(data)

    class Config:
        frozen = True
        alias_generator = to_camel
        populate_by_name = True
        json_schema_extra = {
            "example": {
                "grade": "D",
                "score": 60,
                "issues": [
                    "Small dataset: 3 rows may not be sufficient for robust modeling",
                    "Duplicate rows: 1 duplicate rows found",
                ],
                "recommendations": [
                    "Consider collecting more data before using this dataset for forecasting",
                ],
                "preprocessingApplied": ["Duplicate rows removed"],
                "metadata": {
                    "rowCount": 3,
                    "columnCount": 2,
                    "missingValueCount": 0,
                    "duplicateRowCount": 1,
                    "columnProfiles": {"a": "numeric", "b": "numeric"},
                    "sourceFormat": "delimited_text",
                    "category": "uncategorized",
                    "fingerprint": "0" * 64,
                },
            }
        }
