"""
Core data models for the surveillance intake pipeline.

All models use Pydantic for runtime validation and type safety.
"""

from .canonical_table import CanonicalTable, ProcessedTable
from .column_profile import ColumnProfile
from .duplicate_verdict import DuplicateVerdict
from .enums import EXTENSION_FORMATS, Category, ColumnType, Grade, SourceFormat
from .ingestion_result import IngestionResult
from .quality_report import GRADE_BOUNDARIES, QualityMetadata, QualityReport, grade_for_score
from .raw_submission import RawSubmission, infer_format

__all__ = [
    "SourceFormat",
    "Category",
    "ColumnType",
    "Grade",
    "EXTENSION_FORMATS",
    "RawSubmission",
    "infer_format",
    "CanonicalTable",
    "ProcessedTable",
    "ColumnProfile",
    "DuplicateVerdict",
    "QualityMetadata",
    "QualityReport",
    "GRADE_BOUNDARIES",
    "grade_for_score",
    "IngestionResult",
]
