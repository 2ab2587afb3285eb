"""
Column profiling, quality grading and preprocessing.
"""

from .assessor import QualityAssessor, assess, missing_fraction
from .preprocessor import Preprocessor, clean, needs_sanitizing, sanitize_value
from .profiler import ColumnProfiler, count_duplicate_rows, count_missing

__all__ = [
    "ColumnProfiler",
    "count_missing",
    "count_duplicate_rows",
    "QualityAssessor",
    "assess",
    "missing_fraction",
    "Preprocessor",
    "clean",
    "sanitize_value",
    "needs_sanitizing",
]
