"""
Submission ingestion: duplicate detection, artifact emission, report
access and the end-to-end pipeline.
"""

from .duplicate_detector import DuplicateDetector, detect
from .pipeline import IngestionPipeline
from .report_emitter import (
    ReportEmitter,
    emit,
    generate_token,
    processed_name_for,
    processed_name_from_report,
    report_name_for,
)
from .reports import list_reports, load_report, search_reports, summarize_reports

__all__ = [
    "DuplicateDetector",
    "detect",
    "ReportEmitter",
    "emit",
    "generate_token",
    "processed_name_for",
    "processed_name_from_report",
    "report_name_for",
    "load_report",
    "list_reports",
    "summarize_reports",
    "search_reports",
    "IngestionPipeline",
]
