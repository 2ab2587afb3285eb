"""
IngestionResult model summarising one completed pipeline run.
"""

from pydantic import BaseModel

from .duplicate_verdict import DuplicateVerdict
from .quality_report import QualityReport


class IngestionResult(BaseModel):
    """
    What a successful submission produced.

    Attributes:
        processed_artifact: Stored name of the processed delimited-text table
        report_artifact: Stored name of the quality report
        report: The quality report that was persisted
        verdict: Duplicate detection outcome
    """

    processed_artifact: str
    report_artifact: str
    report: QualityReport
    verdict: DuplicateVerdict

    class Config:
        frozen = True
