"""
Read access to stored quality reports.

Backs the reports screen: load the report for a processed artifact, list
every stored report, summarise them and filter by name.
"""

from pydantic import ValidationError

from surveillance_intake.core.errors import StorageReadError
from surveillance_intake.core.models import Grade, QualityReport
from surveillance_intake.observability.logger import get_logger
from surveillance_intake.storage.base import ArtifactStore

from .report_emitter import (
    PROCESSED_PREFIX,
    REPORT_PREFIX,
    REPORT_SUFFIX,
    report_name_for,
)

logger = get_logger(__name__)


def _parse_report(name: str, data: bytes) -> QualityReport:
    try:
        return QualityReport.from_json(data)
    except ValidationError as e:
        raise StorageReadError(name, f"not a valid quality report: {e.error_count()} validation errors") from e


def load_report(
    store: ArtifactStore,
    processed_name: str,
    processed_prefix: str = PROCESSED_PREFIX,
    report_prefix: str = REPORT_PREFIX,
) -> QualityReport:
    """
    Load the quality report belonging to a processed artifact.

    Args:
        store: Artifact store
        processed_name: Full name of the processed artifact
        processed_prefix: Prefix of processed artifacts
        report_prefix: Prefix of report artifacts

    Raises:
        ValueError: If processed_name does not follow the naming contract
        StorageReadError: If the report is missing or unparseable
    """
    report_name = report_name_for(processed_name, processed_prefix, report_prefix)
    return _parse_report(report_name, store.get(report_name))


def list_reports(store: ArtifactStore, report_prefix: str = REPORT_PREFIX) -> dict[str, QualityReport]:
    """
    Load every stored report, keyed by report artifact name.

    Unreadable reports are logged and left out.
    """
    reports: dict[str, QualityReport] = {}
    for info in sorted(store.list(report_prefix), key=lambda i: i.created_at, reverse=True):
        if not info.name.endswith(REPORT_SUFFIX):
            continue
        try:
            reports[info.name] = _parse_report(info.name, store.get(info.name))
        except StorageReadError as e:
            logger.warning(f"Skipping report {info.name}: {e}", extra={"artifact": info.name})
    return reports


def summarize_reports(reports) -> dict:
    """
    Aggregate figures over a collection of reports.

    Returns:
        {"total", "average_score", "issues_found", "grades": {"A": n, ..., "F": n}}
    """
    reports = list(reports.values()) if isinstance(reports, dict) else list(reports)
    total = len(reports)
    grades = {grade.value: 0 for grade in Grade}
    for report in reports:
        grades[report.grade.value] += 1

    return {
        "total": total,
        "average_score": round(sum(r.score for r in reports) / total, 1) if total else 0.0,
        "issues_found": sum(len(r.issues) for r in reports),
        "grades": grades,
    }


def search_reports(reports_by_name: dict[str, QualityReport], term: str) -> dict[str, QualityReport]:
    """Reports whose artifact name contains term, case-insensitively. A blank term matches all."""
    needle = term.strip().lower()
    if not needle:
        return dict(reports_by_name)
    return {name: report for name, report in reports_by_name.items() if needle in name.lower()}
