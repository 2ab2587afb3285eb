"""
Report emitter: persists the processed table and its quality report.

Naming contract (both directions are relied on by report lookups):

    processed  submitted-datasets/<category>_<epoch-ms>_<8 hex>.csv
    report     quality-reports/<category>_<epoch-ms>_<8 hex>_report.json
"""

import secrets
import time

from surveillance_intake.core.errors import StorageWriteError
from surveillance_intake.core.models import Category, ProcessedTable, QualityReport
from surveillance_intake.observability.logger import get_logger
from surveillance_intake.observability.metrics import artifacts_written_total, increment_counter
from surveillance_intake.storage.base import ArtifactStore

logger = get_logger(__name__)

PROCESSED_PREFIX = "submitted-datasets/"
REPORT_PREFIX = "quality-reports/"
PROCESSED_SUFFIX = ".csv"
REPORT_SUFFIX = "_report.json"


def generate_token(category: Category, now_ms: int | None = None) -> str:
    """Unique artifact stem: category, epoch milliseconds and 8 random hex digits."""
    now_ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"{category.value}_{now_ms}_{secrets.token_hex(4)}"


def processed_name_for(token: str, prefix: str = PROCESSED_PREFIX) -> str:
    return f"{prefix}{token}{PROCESSED_SUFFIX}"


def report_name_for(processed_name: str, processed_prefix: str = PROCESSED_PREFIX,
                    report_prefix: str = REPORT_PREFIX) -> str:
    """
    Derive the report name from a processed artifact name.

    Raises:
        ValueError: If the name does not follow the processed naming contract
    """
    if not processed_name.startswith(processed_prefix) or not processed_name.endswith(PROCESSED_SUFFIX):
        raise ValueError(f"Not a processed artifact name: {processed_name!r}")
    stem = processed_name[len(processed_prefix):-len(PROCESSED_SUFFIX)]
    if not stem:
        raise ValueError(f"Not a processed artifact name: {processed_name!r}")
    return f"{report_prefix}{stem}{REPORT_SUFFIX}"


def processed_name_from_report(report_name: str, processed_prefix: str = PROCESSED_PREFIX,
                               report_prefix: str = REPORT_PREFIX) -> str:
    """Inverse of report_name_for."""
    if not report_name.startswith(report_prefix) or not report_name.endswith(REPORT_SUFFIX):
        raise ValueError(f"Not a report artifact name: {report_name!r}")
    stem = report_name[len(report_prefix):-len(REPORT_SUFFIX)]
    if not stem:
        raise ValueError(f"Not a report artifact name: {report_name!r}")
    return f"{processed_prefix}{stem}{PROCESSED_SUFFIX}"


class ReportEmitter:
    """
    Writes the two output artifacts of a submission.

    The processed table is written first. If the report write then fails the
    processed table is removed again, so a failed emit leaves no orphan.
    """

    def __init__(self, processed_prefix: str = PROCESSED_PREFIX, report_prefix: str = REPORT_PREFIX):
        self.processed_prefix = processed_prefix
        self.report_prefix = report_prefix

    def emit(
        self,
        processed: ProcessedTable,
        report: QualityReport,
        category: Category,
        store: ArtifactStore,
    ) -> tuple[str, str]:
        """
        Persist the processed table and its report.

        Args:
            processed: Cleaned table
            report: Quality report for the submission
            category: Submission category, used in the artifact name
            store: Destination store

        Returns:
            (processed artifact name, report artifact name)

        Raises:
            StorageWriteError: If either write fails
        """
        processed_name = processed_name_for(generate_token(category), self.processed_prefix)
        report_name = report_name_for(processed_name, self.processed_prefix, self.report_prefix)

        store.put(processed_name, processed.to_delimited_text().encode("utf-8"))
        increment_counter(artifacts_written_total, kind="processed")

        try:
            store.put(report_name, report.to_json().encode("utf-8"))
        except StorageWriteError:
            self._rollback(processed_name, store)
            raise
        increment_counter(artifacts_written_total, kind="report")

        logger.info(
            f"Emitted {processed_name} and {report_name}",
            extra={"category": category.value, "grade": report.grade.value, "score": report.score},
        )
        return processed_name, report_name

    def _rollback(self, processed_name: str, store: ArtifactStore) -> None:
        try:
            store.delete(processed_name)
        except StorageWriteError as e:
            logger.error(
                f"Could not remove {processed_name} after a failed report write: {e}",
                extra={"artifact": processed_name},
            )
            return
        logger.warning(
            f"Removed {processed_name} after a failed report write",
            extra={"artifact": processed_name},
        )


def emit(
    processed: ProcessedTable,
    report: QualityReport,
    category: Category,
    store: ArtifactStore,
) -> tuple[str, str]:
    """Emit with the default prefixes."""
    return ReportEmitter().emit(processed, report, category, store)
