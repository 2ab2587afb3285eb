"""
Duplicate detection against previously accepted artifacts.

Compares a submission's content fingerprint with a bounded sample of the
most recent processed artifacts in the same category. Each candidate's
fingerprint is taken from its quality report, which records the content
as submitted; the processed table is only re-read when the report is
unavailable. Store failures never fail the submission: an unreadable
candidate simply does not match.
"""

from typing import List, NamedTuple

from surveillance_intake.core.errors import FormatError, StorageReadError
from surveillance_intake.core.fingerprint import fingerprint as compute_fingerprint
from surveillance_intake.core.models import Category, DuplicateVerdict, SourceFormat
from surveillance_intake.core.normalizers import FormatNormalizer
from surveillance_intake.observability.logger import get_logger
from surveillance_intake.observability.metrics import (
    duplicates_detected_total,
    increment_counter,
    storage_read_failures_total,
)
from surveillance_intake.storage.base import ArtifactInfo, ArtifactStore
from surveillance_intake.utils.validation import validate_sample_size

from .report_emitter import PROCESSED_PREFIX, REPORT_PREFIX
from .reports import load_report

logger = get_logger(__name__)

DEFAULT_SAMPLE_SIZE = 3
DEFAULT_PROCESSED_PREFIX = PROCESSED_PREFIX
DEFAULT_REPORT_PREFIX = REPORT_PREFIX


class CandidateFacts(NamedTuple):
    """What a stored artifact says about the submission it came from."""

    fingerprint: str
    source_file_name: str | None = None


class DuplicateDetector:
    """
    Decides whether a submission repeats data already in the store.

    Only the newest `sample_size` candidates are compared, so a duplicate of
    an older artifact can go unnoticed; raising the sample size trades
    read cost for recall.
    """

    def __init__(
        self,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        processed_prefix: str = DEFAULT_PROCESSED_PREFIX,
        normalizer: FormatNormalizer | None = None,
        report_prefix: str = DEFAULT_REPORT_PREFIX,
    ):
        """
        Initialize the detector.

        Args:
            sample_size: Maximum number of candidates fetched per submission
            processed_prefix: Store prefix under which processed tables live
            normalizer: Normalizer used to re-read stored tables
            report_prefix: Store prefix under which quality reports live
        """
        self.sample_size = validate_sample_size(sample_size)
        self.processed_prefix = processed_prefix
        self.report_prefix = report_prefix
        self.normalizer = normalizer or FormatNormalizer()

    def detect(
        self,
        fingerprint: str,
        category: Category,
        store: ArtifactStore,
        file_name: str | None = None,
    ) -> DuplicateVerdict:
        """
        Compare a fingerprint with recent artifacts of the same category.

        A name collision is reported when an artifact's base name, or the
        upload name recorded in a candidate's report, equals file_name.

        Args:
            fingerprint: Content fingerprint of the submission
            category: Category of the submission
            store: Artifact store holding earlier processed tables
            file_name: Original submission file name, for the name check

        Returns:
            DuplicateVerdict
        """
        artifacts = self._list_processed(category, store)

        name_match = None
        if file_name:
            name_match = next((a.name for a in artifacts if a.base_name == file_name), None)

        checked = 0
        failed = 0
        content_match = None
        for candidate in self.select_candidates(artifacts, category):
            facts = self.candidate_facts(candidate.name, category, store)
            if facts is None:
                failed += 1
                continue
            checked += 1
            if content_match is None and facts.fingerprint == fingerprint:
                content_match = candidate.name
            if name_match is None and file_name and facts.source_file_name == file_name:
                name_match = candidate.name
            if content_match and (name_match or not file_name):
                break

        if content_match is None and name_match is None:
            logger.debug(
                f"No duplicate among {checked} candidates",
                extra={"category": category.value, "candidates_failed": failed},
            )
            return DuplicateVerdict.new(category, checked=checked, failed=failed)

        if content_match:
            increment_counter(duplicates_detected_total, category=category.value, reason="content")
        if name_match:
            increment_counter(duplicates_detected_total, category=category.value, reason="name")

        logger.info(
            f"Duplicate submission detected in category {category.value}",
            extra={
                "category": category.value,
                "content_match": content_match is not None,
                "name_collision": name_match is not None,
                "matched_artifact": content_match or name_match,
            },
        )

        return DuplicateVerdict(
            is_duplicate=True,
            matched_category=category,
            content_match=content_match is not None,
            name_collision=name_match is not None,
            matched_artifact=content_match or name_match,
            candidates_checked=checked,
            candidates_failed=failed,
        )

    def select_candidates(self, artifacts: List[ArtifactInfo], category: Category) -> List[ArtifactInfo]:
        """Newest artifacts whose name mentions the category, up to the sample size."""
        matching = [a for a in artifacts if category.value in a.base_name]
        matching.sort(key=lambda a: (a.created_at, a.name), reverse=True)
        return matching[:self.sample_size]

    def candidate_facts(self, name: str, category: Category, store: ArtifactStore) -> CandidateFacts | None:
        """
        Fingerprint and upload name of a stored processed artifact.

        Read from the artifact's quality report when possible, otherwise
        recomputed from the processed table.

        Returns:
            CandidateFacts, or None when neither the report nor the table can be read
        """
        try:
            report = load_report(store, name, self.processed_prefix, self.report_prefix)
            return CandidateFacts(report.metadata.fingerprint, report.metadata.source_file_name)
        except (StorageReadError, ValueError) as e:
            logger.debug(
                f"No usable report for {name}, fingerprinting the processed table: {e}",
                extra={"artifact": name, "category": category.value},
            )

        candidate_fingerprint = self._fingerprint_artifact(name, category, store)
        if candidate_fingerprint is None:
            return None
        return CandidateFacts(candidate_fingerprint)

    def _list_processed(self, category: Category, store: ArtifactStore) -> List[ArtifactInfo]:
        """List processed artifacts; a failed listing yields no candidates."""
        try:
            return store.list(self.processed_prefix)
        except StorageReadError as e:
            logger.warning(
                f"Artifact listing failed, assuming no duplicates: {e}",
                extra={"category": category.value, "prefix": self.processed_prefix},
            )
            increment_counter(storage_read_failures_total, category=category.value)
            return []

    def _fingerprint_artifact(self, name: str, category: Category, store: ArtifactStore) -> str | None:
        """Fingerprint a stored processed table, or None when it cannot be read."""
        try:
            data = store.get(name)
            table = self.normalizer.normalize(data, SourceFormat.DELIMITED_TEXT)
        except (StorageReadError, FormatError) as e:
            logger.warning(
                f"Skipping unreadable duplicate candidate: {e}",
                extra={"artifact": name, "category": category.value, "error_type": type(e).__name__},
            )
            increment_counter(storage_read_failures_total, category=category.value)
            return None
        return compute_fingerprint(table)


def detect(
    fingerprint: str,
    category: Category,
    store: ArtifactStore,
    file_name: str | None = None,
    sample_size: int = DEFAULT_SAMPLE_SIZE,
) -> DuplicateVerdict:
    """Detect duplicates with a default-configured detector."""
    return DuplicateDetector(sample_size=sample_size).detect(fingerprint, category, store, file_name)
