"""
Submission ingestion pipeline orchestration.

Coordinates the flow: normalize → fingerprint → classify → detect
duplicates → assess → clean → emit
"""

from surveillance_intake.core.config import IngestionSettings
from surveillance_intake.core.errors import IntakeError, SubmissionTooLargeError
from surveillance_intake.core.fingerprint import fingerprint
from surveillance_intake.core.models import IngestionResult, RawSubmission, SourceFormat
from surveillance_intake.core.normalizers import FormatNormalizer
from surveillance_intake.core.quality import Preprocessor, QualityAssessor
from surveillance_intake.observability.logger import get_logger, log_operation
from surveillance_intake.observability.metrics import (
    processing_duration_seconds,
    record_submission,
    record_submission_failure,
    track_duration,
)
from surveillance_intake.storage.base import ArtifactStore

from .duplicate_detector import DuplicateDetector
from .report_emitter import ReportEmitter

logger = get_logger(__name__)


class IngestionPipeline:
    """
    Turns one raw submission into a processed table and a quality report.

    Flow:
    1. Enforce the upload size limit
    2. Normalize the payload into a canonical table
    3. Fingerprint the content and classify the file name
    4. Compare against recent artifacts of the same category
    5. Grade the table
    6. Remove duplicate rows and impute blanks
    7. Persist the processed table and report

    Nothing is written to the store before step 7, so a FormatError leaves
    the store untouched. The pipeline holds no per-submission state and a
    single instance may process submissions concurrently.
    """

    def __init__(self, store: ArtifactStore, settings: IngestionSettings | None = None):
        """
        Initialize the pipeline.

        Args:
            store: Artifact store read for duplicates and written with results
            settings: Ingestion settings (defaults apply when None)
        """
        self.store = store
        self.settings = settings or IngestionSettings()

        self.normalizer = FormatNormalizer(
            {SourceFormat.DELIMITED_TEXT: {"delimiter": self.settings.delimiter}}
        )
        self.classifier = self.settings.classifier()
        self.detector = DuplicateDetector(
            sample_size=self.settings.duplicate_sample_size,
            processed_prefix=self.settings.processed_prefix,
            report_prefix=self.settings.report_prefix,
        )
        self.assessor = QualityAssessor()
        self.preprocessor = Preprocessor()
        self.emitter = ReportEmitter(
            processed_prefix=self.settings.processed_prefix,
            report_prefix=self.settings.report_prefix,
        )

    def process(self, submission: RawSubmission) -> IngestionResult:
        """
        Process a submission end to end.

        Args:
            submission: Uploaded file

        Returns:
            IngestionResult with artifact names, report and duplicate verdict

        Raises:
            FormatError: If the payload is oversize or cannot be parsed as declared
            StorageWriteError: If the artifacts cannot be persisted
        """
        source_format = SourceFormat(submission.declared_format)
        context = {"file_name": submission.file_name, "source_format": source_format.value}

        try:
            with track_duration(processing_duration_seconds, source_format=source_format.value):
                with log_operation("process_submission", logger=logger, **context):
                    return self._run(submission, source_format, context)
        except IntakeError as e:
            record_submission_failure(source_format.value, type(e).__name__)
            raise

    def _run(self, submission: RawSubmission, source_format: SourceFormat, context: dict) -> IngestionResult:
        if submission.size > self.settings.max_upload_bytes:
            raise SubmissionTooLargeError(submission.file_name, submission.size, self.settings.max_upload_bytes)

        with log_operation("normalize", logger=logger, **context):
            table = self.normalizer.normalize(submission.payload, source_format)

        content_fingerprint = fingerprint(table)
        category = self.classifier.classify(submission.file_name)

        with log_operation("detect_duplicates", logger=logger, category=category.value, **context):
            verdict = self.detector.detect(
                content_fingerprint, category, self.store, file_name=submission.file_name
            )

        report = self.assessor.assess(
            table, verdict, source_format, category, content_fingerprint, file_name=submission.file_name
        )
        processed = self.preprocessor.clean(table, report)

        with log_operation("emit_artifacts", logger=logger, category=category.value, **context):
            processed_name, report_name = self.emitter.emit(processed, report, category, self.store)

        record_submission(
            source_format=source_format.value,
            category=category.value,
            grade=report.grade.value,
            score=report.score,
            row_count=table.row_count,
            dropped_rows=table.dropped_row_count,
            duplicate_rows=table.row_count - processed.row_count,
            missing_cells=report.metadata.missing_value_count,
        )

        return IngestionResult(
            processed_artifact=processed_name,
            report_artifact=report_name,
            report=report,
            verdict=verdict,
        )

    def process_many(self, submissions) -> list[tuple[RawSubmission, IngestionResult | IntakeError]]:
        """
        Process submissions one after another, isolating failures.

        A later submission sees the artifacts written by earlier ones, so
        repeated content within one batch is flagged as a duplicate.

        Returns:
            (submission, result or the IntakeError it failed with) per submission
        """
        outcomes: list[tuple[RawSubmission, IngestionResult | IntakeError]] = []
        for submission in submissions:
            try:
                outcomes.append((submission, self.process(submission)))
            except IntakeError as e:
                logger.error(
                    f"Submission {submission.file_name} failed: {e}",
                    extra={"file_name": submission.file_name, "error_type": type(e).__name__},
                )
                outcomes.append((submission, e))

        failed = sum(1 for _, outcome in outcomes if isinstance(outcome, IntakeError))
        logger.info(f"Processed {len(outcomes)} submissions, {failed} failed")
        return outcomes
