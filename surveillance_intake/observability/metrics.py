"""
Prometheus metrics collection for surveillance-intake

Instruments submission throughput, quality grades, duplicate decisions
and artifact store health.
"""
import os
from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

# Private registry so importing this module never touches the process default
REGISTRY = CollectorRegistry()


# =======================
# SUBMISSION METRICS
# =======================

submissions_processed_total = Counter(
    name="intake_submissions_processed_total",
    documentation="Total number of submissions processed to completion",
    labelnames=["source_format", "grade"],
    registry=REGISTRY,
)

submission_failures_total = Counter(
    name="intake_submission_failures_total",
    documentation="Total number of submissions that failed outright",
    labelnames=["source_format", "error_type"],
    registry=REGISTRY,
)

processing_duration_seconds = Histogram(
    name="intake_processing_duration_seconds",
    documentation="Time spent processing one submission in seconds",
    labelnames=["source_format"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
    registry=REGISTRY,
)

# =======================
# DATA QUALITY METRICS
# =======================

quality_score = Histogram(
    name="intake_quality_score",
    documentation="Distribution of quality scores assigned to submissions",
    labelnames=["category"],
    buckets=[10, 20, 30, 40, 50, 60, 70, 80, 90, 100],
    registry=REGISTRY,
)

rows_ingested_total = Counter(
    name="intake_rows_ingested_total",
    documentation="Data rows seen per submission stage",
    labelnames=["category", "stage"],  # stage: normalized, dropped, deduplicated, imputed
    registry=REGISTRY,
)

duplicates_detected_total = Counter(
    name="intake_duplicates_detected_total",
    documentation="Submissions flagged as duplicates of existing artifacts",
    labelnames=["category", "reason"],  # reason: content, name
    registry=REGISTRY,
)

# =======================
# STORAGE METRICS
# =======================

storage_read_failures_total = Counter(
    name="intake_storage_read_failures_total",
    documentation="Historical artifact reads that failed and were treated as non-matching",
    labelnames=["category"],
    registry=REGISTRY,
)

artifacts_written_total = Counter(
    name="intake_artifacts_written_total",
    documentation="Artifacts persisted by the report emitter",
    labelnames=["kind"],  # kind: processed, report
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(processing_duration_seconds, source_format="delimited_text"):
            # do work
            pass
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    if value <= 0:
        return
    counter.labels(**labels).inc(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    histogram.labels(**labels).observe(value)


def get_counter_value(counter: Counter, **labels) -> float:
    """Read the current value of a labelled counter (used by tests and the CLI)."""
    value = REGISTRY.get_sample_value(f"{counter._name}_total", labels)
    return value or 0.0


# =======================
# SUBMISSION HELPERS
# =======================

def record_submission(
    source_format: str,
    category: str,
    grade: str,
    score: int,
    row_count: int,
    dropped_rows: int,
    duplicate_rows: int,
    missing_cells: int,
) -> None:
    """
    Record metrics for a submission that completed successfully.

    Args:
        source_format: Declared format of the submission
        category: Category derived from the file name
        grade: Letter grade assigned
        score: Numeric score assigned
        row_count: Data rows after normalization
        dropped_rows: Rows rejected by the normalizer
        duplicate_rows: Duplicate rows removed by preprocessing
        missing_cells: Cells imputed by preprocessing
    """
    increment_counter(submissions_processed_total, 1, source_format=source_format, grade=grade)
    observe_histogram(quality_score, score, category=category)
    increment_counter(rows_ingested_total, row_count, category=category, stage="normalized")
    increment_counter(rows_ingested_total, dropped_rows, category=category, stage="dropped")
    increment_counter(rows_ingested_total, duplicate_rows, category=category, stage="deduplicated")
    increment_counter(rows_ingested_total, missing_cells, category=category, stage="imputed")


def record_submission_failure(source_format: str, error_type: str) -> None:
    increment_counter(submission_failures_total, 1, source_format=source_format, error_type=error_type)
