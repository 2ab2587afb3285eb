"""
Structured logging for surveillance-intake

Records are JSON objects on stdout. Pipeline stages log through
log_operation, so one submission can be traced by its file name from
normalization to the written artifacts.
"""
import logging
import os
import sys
import time

from pythonjsonlogger import jsonlogger

SERVICE_NAME = "surveillance-intake"

JSON_FIELDS = "%(timestamp)s %(level)s %(logger)s %(message)s"
TEXT_FIELDS = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class IntakeJsonFormatter(jsonlogger.JsonFormatter):
    """Stamps every JSON record with level, logger, service and code location."""

    def add_fields(self, log_record: dict, record: logging.LogRecord, message_dict: dict) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = log_record.get("timestamp") or self.formatTime(record, self.datefmt)
        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = SERVICE_NAME
        log_record["location"] = f"{record.module}.{record.funcName}:{record.lineno}"


def resolve_level(level: str | None = None) -> int:
    """Level number for a case-insensitive name; unknown names mean INFO."""
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def build_formatter(format_type: str) -> logging.Formatter:
    if format_type == "text":
        return logging.Formatter(TEXT_FIELDS, datefmt="%Y-%m-%d %H:%M:%S")
    return IntakeJsonFormatter(JSON_FIELDS, datefmt="%Y-%m-%dT%H:%M:%S")


def setup_logger(
    name: str = SERVICE_NAME,
    level: str | None = None,
    format_type: str | None = None,
) -> logging.Logger:
    """
    Configure a logger that writes to stdout.

    Calling it again for the same name replaces the handler.

    Args:
        name: Logger name
        level: Level name (defaults to env var LOG_LEVEL, then INFO)
        format_type: "json" or "text" (defaults to env var LOG_FORMAT, then json)

    Returns:
        Configured logger instance
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(build_formatter(format_type or os.getenv("LOG_FORMAT", "json")))

    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.setLevel(resolve_level(level))
    logger.propagate = False
    return logger


def get_logger(name: str = SERVICE_NAME) -> logging.Logger:
    """Return the named logger, setting it up on first use."""
    logger = logging.getLogger(name)
    return logger if logger.handlers else setup_logger(name)


class log_operation:
    """
    Logs the start, outcome and duration of one pipeline stage.

    Exceptions are logged with their type and message, then re-raised.

    Usage:
        with log_operation("normalize", logger=logger, file_name="malaria.csv"):
            table = normalize(payload, source_format)
    """

    def __init__(self, operation_name: str, logger: logging.Logger | None = None, **fields):
        self.operation_name = operation_name
        self.logger = logger or get_logger()
        self.fields = {"operation": operation_name, **fields}
        self.started: float | None = None

    @property
    def elapsed(self) -> float:
        return 0.0 if self.started is None else time.perf_counter() - self.started

    def __enter__(self):
        self.started = time.perf_counter()
        self.logger.debug(f"Starting: {self.operation_name}", extra=self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        outcome = {**self.fields, "duration_seconds": round(self.elapsed, 3)}
        if exc_type is None:
            self.logger.info(f"Completed: {self.operation_name}", extra={**outcome, "status": "success"})
        else:
            self.logger.error(
                f"Failed: {self.operation_name}",
                extra={
                    **outcome,
                    "status": "error",
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val),
                },
            )
        return False
