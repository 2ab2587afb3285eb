"""
Error taxonomy for the intake pipeline.

FormatError and StorageWriteError are fatal for a submission and always
reach the caller. StorageReadError is recovered inside duplicate detection.
"""


class IntakeError(Exception):
    """Base class for all intake errors."""


class FormatError(IntakeError):
    """Raised when a payload cannot be normalized as its declared format."""

    def __init__(self, source_format: str, message: str):
        self.source_format = source_format
        self.message = message
        super().__init__(f"[{source_format}] {message}")


class UnsupportedFormatError(FormatError):
    """Raised when a file extension maps to no known format."""

    def __init__(self, file_name: str):
        self.file_name = file_name
        super().__init__("unsupported", f"Cannot infer a supported format from file name '{file_name}'")


class SubmissionTooLargeError(FormatError):
    """Raised when a payload exceeds the configured upload limit."""

    def __init__(self, file_name: str, size: int, limit: int):
        self.file_name = file_name
        self.size = size
        self.limit = limit
        super().__init__("oversize", f"{file_name} is {size} bytes, limit is {limit} bytes")


class StorageError(IntakeError):
    """Base class for artifact store failures."""

    def __init__(self, name: str, message: str):
        self.name = name
        self.message = message
        super().__init__(f"{name}: {message}")


class StorageReadError(StorageError):
    """Raised when an artifact cannot be listed or fetched."""


class StorageWriteError(StorageError):
    """Raised when an artifact cannot be persisted."""


class ConfigError(IntakeError):
    """Raised when ingestion settings are missing or malformed."""
