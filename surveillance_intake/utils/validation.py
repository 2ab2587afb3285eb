"""
Input validation utilities for the intake pipeline.

Provides reusable checks for submission file names, artifact names and
tunable limits so that bad input is rejected before any parsing happens.
"""

import re


class ValidationError(ValueError):
    """Raised when input validation fails."""
    pass


# Generated artifact names: "<prefix>/<stem>.<ext>", one directory level at most
_ARTIFACT_NAME_RE = re.compile(r'^[a-zA-Z0-9_\-\.]+(/[a-zA-Z0-9_\-\.]+)?$')


def validate_file_name(file_name: str, field_name: str = "file_name") -> str:
    """
    Validate the name of an uploaded file.

    File names must be non-empty, must not contain path separators and must
    not exceed 255 characters.

    Args:
        file_name: The file name to validate
        field_name: Name of the field (for error messages)

    Returns:
        The validated file name (stripped of whitespace)

    Raises:
        ValidationError: If validation fails

    Examples:
        >>> validate_file_name("malaria_cases.csv")
        'malaria_cases.csv'
        >>> validate_file_name("../etc/passwd")  # doctest: +SKIP
        ValidationError: file_name must not contain path separators
    """
    if not file_name or not isinstance(file_name, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    file_name = file_name.strip()

    if not file_name:
        raise ValidationError(f"{field_name} cannot be empty or whitespace-only")

    if "/" in file_name or "\\" in file_name:
        raise ValidationError(f"{field_name} must not contain path separators")

    if file_name in (".", ".."):
        raise ValidationError(f"{field_name} must name a file")

    if len(file_name) > 255:
        raise ValidationError(f"{field_name} exceeds maximum length of 255 characters")

    return file_name


def validate_artifact_name(name: str, field_name: str = "artifact_name") -> str:
    """
    Validate a stored artifact name.

    Artifact names may carry a single prefix directory and otherwise only
    alphanumerics, hyphens, underscores and dots.

    Raises:
        ValidationError: If validation fails
    """
    if not name or not isinstance(name, str):
        raise ValidationError(f"{field_name} must be a non-empty string")

    if not _ARTIFACT_NAME_RE.match(name) or ".." in name:
        raise ValidationError(
            f"{field_name} contains invalid characters. "
            "Only alphanumeric, hyphens, underscores, dots and one '/' are allowed."
        )

    if len(name) > 512:
        raise ValidationError(f"{field_name} exceeds maximum length of 512 characters")

    return name


def validate_sample_size(sample_size: int, field_name: str = "duplicate_sample_size", max_size: int = 1000) -> int:
    """
    Validate the duplicate-detection sample bound.

    Examples:
        >>> validate_sample_size(3)
        3
        >>> validate_sample_size(0)  # doctest: +SKIP
        ValidationError: duplicate_sample_size must be a positive integer
    """
    if isinstance(sample_size, bool) or not isinstance(sample_size, int):
        raise ValidationError(f"{field_name} must be an integer, got {type(sample_size).__name__}")

    if sample_size <= 0:
        raise ValidationError(f"{field_name} must be a positive integer, got {sample_size}")

    if sample_size > max_size:
        raise ValidationError(f"{field_name} exceeds maximum of {max_size}")

    return sample_size


def validate_delimiter(delimiter: str, field_name: str = "delimiter") -> str:
    """Validate a single-character field delimiter."""
    if not isinstance(delimiter, str) or len(delimiter) != 1:
        raise ValidationError(f"{field_name} must be exactly one character")

    if delimiter in ("\n", "\r"):
        raise ValidationError(f"{field_name} cannot be a line break")

    return delimiter
