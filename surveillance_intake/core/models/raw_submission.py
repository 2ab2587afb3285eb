"""
RawSubmission model representing an uploaded file before normalization (ephemeral).
"""

from datetime import datetime, timezone
from pathlib import PurePosixPath

from pydantic import BaseModel, Field, field_validator

from surveillance_intake.core.errors import UnsupportedFormatError
from surveillance_intake.utils.validation import validate_file_name

from .enums import EXTENSION_FORMATS, SourceFormat


def infer_format(file_name: str) -> SourceFormat:
    """
    Infer the declared format from a file extension.

    Raises:
        UnsupportedFormatError: If the extension is not recognised
    """
    suffix = PurePosixPath(file_name).suffix.lower()
    source_format = EXTENSION_FORMATS.get(suffix)
    if source_format is None:
        raise UnsupportedFormatError(file_name)
    return source_format


class RawSubmission(BaseModel):
    """
    An uploaded file as received from a field user.

    Note: RawSubmission is created at upload time, consumed once by the
    pipeline and never mutated.

    Attributes:
        file_name: Original file name (used for format and category inference)
        declared_format: Format the payload is parsed as
        payload: Raw uploaded bytes
        submitted_at: When the upload was received
    """

    file_name: str
    declared_format: SourceFormat
    payload: bytes
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator('file_name')
    @classmethod
    def check_file_name(cls, v):
        """Reject empty names and names carrying path components."""
        return validate_file_name(v)

    @classmethod
    def from_upload(
        cls,
        file_name: str,
        payload: bytes,
        declared_format: SourceFormat | None = None,
    ) -> "RawSubmission":
        """
        Build a submission, inferring the format from the extension when not given.

        Raises:
            UnsupportedFormatError: If no format is given and the extension is unknown
        """
        if declared_format is None:
            declared_format = infer_format(file_name)
        return cls(file_name=file_name, declared_format=declared_format, payload=payload)

    @property
    def size(self) -> int:
        return len(self.payload)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "file_name": "malaria_harare_2025.csv",
                "declared_format": "delimited_text",
                "payload": "district,week,cases\nHarare,1,14\n",
            }
        }
