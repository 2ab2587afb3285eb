"""
Artifact store interface.

The pipeline reads historical artifacts for duplicate detection and writes
the processed table and quality report. Backends raise StorageReadError and
StorageWriteError so callers never see backend-specific exceptions.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field, field_validator

from surveillance_intake.core.errors import StorageReadError, StorageWriteError


class ArtifactInfo(BaseModel):
    """
    Listing entry for one stored artifact.

    Attributes:
        name: Full artifact name including its prefix
        created_at: When the artifact was stored (naive values are taken as UTC)
        size: Content length in bytes
    """

    name: str
    created_at: datetime
    size: int = Field(0, ge=0)

    @field_validator("created_at")
    @classmethod
    def validate_created_at(cls, v: datetime) -> datetime:
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @property
    def base_name(self) -> str:
        """Name without its prefix directory."""
        return self.name.rsplit("/", 1)[-1]

    class Config:
        frozen = True


class ArtifactStore(ABC):
    """
    Abstract object store used by the pipeline.

    Implementations must be safe to share between concurrent submissions:
    reads have no side effects and writes only ever create new names.
    """

    @abstractmethod
    def list(self, prefix: str = "") -> List[ArtifactInfo]:
        """
        List artifacts whose name starts with prefix.

        Raises:
            StorageReadError: If the listing fails
        """
        pass

    @abstractmethod
    def get(self, name: str) -> bytes:
        """
        Fetch an artifact's content.

        Raises:
            StorageReadError: If the artifact is missing or unreadable
        """
        pass

    @abstractmethod
    def put(self, name: str, data: bytes) -> None:
        """
        Persist an artifact.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        """
        Remove an artifact (used only to roll back a partial emit).

        Raises:
            StorageWriteError: If the delete fails
        """
        pass

    def exists(self, name: str) -> bool:
        prefix = name.rsplit("/", 1)[0] + "/" if "/" in name else ""
        return any(info.name == name for info in self.list(prefix))


__all__ = [
    "ArtifactInfo",
    "ArtifactStore",
    "StorageReadError",
    "StorageWriteError",
]
