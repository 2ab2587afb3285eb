"""
Artifact storage backends.

PostgresArtifactStore is imported from surveillance_intake.storage.postgres
so psycopg is only loaded when that backend is used.
"""

from .base import ArtifactInfo, ArtifactStore
from .local import LocalArtifactStore
from .memory import InMemoryArtifactStore

__all__ = [
    "ArtifactInfo",
    "ArtifactStore",
    "InMemoryArtifactStore",
    "LocalArtifactStore",
]
