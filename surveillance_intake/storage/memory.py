"""
In-process artifact store, for embedding and tests.
"""

import threading
from datetime import datetime, timezone
from typing import List

from .base import ArtifactInfo, ArtifactStore, StorageReadError


class InMemoryArtifactStore(ArtifactStore):
    """
    Keeps artifacts in a dictionary guarded by a lock.
    """

    def __init__(self):
        self._artifacts: dict[str, tuple[bytes, datetime]] = {}
        self._lock = threading.Lock()

    def list(self, prefix: str = "") -> List[ArtifactInfo]:
        with self._lock:
            return [
                ArtifactInfo(name=name, created_at=created_at, size=len(data))
                for name, (data, created_at) in self._artifacts.items()
                if name.startswith(prefix)
            ]

    def get(self, name: str) -> bytes:
        with self._lock:
            entry = self._artifacts.get(name)
        if entry is None:
            raise StorageReadError(name, "artifact not found")
        return entry[0]

    def put(self, name: str, data: bytes) -> None:
        self.seed(name, data)

    def seed(self, name: str, data: bytes, created_at: datetime | None = None) -> None:
        """Store an artifact with an explicit creation time."""
        with self._lock:
            self._artifacts[name] = (bytes(data), created_at or datetime.now(timezone.utc))

    def delete(self, name: str) -> None:
        with self._lock:
            self._artifacts.pop(name, None)

    def __len__(self) -> int:
        return len(self._artifacts)
