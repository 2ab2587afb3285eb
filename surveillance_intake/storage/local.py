"""
Filesystem artifact store.

Artifact "prefix/name" lives at <root>/prefix/name. Writes go through a
temporary file and an atomic rename so readers never see partial content.
"""

import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from surveillance_intake.observability.logger import get_logger
from surveillance_intake.utils.validation import ValidationError, validate_artifact_name

from .base import ArtifactInfo, ArtifactStore, StorageReadError, StorageWriteError

logger = get_logger(__name__)


class LocalArtifactStore(ArtifactStore):
    """
    Stores artifacts as files under a root directory.
    """

    def __init__(self, root: str | Path):
        """
        Initialize the store, creating the root directory if needed.

        Args:
            root: Directory that holds all artifacts
        """
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str, error_class) -> Path:
        try:
            validate_artifact_name(name)
        except ValidationError as e:
            raise error_class(name, str(e)) from e
        return self.root / name

    def list(self, prefix: str = "") -> List[ArtifactInfo]:
        artifacts = []
        try:
            for path in self.root.rglob("*"):
                if not path.is_file() or path.name.startswith("."):
                    continue
                name = path.relative_to(self.root).as_posix()
                if not name.startswith(prefix):
                    continue
                stat = path.stat()
                artifacts.append(ArtifactInfo(
                    name=name,
                    created_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                    size=stat.st_size,
                ))
        except OSError as e:
            raise StorageReadError(prefix or str(self.root), f"listing failed: {e}") from e
        return artifacts

    def get(self, name: str) -> bytes:
        path = self._path(name, StorageReadError)
        try:
            return path.read_bytes()
        except OSError as e:
            raise StorageReadError(name, f"read failed: {e}") from e

    def put(self, name: str, data: bytes) -> None:
        path = self._path(name, StorageWriteError)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageWriteError(name, f"write failed: {e}") from e

        logger.debug(f"Stored artifact {name} ({len(data)} bytes)")

    def delete(self, name: str) -> None:
        path = self._path(name, StorageWriteError)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageWriteError(name, f"delete failed: {e}") from e
