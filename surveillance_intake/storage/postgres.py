"""
PostgreSQL-backed artifact store.

Artifacts are rows of a single table keyed by name. Content is stored as
bytea so reports and processed tables round-trip byte for byte.
"""

from typing import List

import psycopg

from surveillance_intake.observability.logger import get_logger

from .base import ArtifactInfo, ArtifactStore, StorageReadError, StorageWriteError
from .connection import DatabaseConnectionPool

logger = get_logger(__name__)

DEFAULT_TABLE = "intake_artifact"

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS {table} (
    name TEXT PRIMARY KEY,
    content BYTEA NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT clock_timestamp()
)
"""


class PostgresArtifactStore(ArtifactStore):
    """
    Artifact store on a PostgreSQL table.

    Usage:
        with PostgresArtifactStore(DatabaseConnectionPool.from_env()) as store:
            store.ensure_schema()
            store.put("quality-reports/x_report.json", b"{}")
    """

    def __init__(self, pool: DatabaseConnectionPool, table: str = DEFAULT_TABLE):
        if not table.isidentifier():
            raise ValueError(f"Invalid table name: {table!r}")
        self.pool = pool
        self.table = table

    def ensure_schema(self) -> None:
        """Create the artifact table if it does not exist."""
        try:
            self.pool.execute_command(SCHEMA_SQL.format(table=self.table))
        except psycopg.Error as e:
            raise StorageWriteError(self.table, f"schema creation failed: {e}") from e
        logger.info(f"Artifact table {self.table} ready")

    def list(self, prefix: str = "") -> List[ArtifactInfo]:
        query = (
            f"SELECT name, created_at, octet_length(content) AS size FROM {self.table} "
            "WHERE starts_with(name, %s) ORDER BY created_at DESC, name DESC"
        )
        try:
            rows = self.pool.execute_query(query, (prefix,))
        except psycopg.Error as e:
            raise StorageReadError(prefix or self.table, f"listing failed: {e}") from e
        return [ArtifactInfo(**row) for row in rows]

    def get(self, name: str) -> bytes:
        try:
            rows = self.pool.execute_query(
                f"SELECT content FROM {self.table} WHERE name = %s", (name,)
            )
        except psycopg.Error as e:
            raise StorageReadError(name, f"read failed: {e}") from e
        if not rows:
            raise StorageReadError(name, "artifact not found")
        return bytes(rows[0]["content"])

    def put(self, name: str, data: bytes) -> None:
        command = (
            f"INSERT INTO {self.table} (name, content) VALUES (%s, %s) "
            "ON CONFLICT (name) DO UPDATE SET content = EXCLUDED.content, created_at = clock_timestamp()"
        )
        try:
            self.pool.execute_command(command, (name, data))
        except psycopg.Error as e:
            raise StorageWriteError(name, f"write failed: {e}") from e

    def delete(self, name: str) -> None:
        try:
            self.pool.execute_command(f"DELETE FROM {self.table} WHERE name = %s", (name,))
        except psycopg.Error as e:
            raise StorageWriteError(name, f"delete failed: {e}") from e

    def __enter__(self):
        try:
            self.pool.open()
        except psycopg.Error as e:
            raise StorageReadError(self.table, f"cannot connect to the artifact database: {e}") from e
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.pool.close()
        return False
