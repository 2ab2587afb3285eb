"""
PostgreSQL connection pool for the artifact store, using psycopg3.

Each PostgresArtifactStore owns its pool; there is no process-wide pool.
"""

import os
import time
from contextlib import contextmanager

from psycopg import OperationalError
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool

from surveillance_intake.observability.logger import get_logger

logger = get_logger(__name__)

# Connection field -> (environment variable, default)
ENV_FIELDS = {
    "host": ("INTAKE_DB_HOST", "localhost"),
    "port": ("INTAKE_DB_PORT", "5432"),
    "dbname": ("INTAKE_DB_NAME", "surveillance"),
    "user": ("INTAKE_DB_USER", "intake"),
}


def build_conninfo(timeout: float, **fields) -> str:
    """
    Build a libpq connection string, filling unset fields from INTAKE_DB_*.

    Raises:
        ValueError: If no password is given and INTAKE_DB_PASSWORD is unset
    """
    resolved = {
        key: fields.get(key) or os.getenv(env_var, default)
        for key, (env_var, default) in ENV_FIELDS.items()
    }
    password = fields.get("password") or os.getenv("INTAKE_DB_PASSWORD")
    if not password:
        raise ValueError(
            "Database password must be provided. "
            "Set INTAKE_DB_PASSWORD or pass a conninfo string."
        )
    return make_conninfo(password=password, connect_timeout=int(timeout), **resolved)


class DatabaseConnectionPool:
    """
    Pooled PostgreSQL connections with retry on open.

    Rows are returned as dictionaries.
    """

    def __init__(
        self,
        conninfo: str | None = None,
        host: str | None = None,
        port: int | None = None,
        database: str | None = None,
        user: str | None = None,
        password: str | None = None,
        min_size: int = 1,
        max_size: int = 5,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the pool without connecting.

        Args:
            conninfo: Full connection string; overrides the individual fields
            host, port, database, user, password: Connection fields
                (default to the INTAKE_DB_* environment variables)
            min_size: Minimum pool size
            max_size: Maximum pool size
            timeout: Seconds to wait for a connection
        """
        self.conninfo = conninfo or build_conninfo(
            timeout, host=host, port=port, dbname=database, user=user, password=password
        )
        self.min_size = min_size
        self.max_size = max_size
        self.timeout = timeout
        self._pool: ConnectionPool | None = None

    @classmethod
    def from_env(cls, **kwargs) -> "DatabaseConnectionPool":
        """Build from INTAKE_DATABASE_URL if set, else from the INTAKE_DB_* variables."""
        return cls(conninfo=os.getenv("INTAKE_DATABASE_URL"), **kwargs)

    @property
    def is_open(self) -> bool:
        return self._pool is not None

    def open(self, max_retries: int = 3, retry_delay: float = 2.0) -> None:
        """
        Open the pool, retrying transient connection failures.

        Raises:
            OperationalError: If every attempt fails
        """
        if self.is_open:
            return

        pool = ConnectionPool(
            conninfo=self.conninfo,
            min_size=self.min_size,
            max_size=self.max_size,
            timeout=self.timeout,
            kwargs={"row_factory": dict_row},
            open=False,
        )

        attempt = 0
        while True:
            attempt += 1
            try:
                pool.open(wait=True, timeout=self.timeout)
                break
            except (OperationalError, TimeoutError) as e:
                if attempt >= max_retries:
                    pool.close()
                    raise OperationalError(
                        f"Could not reach the artifact database after {attempt} attempts: {e}"
                    ) from e
                logger.warning(f"Artifact database not reachable (attempt {attempt}), retrying: {e}")
                time.sleep(retry_delay)

        self._pool = pool
        logger.info("Artifact database pool open", extra={"pool_max_size": self.max_size})

    def close(self) -> None:
        if self._pool is not None:
            self._pool.close()
            self._pool = None

    @contextmanager
    def get_connection(self):
        """
        Borrow a connection; it commits on clean exit and rolls back on error.

        Raises:
            RuntimeError: If the pool is not open
        """
        if self._pool is None:
            raise RuntimeError("Connection pool is not open. Call open() first.")

        with self._pool.connection() as conn:
            yield conn

    def execute_query(self, query: str, params: tuple | None = None) -> list[dict]:
        with self.get_connection() as conn:
            return conn.execute(query, params).fetchall()

    def execute_command(self, command: str, params: tuple | None = None) -> int:
        """Run a write or DDL statement and return the affected row count."""
        with self.get_connection() as conn:
            return conn.execute(command, params).rowcount

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
