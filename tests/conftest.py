"""
Pytest configuration and fixtures for surveillance-intake tests

This module provides shared fixtures for unit, integration, and E2E tests.
"""
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Generator

import pytest

from surveillance_intake.core.config import IngestionSettings
from surveillance_intake.core.errors import StorageReadError, StorageWriteError
from surveillance_intake.storage import InMemoryArtifactStore, LocalArtifactStore


# =======================
# PYTEST CONFIGURATION
# =======================

def pytest_configure(config):
    """Configure pytest with custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests that don't require external services"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that run several pipeline stages or a real database together"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end tests that drive the command-line interface"
    )
    config.addinivalue_line(
        "markers", "slow: Tests that take more than 5 seconds to run"
    )


# =======================
# STORE FIXTURES
# =======================

class FlakyArtifactStore(InMemoryArtifactStore):
    """
    In-memory store that fails on demand.

    Attributes:
        unreadable: Names whose get() raises StorageReadError
        unwritable_prefixes: Prefixes whose put() raises StorageWriteError
        listing_fails: When True, list() raises StorageReadError
    """

    def __init__(self):
        super().__init__()
        self.unreadable: set[str] = set()
        self.unwritable_prefixes: set[str] = set()
        self.listing_fails = False

    def list(self, prefix: str = ""):
        if self.listing_fails:
            raise StorageReadError(prefix, "listing unavailable")
        return super().list(prefix)

    def get(self, name: str) -> bytes:
        if name in self.unreadable:
            raise StorageReadError(name, "simulated read failure")
        return super().get(name)

    def put(self, name: str, data: bytes) -> None:
        if any(name.startswith(prefix) for prefix in self.unwritable_prefixes):
            raise StorageWriteError(name, "simulated write failure")
        super().put(name, data)


@pytest.fixture
def memory_store() -> InMemoryArtifactStore:
    return InMemoryArtifactStore()


@pytest.fixture
def flaky_store() -> FlakyArtifactStore:
    return FlakyArtifactStore()


@pytest.fixture
def local_store(tmp_path) -> LocalArtifactStore:
    return LocalArtifactStore(tmp_path / "artifacts")


@pytest.fixture
def settings() -> IngestionSettings:
    return IngestionSettings()


@pytest.fixture
def seed_processed():
    """
    Seed processed artifacts with increasing creation times.

    Usage:
        names = seed_processed(store, [("malaria", b"a,b\\n1,2\\n"), ...])
    """
    def _seed(store: InMemoryArtifactStore, entries, start: datetime | None = None) -> list[str]:
        start = start or datetime(2025, 1, 1, tzinfo=timezone.utc)
        names = []
        for index, (category, content) in enumerate(entries):
            name = f"submitted-datasets/{category}_{1735689600000 + index}_{index:08x}.csv"
            store.seed(name, content, created_at=start + timedelta(minutes=index))
            names.append(name)
        return names

    return _seed


# =======================
# DATABASE FIXTURES (Testcontainers)
# =======================

@pytest.fixture(scope="session")
def postgres_container() -> Generator:
    """
    Start PostgreSQL container for integration tests

    Skips the dependent tests when Docker is not available.

    Yields:
        PostgresContainer instance
    """
    from testcontainers.postgres import PostgresContainer

    container = PostgresContainer(
        image="postgres:16.2-alpine",
        username="test_intake",
        password="test_password",
        dbname="test_surveillance",
    )
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    try:
        yield container
    finally:
        container.stop()


# =======================
# FILE FIXTURES
# =======================

@pytest.fixture(scope="session")
def test_data_dir() -> Path:
    """
    Get path to test data fixtures directory

    Returns:
        Path to tests/fixtures directory
    """
    return Path(os.path.dirname(__file__)) / "fixtures"


@pytest.fixture(scope="session")
def config_dir() -> Path:
    """Path to the repository's config directory"""
    return Path(os.path.dirname(os.path.dirname(__file__))) / "config"


# =======================
# CONFIGURATION FIXTURES
# =======================

@pytest.fixture
def clean_env(monkeypatch):
    """Remove INTAKE_* variables so tests never see the developer's environment"""
    for variable in list(os.environ):
        if variable.startswith("INTAKE_"):
            monkeypatch.delenv(variable, raising=False)
    return monkeypatch
