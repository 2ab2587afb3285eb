"""
Unit tests for artifact store backends.
"""

import os
from datetime import datetime, timezone

import pytest

from surveillance_intake.core.errors import StorageReadError, StorageWriteError
from surveillance_intake.storage import ArtifactInfo, InMemoryArtifactStore, LocalArtifactStore


@pytest.mark.unit
class TestArtifactInfo:
    """Tests for ArtifactInfo"""

    def test_base_name(self):
        info = ArtifactInfo(
            name="submitted-datasets/malaria_1_00000000.csv",
            created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
        )
        assert info.base_name == "malaria_1_00000000.csv"

    def test_name_without_prefix(self):
        info = ArtifactInfo(name="loose.csv", created_at=datetime(2025, 1, 1, tzinfo=timezone.utc), size=3)
        assert info.base_name == "loose.csv"

    def test_naive_creation_time_taken_as_utc(self):
        info = ArtifactInfo(name="loose.csv", created_at=datetime(2025, 1, 1))
        assert info.created_at == datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.mark.unit
class TestInMemoryArtifactStore:
    """Tests for InMemoryArtifactStore"""

    def test_put_get_list(self, memory_store):
        memory_store.put("submitted-datasets/a.csv", b"a\n1\n")
        memory_store.put("quality-reports/a_report.json", b"{}")

        listed = memory_store.list("submitted-datasets/")

        assert [info.name for info in listed] == ["submitted-datasets/a.csv"]
        assert listed[0].size == 4
        assert memory_store.get("submitted-datasets/a.csv") == b"a\n1\n"
        assert len(memory_store) == 2

    def test_missing_artifact(self, memory_store):
        with pytest.raises(StorageReadError) as exc_info:
            memory_store.get("submitted-datasets/missing.csv")

        assert exc_info.value.name == "submitted-datasets/missing.csv"

    def test_delete(self, memory_store):
        memory_store.put("submitted-datasets/a.csv", b"x")
        memory_store.delete("submitted-datasets/a.csv")
        memory_store.delete("submitted-datasets/a.csv")

        assert not memory_store.exists("submitted-datasets/a.csv")

    def test_seed_with_creation_time(self, memory_store):
        created = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        memory_store.seed("submitted-datasets/old.csv", b"x", created_at=created)

        assert memory_store.list()[0].created_at == created

    def test_default_creation_time_is_aware(self, memory_store):
        memory_store.put("submitted-datasets/a.csv", b"x")
        assert memory_store.list()[0].created_at.tzinfo is not None


@pytest.mark.unit
class TestLocalArtifactStore:
    """Tests for LocalArtifactStore"""

    def test_round_trip(self, local_store):
        local_store.put("submitted-datasets/malaria_1_00000000.csv", b"a,b\n1,2\n")

        assert local_store.get("submitted-datasets/malaria_1_00000000.csv") == b"a,b\n1,2\n"
        assert (local_store.root / "submitted-datasets" / "malaria_1_00000000.csv").is_file()

    def test_list_by_prefix(self, local_store):
        local_store.put("submitted-datasets/a.csv", b"1")
        local_store.put("quality-reports/a_report.json", b"22")

        names = {info.name: info.size for info in local_store.list("quality-reports/")}

        assert names == {"quality-reports/a_report.json": 2}
        assert len(local_store.list()) == 2

    def test_list_uses_modification_time(self, local_store):
        local_store.put("submitted-datasets/a.csv", b"1")
        path = local_store.root / "submitted-datasets" / "a.csv"
        os.utime(path, (1_700_000_000, 1_700_000_000))

        info = local_store.list("submitted-datasets/")[0]

        assert int(info.created_at.timestamp()) == 1_700_000_000

    def test_no_temporary_files_left(self, local_store):
        local_store.put("submitted-datasets/a.csv", b"1")
        leftovers = [p.name for p in (local_store.root / "submitted-datasets").iterdir() if p.name.startswith(".")]
        assert leftovers == []

    @pytest.mark.parametrize("name", ["../escape.csv", "a/b/c.csv", "/abs.csv", "bad name.csv"])
    def test_invalid_names_rejected(self, local_store, name):
        """Test names that could escape the root or nest deeper are rejected"""
        with pytest.raises(StorageWriteError):
            local_store.put(name, b"x")

        with pytest.raises(StorageReadError):
            local_store.get(name)

    def test_missing_artifact(self, local_store):
        with pytest.raises(StorageReadError):
            local_store.get("submitted-datasets/missing.csv")

    def test_delete(self, local_store):
        local_store.put("submitted-datasets/a.csv", b"1")
        local_store.delete("submitted-datasets/a.csv")
        local_store.delete("submitted-datasets/a.csv")

        assert local_store.list() == []
