"""
End-to-end tests for the command-line interface.

Tests the complete flow: file on disk → CLI → local artifact store →
report and summary commands.
"""

import json
import shutil

import psycopg
import pytest

from surveillance_intake.cli.ingest_cli import build_parser, main
from surveillance_intake.storage.connection import DatabaseConnectionPool
from surveillance_intake.core.models import QualityReport


@pytest.fixture
def store_dir(tmp_path, clean_env):
    return tmp_path / "store"


def printed_json(out: str):
    """Parse the indented JSON document printed last; log lines may precede it."""
    lines = out.splitlines()
    start = max(i for i, line in enumerate(lines) if line == "{")
    return json.loads("\n".join(lines[start:]))


def run_process(test_data_dir, store_dir, file_name: str, *extra: str) -> int:
    return main(["process", "--input", str(test_data_dir / file_name), "--store-dir", str(store_dir), *extra])


@pytest.mark.e2e
class TestProcessCommand:
    """surveillance-intake process"""

    def test_process_writes_artifacts(self, test_data_dir, store_dir):
        assert run_process(test_data_dir, store_dir, "malaria_weekly.csv") == 0

        processed = list((store_dir / "submitted-datasets").glob("malaria_*.csv"))
        reports = list((store_dir / "quality-reports").glob("malaria_*_report.json"))
        assert len(processed) == 1
        assert len(reports) == 1
        assert reports[0].name == processed[0].stem + "_report.json"
        assert QualityReport.from_json(reports[0].read_bytes()).score == 100

    def test_json_output(self, test_data_dir, store_dir, capsys):
        assert run_process(test_data_dir, store_dir, "covid_lab.hl7", "--json") == 0

        result = printed_json(capsys.readouterr().out)
        assert result["report"]["score"] == 85
        assert result["processed_artifact"].startswith("submitted-datasets/covid_")

    def test_forced_format(self, test_data_dir, store_dir, tmp_path):
        misnamed = tmp_path / "influenza_export.txt"
        shutil.copy(test_data_dir / "influenza_sentinel.json", misnamed)

        exit_code = main([
            "process", "--input", str(misnamed), "--store-dir", str(store_dir),
            "--format", "structured_object",
        ])

        assert exit_code == 0
        assert len(list((store_dir / "quality-reports").iterdir())) == 1

    def test_missing_input(self, store_dir, tmp_path):
        assert main(["process", "--input", str(tmp_path / "absent.csv"), "--store-dir", str(store_dir)]) == 1

    def test_unsupported_extension(self, store_dir, tmp_path):
        upload = tmp_path / "malaria.xlsx"
        upload.write_bytes(b"PK\x03\x04")

        assert main(["process", "--input", str(upload), "--store-dir", str(store_dir)]) == 1
        assert not store_dir.exists() or not any(store_dir.rglob("*.json"))

    def test_malformed_payload(self, store_dir, tmp_path):
        upload = tmp_path / "cholera.json"
        upload.write_text('{"records": [')

        assert main(["process", "--input", str(upload), "--store-dir", str(store_dir)]) == 1

    def test_invalid_upload_name(self, store_dir, tmp_path):
        """Test a file name the submission model rejects exits with 1"""
        upload = tmp_path / "malaria\\week.csv"
        upload.write_bytes(b"site,cases\nHarare,4\n")

        assert main(["process", "--input", str(upload), "--store-dir", str(store_dir)]) == 1
        assert not store_dir.exists()

    def test_database_unreachable(self, test_data_dir, store_dir, monkeypatch):
        def refuse(pool, *args, **kwargs):
            raise psycopg.OperationalError("connection refused")

        monkeypatch.setattr(DatabaseConnectionPool, "open", refuse)

        exit_code = main([
            "process", "--input", str(test_data_dir / "malaria_weekly.csv"),
            "--database-url", "postgresql://u:p@h/d",
        ])

        assert exit_code == 1

    def test_bad_config(self, test_data_dir, store_dir, tmp_path):
        config = tmp_path / "ingestion.yaml"
        config.write_text("ingestion:\n  duplicate_sample_size: 0\n")

        assert run_process(test_data_dir, store_dir, "malaria_weekly.csv", "--config", str(config)) == 1


@pytest.mark.e2e
class TestReportAndSummaryCommands:
    """surveillance-intake report / summary"""

    def test_report_for_processed_artifact(self, test_data_dir, store_dir, capsys):
        run_process(test_data_dir, store_dir, "dirty_cholera.csv", "--json")
        processed_name = printed_json(capsys.readouterr().out)["processed_artifact"]

        assert main(["report", "--name", processed_name, "--store-dir", str(store_dir)]) == 0

        report = printed_json(capsys.readouterr().out)
        assert report["score"] == 55
        assert report["metadata"]["duplicateRowCount"] == 1

    def test_report_for_unknown_artifact(self, store_dir):
        name = "submitted-datasets/malaria_1_00000000.csv"
        assert main(["report", "--name", name, "--store-dir", str(store_dir)]) == 1

    def test_report_for_invalid_name(self, store_dir):
        assert main(["report", "--name", "notes.txt", "--store-dir", str(store_dir)]) == 1

    def test_summary_and_search(self, test_data_dir, store_dir, capsys):
        for file_name in ("malaria_weekly.csv", "dirty_cholera.csv", "cholera_sites.xml"):
            assert run_process(test_data_dir, store_dir, file_name) == 0
        capsys.readouterr()

        assert main(["summary", "--store-dir", str(store_dir)]) == 0
        summary = printed_json(capsys.readouterr().out)
        assert summary["total"] == 3
        assert summary["average_score"] == round((100 + 55 + 65) / 3, 1)
        assert summary["grades"]["A"] == 1

        assert main(["summary", "--search", "CHOLERA", "--store-dir", str(store_dir)]) == 0
        filtered = printed_json(capsys.readouterr().out)
        assert filtered["total"] == 2
        assert all("cholera" in name for name in filtered["reports"])


    def test_summary_database_unreachable(self, clean_env, monkeypatch):
        def refuse(pool, *args, **kwargs):
            raise psycopg.OperationalError("connection refused")

        monkeypatch.setattr(DatabaseConnectionPool, "open", refuse)

        assert main(["summary", "--database-url", "postgresql://u:p@h/d"]) == 1
        assert main(["report", "--name", "submitted-datasets/malaria_1_00000000.csv",
                     "--database-url", "postgresql://u:p@h/d"]) == 1


@pytest.mark.e2e
class TestParser:
    """Argument parsing"""

    def test_no_command(self, clean_env):
        assert main([]) == 1

    def test_store_dir_from_environment(self, clean_env):
        clean_env.setenv("INTAKE_STORE_DIR", "/srv/intake")
        args = build_parser().parse_args(["summary"])

        assert args.store_dir == "/srv/intake"
        assert args.database_url is None

    def test_unknown_format_rejected(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["process", "--input", "x.csv", "--format", "spreadsheet"])
