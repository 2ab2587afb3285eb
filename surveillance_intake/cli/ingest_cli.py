"""
Command-line interface for submission ingestion.

Usage:
    surveillance-intake process --input <file_path> [options]
    surveillance-intake report --name <processed_artifact> [options]
    surveillance-intake summary [--search <term>] [options]
"""

import argparse
import json
import os
import sys
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from surveillance_intake.core.config import load_settings
from surveillance_intake.core.errors import ConfigError, FormatError, StorageError
from surveillance_intake.core.models import RawSubmission, SourceFormat
from surveillance_intake.ingest import IngestionPipeline, list_reports, load_report, search_reports, summarize_reports
from surveillance_intake.observability.logger import get_logger
from surveillance_intake.storage import LocalArtifactStore

logger = get_logger(__name__)

DEFAULT_STORE_DIR = "artifacts"


@contextmanager
def open_store(args):
    """
    Open the artifact store selected on the command line.

    A database URL selects the PostgreSQL store; otherwise artifacts live
    under --store-dir.
    """
    if args.database_url:
        from surveillance_intake.storage.connection import DatabaseConnectionPool
        from surveillance_intake.storage.postgres import PostgresArtifactStore

        with PostgresArtifactStore(DatabaseConnectionPool(conninfo=args.database_url)) as store:
            store.ensure_schema()
            yield store
    else:
        yield LocalArtifactStore(args.store_dir)


def process_command(args) -> int:
    """
    Run one file through the pipeline.

    Args:
        args: Command-line arguments

    Returns:
        Process exit code
    """
    input_path = Path(args.input)
    if not input_path.is_file():
        logger.error(f"Input file not found: {args.input}")
        return 1

    try:
        settings = load_settings(args.config)
        declared_format = SourceFormat(args.format) if args.format else None
        submission = RawSubmission.from_upload(input_path.name, input_path.read_bytes(), declared_format)

        with open_store(args) as store:
            result = IngestionPipeline(store, settings).process(submission)
    except (ConfigError, FileNotFoundError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except ValidationError as e:
        logger.error(f"Invalid submission {input_path.name!r}: {e.error_count()} validation errors")
        return 1
    except FormatError as e:
        logger.error(f"Submission rejected: {e}")
        return 1
    except StorageError as e:
        logger.error(f"Could not store results: {e}")
        return 1

    report = result.report
    logger.info("=" * 60)
    logger.info("SUBMISSION PROCESSED")
    logger.info("=" * 60)
    logger.info(f"Grade: {report.grade.value} (score {report.score}/100)")
    logger.info(f"Category: {report.metadata.category.value}")
    logger.info(f"Rows: {report.metadata.row_count}, columns: {report.metadata.column_count}")
    logger.info(f"Duplicate of existing data: {result.verdict.is_duplicate}")
    for issue in report.issues:
        logger.info(f"Issue: {issue}")
    logger.info(f"Processed artifact: {result.processed_artifact}")
    logger.info(f"Report artifact: {result.report_artifact}")
    logger.info("=" * 60)

    if args.json:
        print(result.model_dump_json(by_alias=True, indent=2))
    return 0


def report_command(args) -> int:
    """Print the stored report for a processed artifact."""
    try:
        with open_store(args) as store:
            report = load_report(store, args.name)
    except ValueError as e:
        logger.error(str(e))
        return 1
    except StorageError as e:
        logger.error(f"Report not available: {e}")
        return 1

    print(report.to_json())
    return 0


def summary_command(args) -> int:
    """Print aggregate figures over stored reports, optionally filtered by name."""
    try:
        with open_store(args) as store:
            reports = list_reports(store)
    except StorageError as e:
        logger.error(f"Could not list reports: {e}")
        return 1

    if args.search:
        reports = search_reports(reports, args.search)

    summary = summarize_reports(reports)
    summary["reports"] = {
        name: {"grade": report.grade.value, "score": report.score, "issues": len(report.issues)}
        for name, report in reports.items()
    }
    print(json.dumps(summary, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="surveillance-intake",
        description="Health-surveillance submission ingestion and quality grading",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Grade and store a CSV submission
  surveillance-intake process --input data/malaria_harare_2025.csv

  # Force the format of a file with a misleading extension
  surveillance-intake process --input export.txt --format structured_object

  # Show the report for a processed artifact
  surveillance-intake report --name submitted-datasets/malaria_1760868000000_3fa2b1c9.csv

  # Summarise all cholera reports
  surveillance-intake summary --search cholera
        """
    )

    store_options = argparse.ArgumentParser(add_help=False)
    store_options.add_argument(
        "--store-dir",
        default=os.getenv("INTAKE_STORE_DIR", DEFAULT_STORE_DIR),
        help=f"Directory of the local artifact store (default: {DEFAULT_STORE_DIR})"
    )
    store_options.add_argument(
        "--database-url",
        default=os.getenv("INTAKE_DATABASE_URL"),
        help="PostgreSQL connection string; selects the database artifact store"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    process_parser = subparsers.add_parser("process", parents=[store_options], help="Process a submission")
    process_parser.add_argument(
        "--input",
        required=True,
        help="Path to the submitted file"
    )
    process_parser.add_argument(
        "--format",
        choices=[f.value for f in SourceFormat],
        help="Declared format (default: inferred from the file extension)"
    )
    process_parser.add_argument(
        "--config",
        help="Path to an ingestion settings YAML file (default: env var INTAKE_CONFIG)"
    )
    process_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the ingestion result as JSON"
    )

    report_parser = subparsers.add_parser("report", parents=[store_options], help="Show a quality report")
    report_parser.add_argument(
        "--name",
        required=True,
        help="Processed artifact name"
    )

    summary_parser = subparsers.add_parser("summary", parents=[store_options], help="Summarise quality reports")
    summary_parser.add_argument(
        "--search",
        default="",
        help="Only include reports whose name contains this text"
    )

    return parser


COMMANDS = {
    "process": process_command,
    "report": report_command,
    "summary": summary_command,
}


def main(argv=None) -> int:
    """Main CLI entry point."""
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    return COMMANDS[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
