"""Command line for the job tracker.

  - export:    write a filtered export of a user's jobs to the export directory
  - analytics: print a user's dashboard figures as JSON
  - serve:     run the HTTP API
"""

import argparse
import json
import sys
from datetime import date

from loguru import logger

from job_tracker.analytics import AnalyticsService
from job_tracker.api.main import serve
from job_tracker.config import settings
from job_tracker.exceptions import TrackerError
from job_tracker.export import ENCODERS, DirectoryFileSaver, ExportService
from job_tracker.schema import ExportFilter, ExportOptions, JobStatus
from job_tracker.storage import Database, JobStorage, TaskStorage
from job_tracker.utils import setup_logger


def export_main(args: argparse.Namespace) -> None:
    config = settings.load_config()
    db = Database.in_dir(settings.data_dir)
    exporter = ExportService(
        JobStorage(db),
        TaskStorage(db),
        title=config.export.pdf_title,
        default_name=config.export.default_name,
    )
    options = ExportOptions(
        format=args.format,
        export_name=args.name,
        filters=ExportFilter(
            start_date=args.start,
            end_date=args.end,
            status=args.status or None,
            company=args.company,
            include_notes=args.notes,
            include_tasks=args.tasks,
        ),
    )
    path = exporter.execute_export(args.user, options, DirectoryFileSaver(settings.export_dir))
    logger.info(f"Export complete: {path}")


def analytics_main(args: argparse.Namespace) -> None:
    config = settings.load_config()
    db = Database.in_dir(settings.data_dir)
    service = AnalyticsService(
        JobStorage(db),
        TaskStorage(db),
        tz=settings.tz,
        window_days=config.analytics.upcoming_window_days,
    )
    summary = service.get_analytics(args.user)
    print(json.dumps(summary.to_wire(), indent=2, ensure_ascii=False))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="job-tracker",
        description="Job application tracker: exports and analytics",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # export
    export_parser = subparsers.add_parser("export", help="Export a user's jobs to a file")
    export_parser.add_argument("--user", required=True, help="Owner of the jobs")
    export_parser.add_argument("--format", required=True, choices=sorted(ENCODERS))
    export_parser.add_argument("--start", type=date.fromisoformat, help="Earliest application date (YYYY-MM-DD)")
    export_parser.add_argument("--end", type=date.fromisoformat, help="Latest application date (YYYY-MM-DD)")
    export_parser.add_argument(
        "--status",
        nargs="*",
        choices=[s.value for s in JobStatus],
        help='Only these statuses. Example: --status Interview "No Response"',
    )
    export_parser.add_argument("--company", help="Case-insensitive company substring")
    export_parser.add_argument("--notes", action="store_true", help="Include notes")
    export_parser.add_argument("--tasks", action="store_true", help="Include related tasks")
    export_parser.add_argument("--name", help="File name prefix (default: job-applications)")

    # analytics
    analytics_parser = subparsers.add_parser("analytics", help="Print dashboard analytics as JSON")
    analytics_parser.add_argument("--user", required=True)

    # serve
    subparsers.add_parser("serve", help="Run the HTTP API")

    return parser.parse_args(argv)


def main(args: argparse.Namespace) -> None:
    setup_logger(log_to_file=True)

    match args.command:
        case "export":
            export_main(args)
        case "analytics":
            analytics_main(args)
        case "serve":
            serve()
        case _:
            logger.error("Unknown command. Use: export, analytics or serve")


def cli() -> None:
    """CLI entry point."""
    args = parse_args()

    if not args.command:
        print("Please specify a command: export, analytics or serve")
        print("  Example: job-tracker export --user me --format csv --notes")
        sys.exit(1)

    try:
        main(args)
    except TrackerError as e:
        logger.error(str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()
