"""Export orchestration: fetch, encode, name, hand off."""

import re
from datetime import UTC, date, datetime
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from job_tracker.export.encoders import ExportPayload, encoder_for
from job_tracker.schema import ExportFilter, ExportOptions
from job_tracker.storage import JobStorage, TaskStorage

DEFAULT_EXPORT_NAME = "job-applications"

# File names must stay inside the export directory and be header-safe.
_UNSAFE_NAME_CHARS = re.compile(r"[^\w.-]+", re.ASCII)


class FileSaver(Protocol):
    """Receives a finished export, e.g. to offer it as a download or mail it."""

    def save(self, data: str, file_name: str, mime_type: str) -> Any: ...


class DirectoryFileSaver:
    """Writes exports into a local directory."""

    def __init__(self, directory: Path):
        self.directory = directory

    def save(self, data: str, file_name: str, mime_type: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / file_name
        path.write_text(data, encoding="utf-8")
        logger.info(f"Wrote {mime_type} export to {path}")
        return path


def mime_type_for(format: str) -> str:
    """Raises UnsupportedFormatError for an unregistered format."""
    return encoder_for(format).mime_type


def generate_export_file_name(
    options: ExportOptions,
    today: date | None = None,
    default_name: str = DEFAULT_EXPORT_NAME,
) -> str:
    """``{name}-{YYYY-MM-DD}.{format}``; the date is today's in UTC.

    Runs of characters outside ``[A-Za-z0-9_.-]`` in the name become ``_``.
    """
    day = today or datetime.now(UTC).date()
    name = _UNSAFE_NAME_CHARS.sub("_", options.export_name or default_name)
    return f"{name}-{day.isoformat()}.{options.format}"


class ExportService:
    def __init__(
        self,
        jobs: JobStorage,
        tasks: TaskStorage,
        title: str = "Job Applications Export",
        default_name: str = DEFAULT_EXPORT_NAME,
    ):
        self._jobs = jobs
        self._tasks = tasks
        self._title = title
        self._default_name = default_name

    def collect(self, user_id: str, filters: ExportFilter) -> ExportPayload:
        """Fetch the filtered jobs and, when requested, their tasks.

        A failure fetching tasks aborts the export; it never falls back to
        jobs only.
        """
        jobs = self._jobs.list_filtered(user_id, filters)
        tasks_by_job = {}
        if filters.include_tasks and jobs:
            tasks_by_job = self._tasks.list_for_jobs([job.id for job in jobs])
        return ExportPayload(jobs=jobs, tasks_by_job=tasks_by_job, filters=filters, title=self._title)

    def export_data(self, user_id: str, options: ExportOptions) -> str:
        """Render the user's jobs in ``options.format``.

        The format is checked before anything is fetched.
        Raises:
            UnsupportedFormatError
            DataAccessError
        """
        encoder = encoder_for(options.format)
        payload = self.collect(user_id, options.filters)
        logger.info(f"Exporting {len(payload.jobs)} jobs for {user_id} as {options.format}")
        return encoder.render(payload)

    def file_name(self, options: ExportOptions, today: date | None = None) -> str:
        return generate_export_file_name(options, today, self._default_name)

    def execute_export(self, user_id: str, options: ExportOptions, saver: FileSaver) -> Any:
        """Render the export and pass it with its file name and MIME type to *saver*."""
        data = self.export_data(user_id, options)
        return saver.save(data, self.file_name(options), mime_type_for(options.format))
