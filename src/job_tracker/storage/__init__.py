"""Storage and persistence layer."""

from job_tracker.storage.database import Database
from job_tracker.storage.jobs import JobStorage
from job_tracker.storage.scheduled_exports import ScheduledExportStorage, validate_scheduled_export
from job_tracker.storage.tasks import TaskStorage, group_tasks_by_job

__all__ = [
    "Database",
    "JobStorage",
    "ScheduledExportStorage",
    "TaskStorage",
    "group_tasks_by_job",
    "validate_scheduled_export",
]
