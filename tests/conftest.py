from datetime import date, datetime

import pytest

from job_tracker.schema import JobApplication, JobStatus, Task
from job_tracker.storage import Database, JobStorage, ScheduledExportStorage, TaskStorage


@pytest.fixture
def db(tmp_path) -> Database:
    return Database.in_dir(tmp_path)


@pytest.fixture
def job_storage(db) -> JobStorage:
    return JobStorage(db)


@pytest.fixture
def task_storage(db) -> TaskStorage:
    return TaskStorage(db)


@pytest.fixture
def scheduled_storage(db) -> ScheduledExportStorage:
    return ScheduledExportStorage(db)


@pytest.fixture
def make_job():
    """Build an in-memory JobApplication; no database involved."""
    counter = iter(range(1, 10_000))

    def _make(**overrides) -> JobApplication:
        n = next(counter)
        fields = {
            "id": f"job-{n}",
            "user_id": "user-1",
            "company": f"Company {n}",
            "role": "Engineer",
            "date_applied": date(2024, 1, 5),
            "location": "Remote",
            "status": JobStatus.applied,
            "created_at": datetime(2024, 1, 5, 9, 0),
            "updated_at": datetime(2024, 1, 5, 9, 0),
        }
        fields.update(overrides)
        return JobApplication(**fields)

    return _make


@pytest.fixture
def make_task():
    counter = iter(range(1, 10_000))

    def _make(**overrides) -> Task:
        n = next(counter)
        fields = {
            "id": f"task-{n}",
            "user_id": "user-1",
            "title": f"Task {n}",
            "due_date": date(2024, 6, 1),
        }
        fields.update(overrides)
        return Task(**fields)

    return _make
