import json
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from job_tracker.priority import TaskPriority, is_known_priority, normalize_priority


class JobStatus(StrEnum):
    applied = "Applied"
    interview = "Interview"
    offer = "Offer"
    rejected = "Rejected"
    withdrawn = "Withdrawn"
    no_response = "No Response"


# Statuses that count as a reply from the employer.
RESPONSE_STATUSES = frozenset({JobStatus.interview, JobStatus.offer, JobStatus.rejected})


class Frequency(StrEnum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class Destination(StrEnum):
    email = "email"
    download = "download"


class CamelModel(BaseModel):
    """Models whose wire shape uses camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Jobs ─────────────────────────────────────────────────────────────────────

def _not_null(v: Any) -> Any:
    if v is None:
        raise ValueError("Field cannot be null")
    return v


class JobCreate(BaseModel):
    company: str
    role: str
    date_applied: date
    location: str = ""
    link: str | None = None
    status: JobStatus = JobStatus.applied
    notes: str | None = None


class JobUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    company: str | None = None
    role: str | None = None
    date_applied: date | None = None
    location: str | None = None
    link: str | None = None
    status: JobStatus | None = None
    notes: str | None = None

    # Omit a field to leave it alone; only link and notes may be cleared.
    @field_validator("company", "role", "date_applied", "location", "status")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        return _not_null(v)


class JobApplication(BaseModel):
    id: str
    user_id: str
    company: str = ""
    role: str = ""
    date_applied: date | None = None
    location: str = ""
    link: str | None = None
    status: JobStatus
    notes: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


# ── Tasks ────────────────────────────────────────────────────────────────────

def _strict_priority(v: Any) -> Any:
    if v is None or isinstance(v, TaskPriority):
        return v
    if not is_known_priority(v):
        raise ValueError("Invalid priority value. Must be low, medium, or high.")
    return str(v).lower()


class TaskCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    due_date: date
    priority: TaskPriority = TaskPriority.medium
    job_id: str | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _check_priority(cls, v: Any) -> Any:
        return _strict_priority(v)


class TaskUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    due_date: date | None = None
    priority: TaskPriority | None = None
    job_id: str | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _check_priority(cls, v: Any) -> Any:
        return _strict_priority(v)

    @field_validator("title")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        return _not_null(v)


class JobInfo(BaseModel):
    company: str
    role: str


class Task(BaseModel):
    id: str
    user_id: str
    job_id: str | None = None
    title: str
    description: str | None = None
    due_date: date | None = None
    completed: bool = False
    priority: TaskPriority = TaskPriority.medium
    job_info: JobInfo | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize(cls, v: Any) -> TaskPriority:
        return normalize_priority(v)


# ── Analytics ────────────────────────────────────────────────────────────────

def _empty_status_counts() -> dict[JobStatus, int]:
    return {status: 0 for status in JobStatus}


class TaskMetrics(CamelModel):
    total_tasks: int = 0
    tasks_by_status: dict[str, int] = Field(default_factory=lambda: {"Completed": 0, "Pending": 0})
    tasks_by_priority: dict[TaskPriority, int] = Field(
        default_factory=lambda: {p: 0 for p in TaskPriority}
    )
    upcoming_tasks_due: int = 0


class AnalyticsSummary(CamelModel):
    """Dashboard figures derived from a user's jobs and tasks. Never persisted."""

    total_applications: int = 0
    by_status: dict[JobStatus, int] = Field(default_factory=_empty_status_counts)
    by_company: dict[str, int] = Field(default_factory=dict)
    by_month: dict[str, int] = Field(default_factory=dict)
    applications_by_month: dict[str, int] = Field(default_factory=dict)
    response_rate: float = 0.0
    interview_rate: float = 0.0
    offer_rate: float = 0.0
    average_response_time: float | None = None

    total_tasks: int | None = None
    tasks_by_status: dict[str, int] | None = None
    tasks_by_priority: dict[TaskPriority, int] | None = None
    upcoming_tasks_due: int | None = None

    def with_task_metrics(self, metrics: TaskMetrics) -> "AnalyticsSummary":
        return self.model_copy(update=dict(metrics))

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ── Export ───────────────────────────────────────────────────────────────────

class ExportFilter(CamelModel):
    start_date: date | None = None
    end_date: date | None = None
    status: list[JobStatus] | None = None
    company: str | None = None
    include_notes: bool = False
    include_tasks: bool = False


class ExportOptions(CamelModel):
    # Kept as a plain string so an unknown value reaches the encoder
    # registry and fails with UnsupportedFormatError.
    format: str
    filters: ExportFilter = Field(default_factory=ExportFilter)
    export_name: str | None = None


class ScheduledExport(CamelModel):
    id: str | None = None
    user_id: str
    frequency: Frequency
    last_exported: datetime | None = None
    options: ExportOptions
    destination: Destination
    email: str | None = None

    @field_validator("options", mode="before")
    @classmethod
    def _parse_json(cls, v: Any) -> Any:
        if isinstance(v, str):
            return json.loads(v)
        return v
