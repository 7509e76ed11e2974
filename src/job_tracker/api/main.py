from datetime import date

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from job_tracker.analytics import AnalyticsService
from job_tracker.config import settings
from job_tracker.exceptions import (
    DataAccessError,
    JobNotFound,
    ScheduledExportNotFound,
    TaskNotFound,
    UnsupportedFormatError,
    ValidationError,
)
from job_tracker.export import ExportService, encoder_for, mime_type_for
from job_tracker.schema import (
    CamelModel,
    Destination,
    ExportOptions,
    Frequency,
    JobApplication,
    JobCreate,
    JobUpdate,
    ScheduledExport,
    Task,
    TaskCreate,
    TaskUpdate,
)
from job_tracker.storage import Database, JobStorage, ScheduledExportStorage, TaskStorage

app = FastAPI(title="job-tracker")


# ── Dependencies ─────────────────────────────────────────────────────────────

def get_database() -> Database:
    return Database.in_dir(settings.data_dir)


def get_job_storage(db: Database = Depends(get_database)) -> JobStorage:
    return JobStorage(db)


def get_task_storage(db: Database = Depends(get_database)) -> TaskStorage:
    return TaskStorage(db)


def get_scheduled_export_storage(db: Database = Depends(get_database)) -> ScheduledExportStorage:
    return ScheduledExportStorage(db)


def get_analytics_service(
    jobs: JobStorage = Depends(get_job_storage),
    tasks: TaskStorage = Depends(get_task_storage),
) -> AnalyticsService:
    config = settings.load_config()
    return AnalyticsService(jobs, tasks, tz=settings.tz, window_days=config.analytics.upcoming_window_days)


def get_export_service(
    jobs: JobStorage = Depends(get_job_storage),
    tasks: TaskStorage = Depends(get_task_storage),
) -> ExportService:
    config = settings.load_config()
    return ExportService(jobs, tasks, title=config.export.pdf_title, default_name=config.export.default_name)


# ── Error mapping ────────────────────────────────────────────────────────────

@app.exception_handler(JobNotFound)
@app.exception_handler(TaskNotFound)
@app.exception_handler(ScheduledExportNotFound)
async def not_found(request: Request, exc: Exception):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_failed(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": "Please check the export settings and try again."})


@app.exception_handler(UnsupportedFormatError)
async def unsupported_format(request: Request, exc: UnsupportedFormatError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(DataAccessError)
async def data_access_failed(request: Request, exc: DataAccessError):
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# ── Jobs ─────────────────────────────────────────────────────────────────────

@app.get("/api/users/{user_id}/jobs")
async def list_jobs(user_id: str, jobs: JobStorage = Depends(get_job_storage)) -> list[JobApplication]:
    return jobs.list_for_user(user_id)

@app.post("/api/users/{user_id}/jobs", status_code=201)
async def create_job(user_id: str, body: JobCreate, jobs: JobStorage = Depends(get_job_storage)) -> JobApplication:
    return jobs.create(user_id, body)

@app.patch("/api/jobs/{job_id}")
async def update_job(job_id: str, body: JobUpdate, jobs: JobStorage = Depends(get_job_storage)) -> JobApplication:
    return jobs.update(job_id, body)

@app.delete("/api/jobs/{job_id}", status_code=204)
async def delete_job(job_id: str, jobs: JobStorage = Depends(get_job_storage)) -> Response:
    jobs.delete(job_id)
    return Response(status_code=204)


# ── Tasks ────────────────────────────────────────────────────────────────────

class CompleteRequest(BaseModel):
    completed: bool = True


@app.get("/api/users/{user_id}/tasks")
async def list_tasks(user_id: str, tasks: TaskStorage = Depends(get_task_storage)) -> list[Task]:
    return tasks.list_for_user(user_id)

@app.get("/api/users/{user_id}/tasks/due")
async def list_due_tasks(
    user_id: str,
    today: date | None = None,
    tasks: TaskStorage = Depends(get_task_storage),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> list[Task]:
    return tasks.list_due(user_id, today or analytics.today())

@app.post("/api/users/{user_id}/tasks", status_code=201)
async def create_task(user_id: str, body: TaskCreate, tasks: TaskStorage = Depends(get_task_storage)) -> Task:
    return tasks.create(user_id, body)

@app.patch("/api/tasks/{task_id}")
async def update_task(task_id: str, body: TaskUpdate, tasks: TaskStorage = Depends(get_task_storage)) -> Task:
    return tasks.update(task_id, body)

@app.post("/api/tasks/{task_id}/complete")
async def complete_task(task_id: str, body: CompleteRequest, tasks: TaskStorage = Depends(get_task_storage)) -> Task:
    return tasks.set_completed(task_id, body.completed)

@app.delete("/api/tasks/{task_id}", status_code=204)
async def delete_task(task_id: str, tasks: TaskStorage = Depends(get_task_storage)) -> Response:
    tasks.delete(task_id)
    return Response(status_code=204)


# ── Analytics ────────────────────────────────────────────────────────────────

@app.get("/api/users/{user_id}/analytics")
async def get_analytics(user_id: str, analytics: AnalyticsService = Depends(get_analytics_service)):
    return JSONResponse(analytics.get_analytics(user_id).to_wire())


# ── Export ───────────────────────────────────────────────────────────────────

@app.post("/api/users/{user_id}/export")
async def export(user_id: str, options: ExportOptions, exporter: ExportService = Depends(get_export_service)):
    data = exporter.export_data(user_id, options)
    return Response(
        content=data,
        media_type=mime_type_for(options.format),
        headers={"Content-Disposition": f'attachment; filename="{exporter.file_name(options)}"'},
    )


class ScheduledExportRequest(CamelModel):
    frequency: Frequency
    options: ExportOptions
    destination: Destination
    email: str | None = None


def _wire(config: ScheduledExport) -> dict:
    return config.model_dump(mode="json", by_alias=True, exclude_none=True)


@app.get("/api/users/{user_id}/scheduled-exports")
async def list_scheduled_exports(
    user_id: str, store: ScheduledExportStorage = Depends(get_scheduled_export_storage)
):
    return JSONResponse([_wire(c) for c in store.list_for_user(user_id)])

@app.post("/api/users/{user_id}/scheduled-exports", status_code=201)
async def create_scheduled_export(
    user_id: str,
    body: ScheduledExportRequest,
    store: ScheduledExportStorage = Depends(get_scheduled_export_storage),
):
    encoder_for(body.options.format)
    config = ScheduledExport(user_id=user_id, **dict(body))
    return JSONResponse(_wire(store.create(config)), status_code=201)

@app.delete("/api/scheduled-exports/{export_id}", status_code=204)
async def delete_scheduled_export(
    export_id: str, store: ScheduledExportStorage = Depends(get_scheduled_export_storage)
) -> Response:
    store.delete(export_id)
    return Response(status_code=204)


# ── Entry point ──────────────────────────────────────────────────────────────

def serve():
    uvicorn.run("job_tracker.api.main:app", host=settings.api_host, port=settings.api_port)
