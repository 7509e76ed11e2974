"""Task records.

Priorities are stored capitalized (``Low``/``Medium``/``High``); every row read
here is normalized back to :class:`TaskPriority` before it leaves the module.
"""

import sqlite3
from collections.abc import Collection, Iterable
from datetime import date

from loguru import logger

from job_tracker.exceptions import TaskNotFound
from job_tracker.priority import priority_from_storage, priority_to_storage
from job_tracker.schema import JobInfo, Task, TaskCreate, TaskUpdate
from job_tracker.storage.database import Database, new_id, utc_now

_SELECT = (
    "SELECT t.id, t.user_id, t.job_id, t.title, t.description, t.due_date, t.completed,"
    " t.priority, t.created_at, t.updated_at, j.company AS job_company, j.role AS job_role"
    " FROM tasks t LEFT JOIN jobs j ON j.id = t.job_id"
)

# Stay well below SQLite's bound-parameter limit.
_IN_CHUNK = 500


def _row_to_task(row: sqlite3.Row) -> Task:
    d = dict(row)
    company = d.pop("job_company")
    role = d.pop("job_role")
    d["priority"] = priority_from_storage(d["priority"])
    d["completed"] = bool(d["completed"])
    d["job_info"] = JobInfo(company=company, role=role) if company is not None else None
    return Task.model_validate(d)


def group_tasks_by_job(tasks: Iterable[Task], job_ids: Collection[str]) -> dict[str, list[Task]]:
    """Group tasks under the id of the job they reference.

    Tasks without a job reference, or referencing a job outside *job_ids*
    (deleted between the two fetches), are left out.
    """
    grouped: dict[str, list[Task]] = {}
    for task in tasks:
        if task.job_id is None:
            continue
        if task.job_id not in job_ids:
            logger.debug(f"Dropping task {task.id}: job {task.job_id} is not in the result set")
            continue
        grouped.setdefault(task.job_id, []).append(task)
    return grouped


class TaskStorage:
    def __init__(self, db: Database):
        self._db = db

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_for_user(self, user_id: str) -> list[Task]:
        """All of the user's tasks, soonest due first, with the parent job's company/role."""
        with self._db.connect("fetch tasks") as conn:
            rows = conn.execute(
                f"{_SELECT} WHERE t.user_id = ? ORDER BY t.due_date ASC", (user_id,)
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def list_due(self, user_id: str, today: date) -> list[Task]:
        """Incomplete tasks due today or earlier."""
        with self._db.connect("fetch due tasks") as conn:
            rows = conn.execute(
                f"{_SELECT} WHERE t.user_id = ? AND t.completed = 0 AND t.due_date <= ?"
                " ORDER BY t.due_date ASC",
                (user_id, today.isoformat()),
            ).fetchall()
        return [_row_to_task(r) for r in rows]

    def list_for_jobs(self, job_ids: Collection[str]) -> dict[str, list[Task]]:
        """Tasks attached to any of *job_ids*, grouped by job id."""
        ids = list(dict.fromkeys(job_ids))
        if not ids:
            return {}
        rows: list[sqlite3.Row] = []
        with self._db.connect("fetch tasks") as conn:
            for start in range(0, len(ids), _IN_CHUNK):
                chunk = ids[start:start + _IN_CHUNK]
                rows.extend(conn.execute(
                    f"{_SELECT} WHERE t.job_id IN ({', '.join('?' * len(chunk))})"
                    " ORDER BY t.due_date ASC",
                    chunk,
                ).fetchall())
        return group_tasks_by_job((_row_to_task(r) for r in rows), set(ids))

    def get(self, task_id: str) -> Task:
        """Raises TaskNotFound if no task has this id."""
        with self._db.connect("fetch task") as conn:
            row = conn.execute(f"{_SELECT} WHERE t.id = ?", (task_id,)).fetchone()
        if not row:
            raise TaskNotFound(f"task not found: {task_id}")
        return _row_to_task(row)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, user_id: str, data: TaskCreate) -> Task:
        task_id = new_id()
        now = utc_now()
        with self._db.connect("create task") as conn:
            conn.execute(
                "INSERT INTO tasks"
                " (id, user_id, job_id, title, description, due_date, completed, priority, created_at, updated_at)"
                " VALUES (?, ?, ?, ?, ?, ?, 0, ?, ?, ?)",
                (
                    task_id, user_id, data.job_id, data.title, data.description,
                    data.due_date.isoformat(), priority_to_storage(data.priority), now, now,
                ),
            )
        logger.info(f"Saved task: {data.title}")
        return self.get(task_id)

    def update(self, task_id: str, data: TaskUpdate) -> Task:
        """Raises TaskNotFound if no task has this id."""
        fields = data.model_dump(mode="json", exclude_unset=True)
        if "priority" in fields:
            priority = fields.pop("priority")
            if priority is not None:
                fields["priority"] = priority_to_storage(priority)
        return self._update(task_id, fields)

    def set_completed(self, task_id: str, completed: bool) -> Task:
        return self._update(task_id, {"completed": int(completed)})

    def _update(self, task_id: str, fields: dict) -> Task:
        fields["updated_at"] = utc_now()
        assignments = ", ".join(f"{name} = ?" for name in fields)
        with self._db.connect("update task") as conn:
            cursor = conn.execute(
                f"UPDATE tasks SET {assignments} WHERE id = ?", (*fields.values(), task_id)
            )
            if cursor.rowcount == 0:
                raise TaskNotFound(f"task not found: {task_id}")
        logger.info(f"Updated task {task_id}")
        return self.get(task_id)

    def delete(self, task_id: str) -> None:
        """Raises TaskNotFound if no task has this id."""
        with self._db.connect("delete task") as conn:
            cursor = conn.execute("DELETE FROM tasks WHERE id = ?", (task_id,))
            if cursor.rowcount == 0:
                raise TaskNotFound(f"task not found: {task_id}")
        logger.info(f"Deleted task {task_id}")
