"""Job application records."""

import sqlite3
from collections.abc import Iterable

from loguru import logger

from job_tracker.exceptions import JobNotFound
from job_tracker.schema import ExportFilter, JobApplication, JobCreate, JobStatus, JobUpdate
from job_tracker.storage.database import Database, new_id, utc_now

_COLUMNS = "id, user_id, company, role, date_applied, location, link, status, notes, created_at, updated_at"


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_job(row: sqlite3.Row) -> JobApplication:
    return JobApplication.model_validate(dict(row))


class JobStorage:
    def __init__(self, db: Database):
        self._db = db

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_filtered(self, user_id: str, filters: ExportFilter) -> list[JobApplication]:
        """Return the user's jobs matching every condition present in *filters*.

        Date bounds are inclusive, the status list is an inclusion test (empty
        means no restriction) and the company filter is a case-insensitive
        substring match. Newest application first.
        """
        clauses = ["user_id = ?"]
        params: list[str] = [user_id]
        if filters.start_date:
            clauses.append("date_applied >= ?")
            params.append(filters.start_date.isoformat())
        if filters.end_date:
            clauses.append("date_applied <= ?")
            params.append(filters.end_date.isoformat())
        if filters.status:
            clauses.append(f"status IN ({', '.join('?' * len(filters.status))})")
            params.extend(str(s) for s in filters.status)
        if filters.company:
            clauses.append("casefold(company) LIKE ? ESCAPE '\\'")
            params.append(f"%{_escape_like(filters.company.casefold())}%")

        stmt = (
            f"SELECT {_COLUMNS} FROM jobs WHERE {' AND '.join(clauses)}"
            " ORDER BY date_applied DESC, created_at DESC"
        )
        with self._db.connect("fetch jobs") as conn:
            rows = conn.execute(stmt, params).fetchall()
        return [_row_to_job(r) for r in rows]

    def list_for_user(self, user_id: str) -> list[JobApplication]:
        return self.list_filtered(user_id, ExportFilter())

    def list_by_status(self, user_id: str, statuses: Iterable[JobStatus]) -> list[JobApplication]:
        return self.list_filtered(user_id, ExportFilter(status=list(statuses)))

    def get(self, job_id: str) -> JobApplication:
        """Raises JobNotFound if no job has this id."""
        with self._db.connect("fetch job") as conn:
            row = conn.execute(f"SELECT {_COLUMNS} FROM jobs WHERE id = ?", (job_id,)).fetchone()
        if not row:
            raise JobNotFound(f"job not found: {job_id}")
        return _row_to_job(row)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, user_id: str, data: JobCreate) -> JobApplication:
        job_id = new_id()
        now = utc_now()
        with self._db.connect("create job") as conn:
            conn.execute(
                f"INSERT INTO jobs ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    job_id, user_id, data.company, data.role, data.date_applied.isoformat(),
                    data.location, data.link, str(data.status), data.notes, now, now,
                ),
            )
        logger.info(f"Saved job: {data.company} / {data.role}")
        return self.get(job_id)

    def update(self, job_id: str, data: JobUpdate) -> JobApplication:
        """Apply the fields set on *data* and bump updated_at.

        Raises JobNotFound if no job has this id.
        """
        fields = data.model_dump(mode="json", exclude_unset=True)
        fields["updated_at"] = utc_now()
        assignments = ", ".join(f"{name} = ?" for name in fields)
        with self._db.connect("update job") as conn:
            cursor = conn.execute(
                f"UPDATE jobs SET {assignments} WHERE id = ?", (*fields.values(), job_id)
            )
            if cursor.rowcount == 0:
                raise JobNotFound(f"job not found: {job_id}")
        logger.info(f"Updated job {job_id}: {', '.join(k for k in fields if k != 'updated_at')}")
        return self.get(job_id)

    def delete(self, job_id: str) -> None:
        """Remove a job. Tasks that reference it are left untouched.

        Raises JobNotFound if no job has this id.
        """
        with self._db.connect("delete job") as conn:
            cursor = conn.execute("DELETE FROM jobs WHERE id = ?", (job_id,))
            if cursor.rowcount == 0:
                raise JobNotFound(f"job not found: {job_id}")
        logger.info(f"Deleted job {job_id}")
