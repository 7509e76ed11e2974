"""Persisted scheduled-export configurations.

Only the intent is stored here; running an export on schedule is the job of
whatever external scheduler reads these records.
"""

import sqlite3

from loguru import logger

from job_tracker.exceptions import ScheduledExportNotFound, ValidationError
from job_tracker.schema import Destination, ScheduledExport
from job_tracker.storage.database import Database, new_id

_COLUMNS = "id, user_id, frequency, last_exported, options, destination, email"


def validate_scheduled_export(config: ScheduledExport) -> None:
    """Raises ValidationError when an email destination has no address."""
    if config.destination == Destination.email and not (config.email and config.email.strip()):
        raise ValidationError("An email address is required when the destination is email")


def _row_to_config(row: sqlite3.Row) -> ScheduledExport:
    return ScheduledExport.model_validate(dict(row))


class ScheduledExportStorage:
    def __init__(self, db: Database):
        self._db = db

    def create(self, config: ScheduledExport) -> ScheduledExport:
        """Validate and persist *config* under a fresh id. Returns the stored record."""
        validate_scheduled_export(config)
        stored = config.model_copy(update={"id": new_id()})
        with self._db.connect("create scheduled export") as conn:
            conn.execute(
                f"INSERT INTO scheduled_exports ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    stored.id,
                    stored.user_id,
                    str(stored.frequency),
                    stored.last_exported.isoformat() if stored.last_exported else None,
                    stored.options.model_dump_json(by_alias=True),
                    str(stored.destination),
                    stored.email,
                ),
            )
        logger.info(f"Saved {stored.frequency} {stored.options.format} export for {stored.user_id}")
        return stored

    def list_for_user(self, user_id: str) -> list[ScheduledExport]:
        with self._db.connect("fetch scheduled exports") as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM scheduled_exports WHERE user_id = ?", (user_id,)
            ).fetchall()
        return [_row_to_config(r) for r in rows]

    def delete(self, export_id: str) -> None:
        """Raises ScheduledExportNotFound if no configuration has this id."""
        with self._db.connect("delete scheduled export") as conn:
            cursor = conn.execute("DELETE FROM scheduled_exports WHERE id = ?", (export_id,))
            if cursor.rowcount == 0:
                raise ScheduledExportNotFound(f"scheduled export not found: {export_id}")
        logger.info(f"Deleted scheduled export {export_id}")
