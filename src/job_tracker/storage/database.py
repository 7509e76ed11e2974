"""SQLite handle shared by the storage classes."""

import sqlite3
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from loguru import logger

from job_tracker.exceptions import DataAccessError
from job_tracker.storage.DDL import _DDL


def new_id() -> str:
    return uuid.uuid4().hex


def utc_now() -> str:
    return datetime.now(UTC).isoformat()


def _casefold(value: str | None) -> str | None:
    return value.casefold() if value is not None else None


class Database:
    """Connection factory for the tracker database.

    One instance is created per process (or per request in the API) and
    handed to each storage class, so tests can point everything at a
    temporary file.
    """

    FILENAME = "tracker.db"

    def __init__(self, path: Path):
        path.parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self._init_db()

    @classmethod
    def in_dir(cls, data_dir: Path) -> "Database":
        return cls(data_dir / cls.FILENAME)

    @contextmanager
    def connect(self, action: str) -> Iterator[sqlite3.Connection]:
        """Open a connection for one unit of work.

        Commits on success and rolls back otherwise. Any sqlite error is
        re-raised as DataAccessError("Failed to <action>: <message>").
        """
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as e:
            logger.error(f"Failed to {action}: {e}")
            raise DataAccessError(f"Failed to {action}: {e}") from e
        conn.row_factory = sqlite3.Row
        # SQLite's lower() only folds ASCII
        conn.create_function("casefold", 1, _casefold, deterministic=True)
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Failed to {action}: {e}")
            raise DataAccessError(f"Failed to {action}: {e}") from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_db(self) -> None:
        with self.connect("initialize database") as conn:
            conn.executescript(_DDL)
