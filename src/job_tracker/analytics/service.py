from datetime import date, datetime
from zoneinfo import ZoneInfo

from loguru import logger

from job_tracker.analytics.aggregator import UPCOMING_WINDOW_DAYS, average_response_time, build_summary
from job_tracker.exceptions import DataAccessError
from job_tracker.schema import RESPONSE_STATUSES, AnalyticsSummary, Task
from job_tracker.storage import JobStorage, TaskStorage


class AnalyticsService:
    """Fetches a user's records and turns them into an AnalyticsSummary."""

    def __init__(
        self,
        jobs: JobStorage,
        tasks: TaskStorage,
        tz: ZoneInfo = ZoneInfo("UTC"),
        window_days: int = UPCOMING_WINDOW_DAYS,
    ):
        self._jobs = jobs
        self._tasks = tasks
        self._tz = tz
        self._window_days = window_days

    def today(self) -> date:
        return datetime.now(self._tz).date()

    def get_analytics(self, user_id: str, today: date | None = None) -> AnalyticsSummary:
        """Job analytics plus task metrics.

        A failed job fetch propagates. A failed task fetch is logged and the
        job-only summary is returned.
        """
        jobs = self._jobs.list_for_user(user_id)

        tasks: list[Task] | None
        try:
            tasks = self._tasks.list_for_user(user_id)
        except DataAccessError as e:
            logger.warning(f"Task analytics unavailable for {user_id}, returning job analytics only: {e}")
            tasks = None

        return build_summary(jobs, tasks, today or self.today(), self._window_days)

    def get_time_to_response(self, user_id: str) -> float | None:
        """Average days to a reply, or None when no job has had one."""
        return average_response_time(self._jobs.list_by_status(user_id, RESPONSE_STATUSES))
