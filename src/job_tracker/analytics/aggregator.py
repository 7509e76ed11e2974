"""Dashboard aggregation over raw job and task collections.

Pure functions: no I/O, no clock. Callers pass ``today`` in.
"""

import math
from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta

from job_tracker.priority import is_known_priority
from job_tracker.schema import (
    RESPONSE_STATUSES,
    AnalyticsSummary,
    JobApplication,
    JobStatus,
    Task,
    TaskMetrics,
)
from job_tracker.utils.dates import month_bucket, to_utc

UPCOMING_WINDOW_DAYS = 7

_SECONDS_PER_DAY = 24 * 60 * 60


def _percent(part: int, total: int) -> float:
    return part / total * 100 if total else 0.0


def summarize_jobs(jobs: Iterable[JobApplication]) -> AnalyticsSummary:
    """Counts by status, company and month plus response/interview/offer rates.

    Every status is present in ``by_status`` even with a zero count. A job
    missing its company or application date still counts towards the total
    and its status; it is only left out of the bucket it cannot fill.
    """
    summary = AnalyticsSummary()
    for job in jobs:
        summary.total_applications += 1
        summary.by_status[job.status] += 1

        if job.company:
            summary.by_company[job.company] = summary.by_company.get(job.company, 0) + 1

        if job.date_applied:
            month = month_bucket(job.date_applied)
            summary.by_month[month] = summary.by_month.get(month, 0) + 1
            summary.applications_by_month[month] = summary.applications_by_month.get(month, 0) + 1

    total = summary.total_applications
    by_status = summary.by_status
    responses = by_status[JobStatus.interview] + by_status[JobStatus.offer] + by_status[JobStatus.rejected]
    summary.response_rate = _percent(responses, total)
    summary.interview_rate = _percent(by_status[JobStatus.interview], total)
    summary.offer_rate = _percent(by_status[JobStatus.offer], total)
    return summary


def summarize_tasks(
    tasks: Iterable[Task],
    today: date,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> TaskMetrics:
    """Completion and priority distribution, and how many open tasks fall due soon.

    A task is upcoming when it is not completed and its due date lies in
    ``[today, today + window_days]``.
    """
    metrics = TaskMetrics()
    horizon = today + timedelta(days=window_days)
    for task in tasks:
        metrics.total_tasks += 1
        metrics.tasks_by_status["Completed" if task.completed else "Pending"] += 1

        priority = str(task.priority).lower()
        if is_known_priority(priority):
            metrics.tasks_by_priority[priority] += 1

        if not task.completed and task.due_date and today <= task.due_date <= horizon:
            metrics.upcoming_tasks_due += 1
    return metrics


def response_days(job: JobApplication) -> int | None:
    """Whole days (rounded up) between applying and the last status change."""
    if not job.date_applied or not job.updated_at:
        return None
    applied = datetime.combine(job.date_applied, time(), tzinfo=UTC)
    elapsed = abs((to_utc(job.updated_at) - applied).total_seconds())
    return math.ceil(elapsed / _SECONDS_PER_DAY)


def average_response_time(jobs: Iterable[JobApplication]) -> float | None:
    """Mean response time in days over jobs that got a reply.

    Zero-day results are ignored. Returns None, not 0, when no job qualifies.
    """
    days = [
        d for job in jobs
        if job.status in RESPONSE_STATUSES
        and (d := response_days(job))
    ]
    if not days:
        return None
    return sum(days) / len(days)


def build_summary(
    jobs: Iterable[JobApplication],
    tasks: Iterable[Task] | None = None,
    today: date | None = None,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> AnalyticsSummary:
    """Job analytics, average response time and, when *tasks* is given, task metrics."""
    jobs = list(jobs)
    summary = summarize_jobs(jobs)
    summary.average_response_time = average_response_time(jobs)
    if tasks is None:
        return summary
    return summary.with_task_metrics(
        summarize_tasks(tasks, today or datetime.now(UTC).date(), window_days)
    )
