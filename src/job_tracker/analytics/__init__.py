"""Dashboard analytics."""

from job_tracker.analytics.aggregator import (
    average_response_time,
    build_summary,
    summarize_jobs,
    summarize_tasks,
)
from job_tracker.analytics.service import AnalyticsService

__all__ = [
    "AnalyticsService",
    "average_response_time",
    "build_summary",
    "summarize_jobs",
    "summarize_tasks",
]
