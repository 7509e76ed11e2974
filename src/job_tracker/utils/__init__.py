"""Utility modules."""

from job_tracker.utils.dates import format_date, month_bucket, to_utc
from job_tracker.utils.logger import setup_logger

__all__ = ["format_date", "month_bucket", "setup_logger", "to_utc"]
