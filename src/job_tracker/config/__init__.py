"""Configuration."""

from job_tracker.config.settings import Config, Settings, settings

__all__ = ["Config", "Settings", "settings"]
