"""Application settings and configuration."""

from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExportConfig(BaseModel):
    default_name: str = "job-applications"
    pdf_title: str = "Job Applications Export"


class AnalyticsConfig(BaseModel):
    upcoming_window_days: int = Field(default=7, ge=0)


class Config(BaseModel):
    export: ExportConfig = Field(default_factory=ExportConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Sentry
    sentry_dsn: str = Field(default="", description="Sentry DSN, empty string disables Sentry")
    sentry_environment: str = Field(default="development", description="Sentry environment tag (e.g. production, development)")

    # Logging
    log_level: str = Field(default="INFO", description="Minimum level for the console sink")

    # Paths
    config_file: Path = Field(default=Path("config.yaml"), description="Path to config file")
    data_dir: Path = Field(default=Path("data"), description="Directory holding the tracker database")
    logs_dir: Path = Field(default=Path("logs"), description="Directory for log files")
    export_dir: Path = Field(default=Path("exports"), description="Directory for exported files")

    # Analytics
    timezone: str = Field(default="UTC", description="Time zone used to decide what 'today' is")

    # API
    api_host: str = Field(default="127.0.0.1", description="Bind address for the HTTP API")
    api_port: int = Field(default=8000, description="Port for the HTTP API")

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, v: str) -> str:
        try:
            ZoneInfo(v)
        except ZoneInfoNotFoundError as e:
            raise ValueError(f"Unknown time zone: {v}") from e
        return v

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def load_config(self) -> Config:
        """Load additional configuration from YAML file.

        The file is optional; defaults are used when it is missing.
        """
        if not self.config_file.exists():
            return Config()

        with open(self.config_file) as f:
            data = yaml.safe_load(f) or {}
            return Config.model_validate(data)


settings = Settings()
