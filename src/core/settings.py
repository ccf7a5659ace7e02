"""Application settings with environment variable support.

Uses pydantic-settings for typed configuration validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Reporting API
    api_base_url: str = Field(
        default="http://localhost:8000/AccessionRV/api/reporting",
        description="Root URL of the reporting endpoints (the axes live under /axes)",
    )
    api_username: str = Field(default="ADM", description="HTTP Basic user")
    api_password: str = Field(default="ADM", description="HTTP Basic password")
    api_timeout_s: float = Field(default=30.0, gt=0, description="Per-request timeout")
    max_workers: int = Field(default=4, ge=1, le=16, description="Concurrent sub-report fetches")

    # Dashboard
    page_size: int = Field(default=10, ge=1, le=200, description="Operations per page")

    # Persistence
    session_file: str = Field(default=".smo_session.json", description="Stored user record")
    export_dir: str = Field(default="exports", description="Directory for saved exports")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON lines")
    log_file: str = Field(default="logs/app.log", description="Rotating log file, empty to disable")

    # Feature flags
    enable_export: bool = Field(default=True, description="Enable operation export")

    model_config = {
        "env_prefix": "SMO_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Store the base URL without trailing slash."""
        return v.rstrip("/")

    @property
    def axes_url(self) -> str:
        """URL under which every reporting axis is exposed."""
        return f"{self.api_base_url}/axes"


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
