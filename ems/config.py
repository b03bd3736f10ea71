from typing import Final

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import DEFAULT_BACKEND_URL, DEFAULT_METRICS_PORT, DEFAULT_PORT
from .domain.constants import PROGRESS_TICK_MS, UNDO_DURATION_MS


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env files."""

    # Server configuration
    debug: bool = Field(default=True, description="Enable debug mode")
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535, description="Server port")
    metrics_port: int = Field(
        default=DEFAULT_METRICS_PORT,
        ge=1,
        le=65535,
        description="Prometheus metrics port (telemetry only)",
    )

    # Database configuration
    database_url: str = Field(
        default="sqlite:///./ems.db", description="Database connection URL"
    )

    # Application configuration
    app_name: str = Field(default="EMS", description="Application name")
    version: str = Field(default="0.1.0", description="Application version")

    # Employee backend consumed by the list view
    backend_url: str = Field(
        default=DEFAULT_BACKEND_URL, description="Base URL of the employee REST API"
    )
    backend_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for backend requests"
    )

    # Delete-with-undo behaviour
    undo_duration_ms: int = Field(
        default=UNDO_DURATION_MS,
        gt=0,
        description="Time a deleted employee can be restored before the delete "
        + "is sent to the backend",
    )
    progress_tick_ms: int = Field(
        default=PROGRESS_TICK_MS, gt=0, description="Undo progress refresh interval"
    )
    snackbar_refresh_ms: int = Field(
        default=200,
        gt=0,
        description="How often the browser polls the list while an undo is shown",
    )
    view_idle_timeout_seconds: int = Field(
        default=1800, gt=0, description="Idle time before a browser view is disposed"
    )

    # Logging configuration
    log_to_file: bool = Field(
        default=False, description="Force logging to file even in debug mode"
    )

    # Pydantic Settings configuration
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.debug

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug


# Global settings instance
settings: Final = Settings()
