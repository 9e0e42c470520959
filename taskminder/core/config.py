"""Configuration management for taskminder."""

from enum import StrEnum
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StampPolicy(StrEnum):
    """When a task's last_notified_at stamp is kept after a delivery attempt."""

    ON_SUCCESS = "on_success"
    ALWAYS = "always"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage
    sqlite_db_path: str = Field(default="./data/taskminder.db", description="Path to the SQLite database file")

    # Trigger surface
    cron_secret: str | None = Field(default=None, description="Bearer token required by the daily reminder trigger")
    app_url: str = Field(default="http://localhost:8000", description="Public base URL used in completion links")

    # Pydantic Logfire Configuration (optional)
    logfire_token: str | None = Field(default=None, description="Pydantic Logfire token for observability")

    # Email transport (Resend)
    resend_api_key: str | None = Field(default=None, description="Resend API key for reminder emails")
    email_from: str = Field(
        default="Task Reminders <reminders@taskminder.local>",
        description="From header used for reminder emails",
    )

    # SMS transport (Twilio)
    twilio_account_sid: str | None = Field(default=None, description="Twilio account SID")
    twilio_auth_token: str | None = Field(default=None, description="Twilio auth token")
    twilio_from_number: str | None = Field(default=None, description="Twilio sender number in E.164 format")

    # Notification policy
    default_notify_via: str = Field(
        default="email", description="Channel used when neither the task nor the profile sets one"
    )
    notification_stamp_policy: StampPolicy = Field(
        default=StampPolicy.ON_SUCCESS,
        description="Keep last_notified_at only after successful delivery (on_success) or regardless (always)",
    )

    # Scheduler
    enable_scheduler: bool = Field(default=True, description="Run the in-process daily reminder job")
    daily_reminder_hour: int = Field(default=8, ge=0, le=23, description="Hour of day (UTC) for the reminder job")

    def require_credential(self, field_name: str, service_name: str) -> str:
        """Validate that a required credential is set, raising a clear error if missing.

        Args:
            field_name: Name of the field to check
            service_name: Human-readable service name for error message

        Returns:
            The credential value

        Raises:
            ValueError: If the credential is None or empty
        """
        value = getattr(self, field_name)
        if not value:
            raise ValueError(
                f"{service_name} credential not configured. "
                f"Set {field_name.upper()} environment variable or add to .env file."
            )
        return value


# Application Constants
class Constants:
    """Application-wide constants."""

    # API Configuration
    API_TIMEOUT_SECONDS: int = 30

    # HTTP Status Codes
    HTTP_OK: int = 200
    HTTP_BAD_REQUEST: int = 400
    HTTP_UNAUTHORIZED: int = 401
    HTTP_SERVER_ERROR: int = 500
    HTTP_SERVICE_UNAVAILABLE: int = 503

    # Pagination Defaults
    DEFAULT_PER_PAGE_LIMIT: int = 100

    # Completion links
    COMPLETION_TOKEN_BYTES: int = 24

    # Statistics approximations (kept separate from calendar-accurate recurrence math)
    APPROX_DAYS_PER_MONTH: int = 30
    APPROX_DAYS_PER_YEAR: int = 365

    # Daily job retry
    JOB_MAX_RETRIES: int = 3
    JOB_RETRY_BASE_DELAY_SECONDS: float = 2.0
    TRACKER_DEAD_LETTER_QUEUE_MAXLEN: int = 100

    # Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent.parent


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    return Settings()


# Global settings instance
settings = get_settings()
constants = Constants()
