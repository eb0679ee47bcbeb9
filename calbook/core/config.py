from pathlib import Path
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Google Calendar
    calendar_id: str = ""
    # Service account key as a JSON string
    google_credentials_json: str = ""

    # Schedule
    timezone: str = "Asia/Karachi"
    default_duration_minutes: int = 60
    # Re-read the calendar description this often; 0 disables the background refresh
    schedule_refresh_interval_seconds: float = 60 * 60
    # Google may create the Meet link after the insert call returns
    meet_link_poll_attempts: int = 3
    meet_link_poll_interval_seconds: float = 1.0

    # CORS
    cors_origins: str = "*"

    # Env
    env: str = "development"

    # Email (Gmail SMTP). Leave email_user empty to disable sending.
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    email_user: str = ""
    email_pass: str = ""
    from_name: str = "Your Company Name"
    admin_from_name: str = "Booking System"
    admin_email: str = ""

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host and self.email_user and self.email_pass)

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


settings = Settings()
