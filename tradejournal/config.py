"""Application configuration loaded from environment variables."""

from zoneinfo import ZoneInfo

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config from environment. Never hardcode secrets."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Preferences store (goals, balance, target, unlocked milestones)
    preferences_backend: str = Field(default="memory")  # memory, redis
    redis_url: str = Field(default="redis://localhost:6379/0")

    # Account defaults
    default_initial_balance: float = Field(default=10000.0)
    default_goal_daily: float = Field(default=0.0)
    default_goal_weekly: float = Field(default=0.0)
    default_goal_monthly: float = Field(default=0.0)
    default_goal_yearly: float = Field(default=0.0)

    # Calendar used for day/week/month bucketing. Empty = process local time.
    calendar_timezone: str = Field(default="")

    # Unlock every qualifying milestone per evaluation instead of the first one
    milestone_unlock_all: bool = Field(default=False)

    # Alerts (Discord/Slack-compatible webhook)
    alert_webhook_url: str = Field(default="")

    # App
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")
    allowed_hosts: str = Field(default="http://localhost:5173")

    @property
    def calendar_tz(self) -> ZoneInfo | None:
        """Configured calendar zone, or None for the process local zone."""
        if not self.calendar_timezone:
            return None
        return ZoneInfo(self.calendar_timezone)


settings = Settings()
