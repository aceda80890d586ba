"""
Configuration settings for the Meeting Bot.
Join engine, browser, diagnostics and status reporting settings.
"""

from typing import Optional, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from enum import Enum
from dateutil import tz


class MeetingPlatform(str, Enum):
    """Supported meeting platforms."""
    TEAMS = "teams"
    ZOOM = "zoom"
    GOOGLE_MEET = "google_meet"


class BotSettings(BaseSettings):
    """Bot behavior configuration."""
    model_config = SettingsConfigDict(env_prefix="BOT_")

    default_bot_name: str = Field(default="Meeting Bot", description="Default bot name")

    join_timeout_seconds: int = Field(default=60, description="Overall join budget (seconds)")
    lobby_poll_interval_seconds: float = Field(default=2.0, description="Lobby re-check interval")
    admit_poll_interval_seconds: float = Field(default=5.0, description="Organizer admit poll interval")
    admit_poll_start_delay_seconds: float = Field(default=2.0, description="Delay before first admit poll")
    presence_probe_timeout_ms: int = Field(default=2000, description="Per-selector presence probe timeout")
    toggle_wait_timeout_ms: int = Field(default=6000, description="Wait for mic/camera toggles")


class BrowserSettings(BaseSettings):
    """Browser launch configuration."""
    model_config = SettingsConfigDict(env_prefix="BROWSER_")

    headless: bool = Field(default=True, description="Run the browser headless")
    engine: str = Field(default="chromium", description="chromium or chrome")
    extra_args: List[str] = Field(default_factory=list, description="Additional launch arguments")
    locale: str = Field(default="en-US", description="Browser locale")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
        description="User agent presented to meeting sites",
    )
    viewport_width: int = Field(default=1280, description="Viewport width")
    viewport_height: int = Field(default=720, description="Viewport height")
    navigation_timeout_ms: int = Field(default=60000, description="Meeting page navigation timeout")

    @field_validator("engine")
    @classmethod
    def validate_engine(cls, v: str) -> str:
        if v.lower() not in ("chromium", "chrome"):
            raise ValueError(f"Invalid browser engine: {v}")
        return v.lower()


class DiagnosticsSettings(BaseSettings):
    """Failure screenshot configuration."""
    model_config = SettingsConfigDict(env_prefix="DIAGNOSTICS_")

    enabled: bool = Field(default=True, description="Capture screenshots on join failures")
    screenshots_dir: Optional[str] = Field(default=None, description="Override screenshot directory")
    container_screenshots_dir: str = Field(
        default="/app/logs/screenshots",
        description="Mounted screenshot directory used when present",
    )


class StatusSettings(BaseSettings):
    """Status update endpoint configuration."""
    model_config = SettingsConfigDict(env_prefix="STATUS_")

    api_base_url: str = Field(default="http://localhost:8000", description="Backend base URL")
    endpoint: str = Field(default="/api/demo/status", description="Status update path")
    timeout_seconds: float = Field(default=2.0, description="Status request timeout")


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        extra="ignore"
    )

    # Nested settings
    bot: BotSettings = Field(default_factory=BotSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    diagnostics: DiagnosticsSettings = Field(default_factory=DiagnosticsSettings)
    status: StatusSettings = Field(default_factory=StatusSettings)

    # Application settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Also write rotating log files")
    timezone: str = Field(default="auto", description="Timezone (or 'auto')")
    session_poll_interval_seconds: float = Field(
        default=10.0, description="How often a running session checks meeting presence"
    )

    # Enabled platforms
    enabled_platforms: List[MeetingPlatform] = Field(
        default=[
            MeetingPlatform.TEAMS,
            MeetingPlatform.ZOOM,
            MeetingPlatform.GOOGLE_MEET
        ],
        description="Enabled meeting platforms"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @property
    def tz_info(self):
        """Get timezone info (auto-detected if 'auto')."""
        if self.timezone.lower() == "auto":
            return tz.tzlocal()
        return tz.gettz(self.timezone) or tz.UTC


# Global settings instance
settings = Settings()
