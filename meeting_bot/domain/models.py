"""
Data models for a single meeting-join session.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from meeting_bot.config import settings
from meeting_bot.core.exceptions import ConfigurationError


StatusCallback = Callable[[str, str, Dict[str, Any]], Union[None, Awaitable[None]]]

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in _TRUTHY


class ToggleState(str, Enum):
    """Inferred state of a mic/camera style toggle control."""
    ON = "on"
    OFF = "off"
    UNKNOWN = "unknown"

    def as_bool(self) -> Optional[bool]:
        if self is ToggleState.UNKNOWN:
            return None
        return self is ToggleState.ON


@dataclass(frozen=True)
class SessionConfig:
    """
    Immutable description of one meeting attempt.

    Owned by the caller; controllers only read it.
    """
    meeting_url: str
    platform: str
    bot_name: str = field(default_factory=lambda: settings.bot.default_bot_name)
    is_organizer: bool = False
    join_timeout_sec: int = field(default_factory=lambda: settings.bot.join_timeout_seconds)
    meeting_passcode: Optional[str] = None
    send_status_update: Optional[StatusCallback] = field(default=None, compare=False, repr=False)

    # Only used to name diagnostic artifacts
    meeting_id: Optional[str] = None
    session_id: Optional[str] = None

    def __post_init__(self) -> None:
        # Accept "true"/"1" style flags coming from env or JSON payloads
        object.__setattr__(self, "is_organizer", _as_bool(self.is_organizer))
        if not self.join_timeout_sec or int(self.join_timeout_sec) <= 0:
            object.__setattr__(self, "join_timeout_sec", 60)
        else:
            object.__setattr__(self, "join_timeout_sec", int(self.join_timeout_sec))

    @property
    def platform_id(self) -> str:
        """Normalized platform identifier."""
        return (self.platform or "").strip().lower()

    @classmethod
    def from_env(cls, send_status_update: Optional[StatusCallback] = None) -> "SessionConfig":
        """
        Build a configuration from environment variables.

        Raises:
            ConfigurationError: if MEETING_URL is missing or JOIN_TIMEOUT_SEC is not a number.
        """
        meeting_url = os.environ.get("MEETING_URL", "").strip()
        if not meeting_url:
            raise ConfigurationError("MEETING_URL environment variable is required")

        raw_timeout = os.environ.get("JOIN_TIMEOUT_SEC") or settings.bot.join_timeout_seconds
        try:
            join_timeout_sec = int(raw_timeout)
        except ValueError as e:
            raise ConfigurationError(
                f"JOIN_TIMEOUT_SEC must be a whole number of seconds, got {raw_timeout!r}",
                {"JOIN_TIMEOUT_SEC": raw_timeout},
            ) from e

        return cls(
            meeting_url=meeting_url,
            platform=os.environ.get("PLATFORM", "google_meet"),
            bot_name=os.environ.get("BOT_NAME") or settings.bot.default_bot_name,
            is_organizer=os.environ.get("IS_ORGANIZER", "false"),
            join_timeout_sec=join_timeout_sec,
            meeting_passcode=os.environ.get("MEETING_PASSCODE") or None,
            send_status_update=send_status_update,
            meeting_id=os.environ.get("MEETING_ID") or None,
            session_id=os.environ.get("SESSION_ID") or None,
        )


@dataclass
class AdmissionPollState:
    """Mutable flags shared between a controller and its admission loop."""
    active: bool = False
    attempt_count: int = 0
    admitted: bool = False


@dataclass
class ControllerState:
    """Per-session adapter state; never shared between controllers."""
    dom_target: Any = None
    clicked_ask_to_join: bool = False
    cached_join_selector: Optional[str] = None
