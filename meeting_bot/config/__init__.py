"""
Configuration module for the Meeting Bot.
"""

from .settings import (
    Settings,
    settings,
    MeetingPlatform,
    BotSettings,
    BrowserSettings,
    DiagnosticsSettings,
    StatusSettings,
)

__all__ = [
    "Settings",
    "settings",
    "MeetingPlatform",
    "BotSettings",
    "BrowserSettings",
    "DiagnosticsSettings",
    "StatusSettings",
]
