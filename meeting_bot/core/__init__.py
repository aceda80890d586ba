"""
Core module exports.
"""

from .exceptions import (
    MeetingBotException,
    StepNotImplementedError,
    MeetingJoinError,
    ElementNotFoundError,
    JoinTimeoutError,
    UnsupportedPlatformError,
    ConfigurationError,
)
from .logging import get_logger, setup_logging

__all__ = [
    "MeetingBotException",
    "StepNotImplementedError",
    "MeetingJoinError",
    "ElementNotFoundError",
    "JoinTimeoutError",
    "UnsupportedPlatformError",
    "ConfigurationError",
    "get_logger",
    "setup_logging",
]
