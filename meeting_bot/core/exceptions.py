"""
Custom exceptions for the Meeting Bot join engine.
"""

from typing import Any, Dict, Iterable, Optional


class MeetingBotException(Exception):
    """Base exception for Meeting Bot errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class StepNotImplementedError(MeetingBotException, NotImplementedError):
    """Raised when a platform controller does not provide a required step."""

    def __init__(self, step: str, controller: str):
        self.step = step
        self.controller = controller
        super().__init__(
            f"{step}() must be implemented by concrete controller ({controller})",
            {"step": step, "controller": controller},
        )


class MeetingJoinError(MeetingBotException):
    """Raised when joining a meeting fails."""
    pass


class ElementNotFoundError(MeetingJoinError):
    """Raised when no selector in a selector set matched in time."""

    def __init__(self, message: str, selectors: Optional[Iterable[str]] = None):
        self.selectors = list(selectors or [])
        super().__init__(message, {"selectors": self.selectors})


class JoinTimeoutError(MeetingJoinError):
    """Raised when the overall join deadline is exceeded."""

    def __init__(self, message: str = "Timed out while attempting to join meeting", deadline: Optional[float] = None):
        self.deadline = deadline
        super().__init__(message, {"deadline": deadline})


class UnsupportedPlatformError(MeetingBotException, ValueError):
    """Raised when no controller is registered for a platform id."""

    def __init__(self, platform: Optional[str], supported: Iterable[str]):
        self.platform = platform
        self.supported = list(supported)
        super().__init__(
            f'Unsupported meeting platform "{platform}". '
            f"Supported platforms: {', '.join(self.supported)}",
            {"platform": platform, "supported": self.supported},
        )


class ConfigurationError(MeetingBotException):
    """Raised when configuration is invalid."""
    pass
