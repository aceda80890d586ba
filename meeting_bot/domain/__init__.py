"""
Domain layer exports.
"""

from .models import (
    SessionConfig,
    StatusCallback,
    ToggleState,
    AdmissionPollState,
    ControllerState,
)

__all__ = [
    "SessionConfig",
    "StatusCallback",
    "ToggleState",
    "AdmissionPollState",
    "ControllerState",
]
