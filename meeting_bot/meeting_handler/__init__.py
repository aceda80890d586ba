"""
Meeting handler module - per-platform join automation.
"""

from .base import PlatformController
from .admission import AdmissionPoller
from .google_meet import GoogleMeetController
from .zoom import ZoomController
from .teams import TeamsController
from .registry import (
    PLATFORM_REGISTRY,
    create_platform_controller,
    get_platform_browser_args,
    get_platform_permissions_origin,
    resolve_platform,
    supported_platforms,
)

__all__ = [
    "PlatformController",
    "AdmissionPoller",
    "GoogleMeetController",
    "ZoomController",
    "TeamsController",
    "PLATFORM_REGISTRY",
    "create_platform_controller",
    "get_platform_browser_args",
    "get_platform_permissions_origin",
    "resolve_platform",
    "supported_platforms",
]
