"""
Platform registry: maps platform ids to controller classes.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from playwright.async_api import Page

from meeting_bot.config import MeetingPlatform, settings
from meeting_bot.core.exceptions import UnsupportedPlatformError
from meeting_bot.domain.models import SessionConfig
from .base import LoggerLike, PlatformController
from .google_meet import GoogleMeetController
from .teams import TeamsController
from .zoom import ZoomController


PLATFORM_REGISTRY: Dict[MeetingPlatform, Type[PlatformController]] = {
    MeetingPlatform.GOOGLE_MEET: GoogleMeetController,
    MeetingPlatform.ZOOM: ZoomController,
    MeetingPlatform.TEAMS: TeamsController,
}

PLATFORM_ALIASES: Dict[str, MeetingPlatform] = {
    "meet": MeetingPlatform.GOOGLE_MEET,
    "google-meet": MeetingPlatform.GOOGLE_MEET,
}


def _is_enabled(platform: MeetingPlatform) -> bool:
    return platform in PLATFORM_REGISTRY and platform in settings.enabled_platforms


def supported_platforms() -> List[str]:
    """Sorted ids of the registered platforms enabled in settings."""
    return sorted(platform.value for platform in PLATFORM_REGISTRY if _is_enabled(platform))


def _lookup(platform_id: Optional[str]) -> Optional[MeetingPlatform]:
    normalized = (platform_id or "").strip().lower()
    if normalized in PLATFORM_ALIASES:
        platform = PLATFORM_ALIASES[normalized]
    else:
        try:
            platform = MeetingPlatform(normalized)
        except ValueError:
            return None
    return platform if _is_enabled(platform) else None


def resolve_platform(platform_id: Optional[str]) -> Type[PlatformController]:
    """
    Return the controller class for a platform id (case-insensitive).

    Raises:
        UnsupportedPlatformError: if no controller is registered for the id.
    """
    platform = _lookup(platform_id)
    if platform is None:
        raise UnsupportedPlatformError(platform_id, supported_platforms())
    return PLATFORM_REGISTRY[platform]


def create_platform_controller(
    platform_id: Optional[str],
    page: Page,
    config: SessionConfig,
    logger: Optional[LoggerLike] = None,
    **kwargs,
) -> PlatformController:
    """Instantiate the controller registered for ``platform_id``."""
    controller_cls = resolve_platform(platform_id)
    return controller_cls(page, config, logger, **kwargs)


def get_platform_browser_args(platform_id: Optional[str]) -> List[str]:
    platform = _lookup(platform_id)
    if platform is None:
        return []
    return PLATFORM_REGISTRY[platform].get_browser_args()


def get_platform_permissions_origin(platform_id: Optional[str], meeting_url: str) -> str:
    platform = _lookup(platform_id)
    if platform is None:
        return ""
    return PLATFORM_REGISTRY[platform].get_permissions_origin(meeting_url)
