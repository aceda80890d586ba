"""
Diagnostic screenshots for post-mortem debugging of failed joins.

Capturing is strictly best-effort: every failure is logged and swallowed.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

from playwright.async_api import Page

from meeting_bot.config import settings, DiagnosticsSettings


_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


def resolve_screenshots_dir(diagnostics: Optional[DiagnosticsSettings] = None) -> Path:
    """
    Pick the screenshot directory.

    An explicit override wins; otherwise the container mount is used when it
    exists, falling back to ``logs/screenshots`` under the working directory.
    """
    diagnostics = diagnostics or settings.diagnostics
    if diagnostics.screenshots_dir:
        return Path(diagnostics.screenshots_dir)
    container_dir = Path(diagnostics.container_screenshots_dir)
    if container_dir.is_dir():
        return container_dir
    return Path.cwd() / "logs" / "screenshots"


def build_screenshot_filename(
    reason: str,
    meeting_id: Optional[str] = None,
    session_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> str:
    """
    Build ``screenshot-<timestamp>-<meeting id>-<session id[:8]>-<reason>.png``.
    """
    now = now or datetime.now(settings.tz_info)
    timestamp = now.strftime("%Y-%m-%dT%H-%M-%S-%f")[:-3]
    meeting = _UNSAFE.sub("_", meeting_id or "unknown")
    session = _UNSAFE.sub("_", (session_id or "unknown")[:8])
    reason = _UNSAFE.sub("_", reason or "unspecified")
    return f"screenshot-{timestamp}-{meeting}-{session}-{reason}.png"


async def capture_failure_screenshot(
    page: Page,
    reason: str,
    logger: logging.Logger,
    meeting_id: Optional[str] = None,
    session_id: Optional[str] = None,
    diagnostics: Optional[DiagnosticsSettings] = None,
) -> Optional[Path]:
    """
    Save a full-page screenshot tagged with the failure reason.

    Returns:
        Path of the saved file, or None if capturing was disabled or failed.
    """
    diagnostics = diagnostics or settings.diagnostics
    if not diagnostics.enabled:
        return None

    try:
        screenshot_dir = resolve_screenshots_dir(diagnostics)
        screenshot_dir.mkdir(parents=True, exist_ok=True)
        path = screenshot_dir / build_screenshot_filename(reason, meeting_id, session_id)

        await page.screenshot(path=str(path), full_page=True)

        logger.warning(f"📸 Screenshot captured ({reason}): {path} url={page.url}")
        return path

    except Exception as e:
        logger.error(f"Failed to take screenshot for {reason}: {e}")
        return None
