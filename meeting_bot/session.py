"""
Meeting session runner.

Owns the Playwright lifecycle around a single platform controller:

    session = MeetingSession(config)
    await session.start()
    await session.join()
    await session.monitor()
    await session.close()

``run()`` chains those steps and always closes the browser.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import Any, Dict, List, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Error as PlaywrightError,
)

from meeting_bot.config import settings, Settings
from meeting_bot.core.logging import get_logger
from meeting_bot.domain.models import SessionConfig
from meeting_bot.meeting_handler.base import MEDIA_PERMISSIONS, PlatformController
from meeting_bot.meeting_handler.registry import (
    create_platform_controller,
    get_platform_browser_args,
    get_platform_permissions_origin,
    resolve_platform,
)


logger = get_logger("session")

DEFAULT_BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",  # Stealth: Hide navigator.webdriver
    "--autoplay-policy=no-user-gesture-required",
    "--use-fake-ui-for-media-stream",
    "--use-fake-device-for-media-stream",
    "--no-sandbox",
    "--disable-setuid-sandbox",
]

STEALTH_INIT_SCRIPT = "Object.defineProperty(navigator, 'webdriver', {get: () => undefined})"


def build_launch_args(platform_id: str, extra_args: Optional[List[str]] = None) -> List[str]:
    """Configured args first, then platform args, then defaults (deduplicated)."""
    args: List[str] = []
    for arg in list(extra_args or []) + get_platform_browser_args(platform_id) + DEFAULT_BROWSER_ARGS:
        if arg not in args:
            args.append(arg)
    return args


class MeetingSession:
    """
    One bot in one meeting.

    The controller is created after the page exists; the configured status
    callback receives the session lifecycle stages as well as the
    controller's own updates.
    """

    def __init__(self, config: SessionConfig, app_settings: Optional[Settings] = None) -> None:
        self.config = config
        self.settings = app_settings or settings

        # Fail fast on unknown platforms, before a browser is launched
        resolve_platform(config.platform_id)

        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.controller: Optional[PlatformController] = None

        self._stop_event = asyncio.Event()

    @property
    def is_running(self) -> bool:
        """Return True if the browser is currently available."""
        return self._browser is not None

    async def _report(self, stage: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        callback = self.config.send_status_update
        if callback is None:
            return
        try:
            result = callback(stage, message, metadata or {})
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Status update '{stage}' failed: {e}")

    async def start(self) -> Page:
        """Launch the browser, create a context and open the meeting page."""
        if self.page is not None:
            return self.page

        browser_settings = self.settings.browser
        await self._report(
            "initializing",
            "Bot is initializing...",
            {"meetingUrl": self.config.meeting_url, "platform": self.config.platform_id},
        )

        logger.info(f"Launching {browser_settings.engine} (headless={browser_settings.headless})")
        self._playwright = await async_playwright().start()

        launch_options: Dict[str, Any] = {
            "headless": browser_settings.headless,
            "ignore_default_args": ["--enable-automation"],
            "args": build_launch_args(self.config.platform_id, browser_settings.extra_args),
        }
        if browser_settings.engine == "chrome":
            launch_options["channel"] = "chrome"

        self._browser = await self._playwright.chromium.launch(**launch_options)
        logger.info("Browser launched")
        await self._report("browser_launched", "Browser launched successfully", {"headless": browser_settings.headless})

        self._context = await self._browser.new_context(
            user_agent=browser_settings.user_agent,
            viewport={"width": browser_settings.viewport_width, "height": browser_settings.viewport_height},
            locale=browser_settings.locale,
            ignore_https_errors=True,
        )
        await self._context.add_init_script(STEALTH_INIT_SCRIPT)

        origin = get_platform_permissions_origin(self.config.platform_id, self.config.meeting_url)
        if origin:
            try:
                await self._context.grant_permissions(MEDIA_PERMISSIONS, origin=origin)
                logger.debug(f"Granted media permissions for {origin}")
            except PlaywrightError as e:
                logger.warning(f"Failed to grant permissions: {e}")

        self.page = await self._context.new_page()
        self.page.on("console", lambda msg: logger.debug(f"PAGE CONSOLE: {msg.text}"))
        return self.page

    async def _navigate(self, url: str) -> None:
        logger.info(f"Navigating to meeting URL: {url}")
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=self.settings.browser.navigation_timeout_ms)
        except PlaywrightError as e:
            logger.info(f"Network idle not reached ({e}), retrying with domcontentloaded")
            await self.page.goto(url, wait_until="domcontentloaded", timeout=30000)
        logger.info(f"Navigation complete: {self.page.url}")

    async def join(self) -> PlatformController:
        """Create the platform controller and run its join sequence."""
        if self.page is None:
            await self.start()

        self.controller = create_platform_controller(
            self.config.platform_id,
            self.page,
            self.config,
            bot_settings=self.settings.bot,
        )
        url = self.controller.prepare_meeting_url()

        await self._report("joining_meeting", "Joining the meeting...", {"platform": self.config.platform_id})
        await self.controller.join_meeting(navigate=lambda: self._navigate(url))
        logger.info(f"✅ Joined {self.config.platform_id} meeting as '{self.config.bot_name}'")
        return self.controller

    async def monitor(self) -> None:
        """Block until the meeting UI disappears or ``stop()`` is called."""
        if self.controller is None:
            return

        interval = self.settings.session_poll_interval_seconds
        while not self._stop_event.is_set():
            try:
                if not await self.controller.is_meeting_active():
                    logger.info("Meeting is no longer active")
                    await self._report("meeting_ended", "Meeting has ended")
                    return
            except PlaywrightError as e:
                logger.warning(f"Error checking meeting presence: {e}")

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass

    def stop(self) -> None:
        """Ask ``monitor()`` to return. Safe to call more than once."""
        self._stop_event.set()

    async def close(self) -> None:
        """Stop controller background work and close the browser."""
        if self.controller is not None:
            try:
                await self.controller.cleanup()
            except Exception as e:
                logger.warning(f"Error cleaning up platform resources: {e}")

        context, self._context, self.page = self._context, None, None
        if context is not None:
            try:
                await context.close()
            except Exception as e:
                logger.warning(f"Error closing browser context: {e}")

        browser, self._browser = self._browser, None
        if browser is not None:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

        pw, self._playwright = self._playwright, None
        if pw is not None:
            try:
                await pw.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright: {e}")

    async def run(self) -> None:
        """Start, join and stay in the meeting; always cleans up."""
        phase = "start"
        try:
            await self.start()
            phase = "join"
            await self.join()
            phase = "monitor"
            await self.monitor()
        except Exception as e:
            if phase == "join":
                # join_meeting() has already logged it
                logger.debug(f"Session failed while joining: {type(e).__name__}: {e}")
            else:
                logger.error(f"Session failed during {phase}: {type(e).__name__}: {e}")
            await self._report("error", f"Error: {e}", {"error": str(e)})
            raise
        finally:
            await self.close()
