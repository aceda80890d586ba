"""
Zoom Controller

Handles Zoom web client join automation:
- Cookie / terms dialogs inside the web client iframe
- Display name and passcode entry (React-controlled inputs)
- Join button enablement and submission across frames
- Waiting for the host to start / admit
"""

from __future__ import annotations

import time
from typing import List, Optional, Union

from playwright.async_api import Error as PlaywrightError, Frame, Page

from meeting_bot.config import MeetingPlatform
from meeting_bot.core.exceptions import ElementNotFoundError
from .base import PlatformController, url_origin
from .dom import any_visible, is_visible_within, wait_for_visible_selector, wait_until_enabled
from .page_scripts import CLICK_JOIN_BUTTON_JS, FILL_NAME_INPUT_JS, HAS_VISIBLE_TEXT_INPUT_JS
from .selectors import ZOOM_SELECTORS, get_selectors_for


WEB_CLIENT_IFRAME = "iframe#webclient"


def is_web_client_frame_url(url: str) -> bool:
    """The PWA join form lives in a frame served from ``/wc/.../join``."""
    return "/wc/" in url and "/join" in url


class ZoomController(PlatformController):
    """Controller for Zoom web client meetings."""

    platform = MeetingPlatform.ZOOM

    # Seconds to wait for the join form to render in any frame
    join_form_wait_seconds: int = 30

    @staticmethod
    def get_browser_args() -> List[str]:
        return [
            "--use-fake-ui-for-media-stream",
            "--autoplay-policy=no-user-gesture-required",
        ]

    @staticmethod
    def get_permissions_origin(meeting_url: str) -> str:
        return url_origin(meeting_url) or "https://app.zoom.us"

    async def before_navigate(self) -> None:
        await self.grant_permissions()

    async def before_join(self) -> None:
        try:
            await self.page.wait_for_load_state("domcontentloaded", timeout=20000)
        except PlaywrightError:
            pass

        await self.handle_main_page_dialogs()
        await self.ensure_dom_target()
        await self.fill_participant_name()
        await self.fill_passcode_if_needed()
        await self.ensure_join_button_enabled()

    async def handle_main_page_dialogs(self) -> None:
        """Accept cookies and terms inside the web client iframe (best-effort)."""
        await self.pause(0.8)
        try:
            if not await is_visible_within(self.page.locator(WEB_CLIENT_IFRAME).first, 1000):
                return
            frame = self.page.frame_locator(WEB_CLIENT_IFRAME)

            for selector in get_selectors_for(ZOOM_SELECTORS, "cookie_accept"):
                accept = frame.locator(selector).first
                if await is_visible_within(accept, 2000):
                    await accept.click()
                    self.logger.info("Zoom: clicked Accept Cookies in iframe")
                    await self.pause(0.3)
                    break

            await self.pause(0.3)

            for selector in get_selectors_for(ZOOM_SELECTORS, "terms_agree"):
                agree = frame.locator(selector).first
                if await is_visible_within(agree, 2000):
                    await agree.click(force=True)
                    self.logger.info(f"Zoom: clicked I Agree button ({selector})")
                    await self.pause(0.3)
                    break
        except PlaywrightError as e:
            self.logger.debug(f"Zoom: error handling dialogs: {e}")

    # ------------------------------------------------------------------
    # DOM target
    # ------------------------------------------------------------------

    def get_dom_target(self) -> Union[Page, Frame]:
        return self.state.dom_target or self.page

    async def ensure_dom_target(self, timeout_ms: int = 10000) -> Union[Page, Frame]:
        """
        Resolve the web client frame, reusing the cached one while attached.

        Falls back to the top-level page when no frame shows up in time.
        """
        cached = self.state.dom_target
        if cached is not None and not _is_detached(cached):
            return cached

        deadline = time.monotonic() + timeout_ms / 1000
        while time.monotonic() < deadline:
            frame = next((f for f in self.page.frames if is_web_client_frame_url(f.url)), None)
            if frame is not None:
                self.state.dom_target = frame
                try:
                    await frame.wait_for_load_state("domcontentloaded")
                except PlaywrightError:
                    pass
                self.logger.debug(f"Zoom: using PWA iframe as DOM target ({frame.url})")
                return frame
            await self.pause(0.2)

        self.logger.warning("Zoom: PWA iframe not found, falling back to top-level page")
        self.state.dom_target = self.page
        return self.page

    # ------------------------------------------------------------------
    # Pre-join form
    # ------------------------------------------------------------------

    async def fill_participant_name(self) -> bool:
        """Fill the display name, waiting for the join form to render."""
        match = await wait_for_visible_selector(
            self.get_dom_target(), get_selectors_for(ZOOM_SELECTORS, "name_input"), timeout_ms=3000
        )
        if match is not None:
            await match.locator.fill(self.config.bot_name)
            self.logger.info(f"Zoom: filled name field ({match.selector})")
            await self.pause(1.5)
            return True

        # Some builds render a bare input; scan all frames and set it the
        # way React expects.
        self.logger.info("Zoom: waiting for join UI to appear")
        frame = await self._wait_for_frame_with_input()
        if frame is None:
            self.logger.warning("Zoom: no inputs found after waiting")
            return False

        try:
            result = await frame.evaluate(FILL_NAME_INPUT_JS, self.config.bot_name)
        except PlaywrightError as e:
            self.logger.debug(f"Zoom: error filling name in frame {frame.url}: {e}")
            result = None

        if result and result.get("success"):
            self.logger.info(f"Zoom: filled name field in frame {frame.url}")
            await self.pause(1.5)
            return True

        self.logger.warning("Zoom: could not fill name field in any frame")
        return False

    async def _wait_for_frame_with_input(self) -> Optional[Frame]:
        for _ in range(self.join_form_wait_seconds):
            for frame in self.page.frames:
                try:
                    if await frame.evaluate(HAS_VISIBLE_TEXT_INPUT_JS):
                        return frame
                except PlaywrightError:
                    continue
            await self.pause(1)
        return None

    async def fill_passcode_if_needed(self) -> None:
        if not self.config.meeting_passcode:
            return
        match = await wait_for_visible_selector(
            self.get_dom_target(), get_selectors_for(ZOOM_SELECTORS, "passcode_input"), timeout_ms=8000
        )
        if match is None:
            self.logger.warning("Zoom: passcode input not found")
            return
        await match.locator.fill(self.config.meeting_passcode)
        self.logger.info(f"Zoom: filled meeting passcode ({match.selector})")

    async def ensure_join_button_enabled(self) -> bool:
        """Wait for the join button to leave its disabled state."""
        match = await wait_for_visible_selector(
            self.get_dom_target(), get_selectors_for(ZOOM_SELECTORS, "join_button"), timeout_ms=15000
        )
        if match is None:
            self.logger.warning("Zoom: join button never appeared")
            return False
        if not await wait_until_enabled(match.locator):
            self.logger.warning(f"Zoom: join button stayed disabled ({match.selector})")
            return False
        self.state.cached_join_selector = match.selector
        return True

    # ------------------------------------------------------------------
    # Join
    # ------------------------------------------------------------------

    async def perform_join(self) -> None:
        await self.pause(0.5)

        selectors = get_selectors_for(ZOOM_SELECTORS, "join_button")
        if self.state.cached_join_selector:
            selectors = [self.state.cached_join_selector] + [
                s for s in selectors if s != self.state.cached_join_selector
            ]

        clicked = await self.click_first_visible(selectors, timeout_ms=3000)
        if clicked is not None:
            self.logger.info("Zoom: clicked join button")
        elif await self._click_join_in_any_frame():
            clicked = True

        if not clicked:
            self.logger.warning("Zoom: could not click join button in any frame")
            await self.capture_screenshot("join_button_not_found")
            raise ElementNotFoundError("Zoom: join button not found", selectors)

        await self.pause(1)

    async def _click_join_in_any_frame(self) -> bool:
        for frame in self.page.frames:
            try:
                result = await frame.evaluate(CLICK_JOIN_BUTTON_JS)
            except PlaywrightError as e:
                self.logger.debug(f"Zoom: error checking frame {frame.url} for join button: {e}")
                continue
            if result and result.get("success"):
                self.logger.info(f"Zoom: clicked join button via JavaScript in {frame.url}: '{result.get('text')}'")
                return True
        return False

    async def ensure_joined(self) -> None:
        waiting_selectors = get_selectors_for(ZOOM_SELECTORS, "waiting_message")
        if await any_visible(self.get_dom_target(), waiting_selectors, timeout_ms=1500) is not None:
            self.logger.info("Zoom: waiting for host admission")
            await self.send_status("waiting_for_host", "Waiting for the host to start or admit")
            await self.wait_while_visible(waiting_selectors)

        self.enforce_join_deadline()
        await self.wait_for_any(get_selectors_for(ZOOM_SELECTORS, "meeting_indicators"), timeout_ms=25000, state="attached")
        self.logger.info("Zoom: meeting UI detected")
        await self.send_status("in_meeting", "Successfully joined the meeting", {"botName": self.config.bot_name})

    async def after_join(self) -> None:
        try:
            await self.set_camera(True)
        except Exception as e:
            self.logger.warning(f"Zoom: camera enable failed: {e}")
        try:
            await self.set_microphone(True)
        except Exception as e:
            self.logger.warning(f"Zoom: microphone enable failed: {e}")

    # ------------------------------------------------------------------
    # In-meeting controls
    # ------------------------------------------------------------------

    async def has_bot_joined(self) -> bool:
        if self.page.is_closed():
            return False
        for selector in get_selectors_for(ZOOM_SELECTORS, "meeting_indicators"):
            if await is_visible_within(self.get_dom_target().locator(selector).first, 1000):
                return True
        return False

    def get_meeting_presence_selectors(self) -> List[str]:
        selectors: List[str] = []
        for key in ("meeting_indicators", "mic_toggle", "camera_toggle", "leave_button", "meeting_chrome"):
            for selector in get_selectors_for(ZOOM_SELECTORS, key):
                if selector not in selectors:
                    selectors.append(selector)
        return selectors

    async def leave_meeting(self) -> None:
        selectors = get_selectors_for(ZOOM_SELECTORS, "leave_button")
        if await self.click_first_visible(selectors, timeout_ms=4000) is None:
            raise ElementNotFoundError("Zoom: unable to locate leave button", selectors)
        self.logger.info("Zoom: leave button clicked")

    async def set_microphone(self, enable: bool) -> None:
        await self.ensure_toggle_state(get_selectors_for(ZOOM_SELECTORS, "mic_toggle"), enable, allow_unknown=True)
        self.logger.info(f"Zoom: microphone {'enabled' if enable else 'muted'}")

    async def set_camera(self, enable: bool) -> None:
        await self.ensure_toggle_state(get_selectors_for(ZOOM_SELECTORS, "camera_toggle"), enable, allow_unknown=True)
        self.logger.info(f"Zoom: camera {'enabled' if enable else 'disabled'}")


def _is_detached(target: Union[Page, Frame]) -> bool:
    is_detached = getattr(target, "is_detached", None)
    if is_detached is not None:
        return is_detached()
    return target.is_closed()
