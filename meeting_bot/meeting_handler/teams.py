"""
Teams Controller

Handles Microsoft Teams web join automation:
- "Continue on this browser" and device permission prompts
- Pre-join name entry and camera off
- "Join now" submission
- Lobby admission
"""

from __future__ import annotations

import re
from typing import List

from playwright.async_api import Error as PlaywrightError

from meeting_bot.config import MeetingPlatform
from meeting_bot.core.exceptions import ElementNotFoundError, MeetingJoinError
from .base import PlatformController
from .dom import any_visible, is_visible_within
from .page_scripts import DESCRIBE_CONTROLS_JS
from .selectors import TEAMS_SELECTORS, get_selectors_for


def force_web_join(url: str) -> str:
    """Force the Teams web client instead of the desktop app prompt."""
    if "webjoin=true" in url:
        return url
    connector = "&" if "?" in url else "?"
    return f"{url}{connector}webjoin=true"


class TeamsController(PlatformController):
    """Controller for Microsoft Teams meetings."""

    platform = MeetingPlatform.TEAMS

    @staticmethod
    def get_browser_args() -> List[str]:
        return ["--use-fake-ui-for-media-stream"]

    def prepare_meeting_url(self) -> str:
        return force_web_join(self.config.meeting_url)

    async def before_navigate(self) -> None:
        await self.grant_permissions()

    async def before_join(self) -> None:
        await self.page.wait_for_load_state("domcontentloaded")
        await self.pause(2)

        await self._continue_on_browser()
        await self._handle_permission_dialog()

        self.logger.info("Teams: waiting for pre-join UI to load...")
        try:
            await self.wait_for_any(get_selectors_for(TEAMS_SELECTORS, "prejoin_ready"), timeout_ms=15000)
            self.logger.info("Teams: pre-join UI loaded")
        except PlaywrightError as e:
            self.logger.warning(f"Teams: pre-join UI not fully loaded yet: {e}")

        await self._log_visible_controls()

        if not await self._enter_name():
            self.logger.warning("Teams: could not fill name input")

        await self._turn_off_prejoin_camera()

    async def _continue_on_browser(self) -> bool:
        for selector in get_selectors_for(TEAMS_SELECTORS, "continue_browser"):
            button = self.page.locator(selector).first
            if not await is_visible_within(button, 3000 if selector.startswith("button") else 500):
                continue

            self.logger.info('Teams: found "Continue on this browser" button, clicking...')
            await button.click()

            # The click reloads the page; wait so the button doesn't reappear mid-flow
            try:
                await self.page.wait_for_load_state("networkidle", timeout=15000)
            except PlaywrightError:
                try:
                    await self.page.wait_for_load_state("domcontentloaded", timeout=10000)
                except PlaywrightError:
                    pass
            self.logger.info('Teams: clicked "Continue on this browser" and navigation completed')
            await self.pause(1)
            return True
        return False

    async def _handle_permission_dialog(self) -> bool:
        clicked = await self.click_first_visible(get_selectors_for(TEAMS_SELECTORS, "permission_dialog"), timeout_ms=1000)
        if clicked is not None:
            self.logger.info("Teams: dismissed device permission dialog")
            await self.pause(1)
            return True
        return False

    async def _log_visible_controls(self) -> None:
        try:
            controls = await self.page.evaluate(DESCRIBE_CONTROLS_JS)
            self.logger.debug(f"Teams: visible controls {controls}")
        except PlaywrightError as e:
            self.logger.debug(f"Teams: could not describe controls: {e}")

    async def _enter_name(self) -> bool:
        for selector in get_selectors_for(TEAMS_SELECTORS, "name_input"):
            name_input = self.page.locator(selector).first
            try:
                if await is_visible_within(name_input, 2000):
                    await name_input.fill(self.config.bot_name)
                    self.logger.info(f"Teams: filled guest name ({selector})")
                    return True
            except PlaywrightError as e:
                self.logger.debug(f"Teams: selector failed {selector}: {e}")

        self.logger.warning("Teams: name input not found with selectors, trying fallback")
        fallback = self.page.locator('input[type="text"]').first
        if await is_visible_within(fallback, 1000):
            await fallback.fill(self.config.bot_name)
            self.logger.info("Teams: filled guest name with fallback")
            return True
        return False

    async def _turn_off_prejoin_camera(self) -> None:
        await self.pause(1)
        try:
            await self.ensure_toggle_state(
                get_selectors_for(TEAMS_SELECTORS, "prejoin_camera_toggle"), False, allow_unknown=True
            )
            self.logger.info("Teams: camera off on pre-join screen")
            return
        except ElementNotFoundError:
            pass

        # Light meetings render the toggle without usable attributes
        camera_toggle = self.page.locator('button, [role="button"]').filter(
            has_text=re.compile("camera", re.IGNORECASE)
        ).first
        if await is_visible_within(camera_toggle, 1000):
            if await camera_toggle.get_attribute("aria-pressed") != "false":
                await camera_toggle.click()
                self.logger.info("Teams: toggled camera off on pre-join screen")
        else:
            self.logger.debug("Teams: no camera toggle found on pre-join screen")

    async def perform_join(self) -> None:
        selectors = get_selectors_for(TEAMS_SELECTORS, "join_button")
        join_button = await self.click_first_visible(selectors, timeout_ms=10000)
        if join_button is None:
            self.logger.warning('Teams: could not find or click "Join now" button')
            await self.capture_screenshot("join_button_not_found")
            raise ElementNotFoundError("Teams: join button not found or not clickable", selectors)
        self.logger.info('Teams: clicked "Join now" button')

    async def ensure_joined(self) -> None:
        self.enforce_join_deadline()

        lobby_selectors = get_selectors_for(TEAMS_SELECTORS, "waiting_lobby")
        if await any_visible(self.page, lobby_selectors, timeout_ms=1500) is not None:
            self.logger.info("Teams: waiting in lobby for host admission...")
            await self.send_status("waiting_for_host", "Waiting to be admitted into the meeting")
            await self.wait_while_visible(lobby_selectors)

        denied = await any_visible(self.page, get_selectors_for(TEAMS_SELECTORS, "entry_denied"), timeout_ms=500)
        if denied is not None:
            self.logger.warning(f"Teams: entry denied or meeting ended ({denied})")
            raise MeetingJoinError("Teams: entry denied or meeting ended", {"selector": denied})

        self.logger.info("✅ Successfully admitted to Teams meeting")
        await self.send_status("in_meeting", "Successfully joined the meeting", {"botName": self.config.bot_name})

    async def after_join(self) -> None:
        try:
            await self.set_camera(False)
        except Exception as e:
            self.logger.warning(f"Teams: unable to disable camera in meeting: {e}")
        try:
            await self.set_microphone(True)
        except Exception as e:
            self.logger.warning(f"Teams: unable to enable microphone in meeting: {e}")

    async def has_bot_joined(self) -> bool:
        if self.page.is_closed():
            return False

        try:
            controls_visible = await any_visible(self.page, get_selectors_for(TEAMS_SELECTORS, "meeting_controls"), 1000)
            stage_visible = await any_visible(self.page, get_selectors_for(TEAMS_SELECTORS, "meeting_stage"), 1000)
            toolbar_visible = await any_visible(self.page, get_selectors_for(TEAMS_SELECTORS, "meeting_toolbar"), 1000)
            bot_tile_visible = await is_visible_within(
                self.page.locator(f'div[data-tid="{self.config.bot_name}"]').first, 1000
            )
        except PlaywrightError as e:
            self.logger.debug(f"Teams: error checking if bot joined: {e}")
            return False

        is_joined = bool(controls_visible or stage_visible or toolbar_visible or bot_tile_visible)
        if is_joined:
            self.logger.info(
                "Teams: bot has joined meeting "
                f"(controls={bool(controls_visible)}, stage={bool(stage_visible)}, "
                f"toolbar={bool(toolbar_visible)}, tile={bot_tile_visible})"
            )
        return is_joined

    def get_meeting_presence_selectors(self) -> List[str]:
        return (
            get_selectors_for(TEAMS_SELECTORS, "meeting_controls")
            + get_selectors_for(TEAMS_SELECTORS, "meeting_stage")
            + ['div[role="toolbar"]']
            + get_selectors_for(TEAMS_SELECTORS, "meeting_toolbar")
            + get_selectors_for(TEAMS_SELECTORS, "meeting_chrome")
        )

    async def leave_meeting(self) -> None:
        selectors = get_selectors_for(TEAMS_SELECTORS, "leave_button")
        if await self.click_first_visible(selectors, timeout_ms=5000) is None:
            raise ElementNotFoundError("Teams: unable to locate leave button", selectors)
        self.logger.info("Teams: leave button clicked")

    async def set_microphone(self, enable: bool) -> None:
        await self.ensure_toggle_state(get_selectors_for(TEAMS_SELECTORS, "mic_toggle"), enable, allow_unknown=True)
        self.logger.info(f"Teams: microphone {'enabled' if enable else 'muted'}")

    async def set_camera(self, enable: bool) -> None:
        await self.ensure_toggle_state(get_selectors_for(TEAMS_SELECTORS, "camera_toggle"), enable, allow_unknown=True)
        self.logger.info(f"Teams: camera {'enabled' if enable else 'disabled'}")
