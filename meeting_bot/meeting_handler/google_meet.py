"""
Google Meet Controller

Handles Google Meet join automation:
- Device prompt dismissal and guest name entry
- "Ask to join" / "Join now" submission
- Waiting-room detection
- Organizer auto-admit polling
"""

from __future__ import annotations

from typing import List, Optional

from playwright.async_api import Error as PlaywrightError

from meeting_bot.config import MeetingPlatform
from meeting_bot.core.exceptions import ElementNotFoundError
from .admission import AdmissionPoller
from .base import PlatformController
from .dom import any_visible, is_visible_within
from .selectors import GOOGLE_MEET_SELECTORS, get_selectors_for


class GoogleMeetController(PlatformController):
    """Controller for Google Meet meetings."""

    platform = MeetingPlatform.GOOGLE_MEET

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.admission_poller: Optional[AdmissionPoller] = None

    @staticmethod
    def get_browser_args() -> List[str]:
        return []

    @staticmethod
    def get_permissions_origin(meeting_url: str) -> str:
        return "https://meet.google.com"

    @property
    def clicked_ask_to_join(self) -> bool:
        return self.state.clicked_ask_to_join

    async def before_join(self) -> None:
        await self.page.wait_for_load_state("domcontentloaded")
        await self.pause(2)

        # Device check prompt is optional; missing it is fine
        if await self.click_first_visible(get_selectors_for(GOOGLE_MEET_SELECTORS, "continue_without_media"), timeout_ms=3000):
            self.logger.info("Clicked 'Continue without microphone and camera'")
            await self.pause(1)

        await self._fill_guest_name()
        self.logger.info("Page ready")

    async def _fill_guest_name(self) -> bool:
        target = self.get_dom_target()
        for selector in get_selectors_for(GOOGLE_MEET_SELECTORS, "name_input"):
            name_input = target.locator(selector).first
            if not await is_visible_within(name_input, 2000):
                continue
            try:
                await name_input.fill(self.config.bot_name)
                self.logger.info(f"Guest mode detected. Entered bot name: {self.config.bot_name}")
                return True
            except PlaywrightError as e:
                self.logger.debug(f"Name input {selector} not fillable: {e}")
        self.logger.info("No guest name input - continuing as signed-in user")
        return False

    async def perform_join(self) -> None:
        self.logger.info("Looking for join button")
        selectors = get_selectors_for(GOOGLE_MEET_SELECTORS, "join_button")

        join_button = await self.click_first_visible(selectors, timeout_ms=5000)
        if join_button is None:
            self.state.clicked_ask_to_join = False
            self.logger.info("Join button not found")
            await self.capture_screenshot("join_button_not_found")
            raise ElementNotFoundError("Google Meet: join button not found", selectors)

        self.state.clicked_ask_to_join = True
        try:
            button_text = (await join_button.text_content() or "").strip()
        except PlaywrightError:
            button_text = ""
        self.logger.info(f"Clicked join button: '{button_text}'")

        await self.send_status(
            "in_meeting",
            "Successfully joined the meeting",
            {"botName": self.config.bot_name},
        )
        await self.send_status(
            "waiting_to_admit",
            "Waiting to admit users into the meeting",
            {"botName": self.config.bot_name},
        )

    async def ensure_joined(self) -> None:
        leave_selectors = get_selectors_for(GOOGLE_MEET_SELECTORS, "leave_button")

        # Organizers are let straight in; guests may sit in the waiting room
        if self.state.clicked_ask_to_join and not self.config.is_organizer:
            self.logger.info("Bot clicked 'Ask to join' - checking if waiting for admission")
            waiting_selectors = get_selectors_for(GOOGLE_MEET_SELECTORS, "waiting_room")
            waiting = await any_visible(self.page, waiting_selectors, timeout_ms=2000)
            if waiting is not None:
                self.logger.info(f"Detected waiting for admission state ({waiting})")
                await self.send_status("waiting_for_host", "Waiting to be admitted into the meeting")
                await self.wait_while_visible(waiting_selectors, until_selectors=leave_selectors)
                self.logger.info("Waiting room cleared")

        self.enforce_join_deadline()
        try:
            await self.wait_for_any(leave_selectors, timeout_ms=30000, state="attached")
            self.logger.info("Meeting joined - Leave call button visible")
            return
        except PlaywrightError:
            self.logger.info("Leave call button not found - checking other meeting indicators")

        indicator = await any_visible(
            self.page, get_selectors_for(GOOGLE_MEET_SELECTORS, "meeting_indicators"), timeout_ms=5000
        )
        if indicator is None:
            raise ElementNotFoundError(
                "Could not confirm meeting join - Leave call button and meeting indicators not found",
                leave_selectors,
            )
        self.logger.info(f"Meeting indicator found - assuming joined ({indicator})")

    async def after_join(self) -> None:
        if not (self.config.is_organizer and self.config.send_status_update):
            self.logger.info(
                "afterJoin skipped - bot is not organizer or status updates not available "
                f"(is_organizer={self.config.is_organizer})"
            )
            return

        self.logger.info("Bot is organizer - setting up auto-admit functionality")
        self.fire_and_forget(self._open_people_panel(), "Opening People panel")
        self.start_admission_polling()

    def start_admission_polling(self) -> AdmissionPoller:
        if self.admission_poller is None:
            self.admission_poller = AdmissionPoller(
                self.page,
                self.logger,
                self.send_status,
                admit_selectors=get_selectors_for(GOOGLE_MEET_SELECTORS, "admit_button"),
                confirm_selectors=get_selectors_for(GOOGLE_MEET_SELECTORS, "admit_confirm"),
                dialog_selectors=get_selectors_for(GOOGLE_MEET_SELECTORS, "admit_dialog"),
                interval_seconds=self.bot_settings.admit_poll_interval_seconds,
                start_delay_seconds=self.bot_settings.admit_poll_start_delay_seconds,
            )
        self.admission_poller.start()
        return self.admission_poller

    async def _open_people_panel(self) -> bool:
        people_button = None
        for selector in get_selectors_for(GOOGLE_MEET_SELECTORS, "people_button"):
            candidate = self.page.locator(selector).first
            if await is_visible_within(candidate, 3000):
                people_button = candidate
                break

        if people_button is None:
            self.logger.warning('"People" button not found or not visible')
            return False

        if await people_button.get_attribute("aria-expanded") == "true":
            self.logger.info("People panel is already open")
            return True

        await people_button.click()
        self.logger.info('Clicked "People" button to open participants panel')
        await self.pause(1.5)

        if await people_button.get_attribute("aria-expanded") == "true":
            self.logger.info("People panel opened successfully")
            return True
        self.logger.warning("People panel may not have opened")
        return False

    async def has_bot_joined(self) -> bool:
        if self.page.is_closed():
            return False
        selectors = (
            get_selectors_for(GOOGLE_MEET_SELECTORS, "leave_button")
            + get_selectors_for(GOOGLE_MEET_SELECTORS, "meeting_indicators")
        )
        return await any_visible(self.page, selectors, timeout_ms=1000) is not None

    def get_meeting_presence_selectors(self) -> List[str]:
        return get_selectors_for(GOOGLE_MEET_SELECTORS, "leave_button")[:2]

    async def leave_meeting(self) -> None:
        selectors = get_selectors_for(GOOGLE_MEET_SELECTORS, "leave_button")
        if await self.click_first_visible(selectors, timeout_ms=4000) is None:
            raise ElementNotFoundError("Google Meet: unable to locate leave button", selectors)
        self.logger.info("Google Meet: leave button clicked")

    async def set_microphone(self, enable: bool) -> None:
        await self.ensure_toggle_state(
            get_selectors_for(GOOGLE_MEET_SELECTORS, "mic_toggle"), enable, allow_unknown=True
        )
        self.logger.info(f"Google Meet: microphone {'enabled' if enable else 'muted'}")

    async def set_camera(self, enable: bool) -> None:
        await self.ensure_toggle_state(
            get_selectors_for(GOOGLE_MEET_SELECTORS, "camera_toggle"), enable, allow_unknown=True
        )
        self.logger.info(f"Google Meet: camera {'enabled' if enable else 'disabled'}")

    async def cleanup(self) -> None:
        if self.admission_poller is not None:
            self.admission_poller.stop()
        if self.page.is_closed():
            self.logger.info("Polling stopped - page is closed")
