"""
Organizer auto-admit loop.

When the bot is the meeting organizer it keeps looking for an "Admit"
control, clicks it, confirms the follow-up dialog and stops for good once
the control disappears (someone was let in).

The loop is a single asyncio task: iterations never overlap, the active
flag is checked before every iteration and before sleeping, and ``stop()``
only wakes the pending sleep, so an in-flight iteration always finishes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from playwright.async_api import Error as PlaywrightError, Page

from meeting_bot.domain.models import AdmissionPollState
from .dom import any_visible, is_visible_within


Notify = Callable[[str, str, Optional[Dict[str, Any]]], Awaitable[None]]


class AdmissionPoller:
    """
    Background poll that admits waiting participants.

    Usage pattern:
        poller = AdmissionPoller(page, logger, notify, admit_selectors=...)
        poller.start()
        ...
        poller.stop()
    """

    # Settle delays after clicks; UI dialogs animate in and out
    click_settle_seconds: float = 0.5
    confirm_settle_seconds: float = 1.0

    def __init__(
        self,
        page: Page,
        logger: logging.Logger,
        notify: Optional[Notify],
        admit_selectors: Sequence[str],
        confirm_selectors: Sequence[str],
        dialog_selectors: Sequence[str] = (),
        interval_seconds: float = 5.0,
        start_delay_seconds: float = 0.0,
        state: Optional[AdmissionPollState] = None,
    ) -> None:
        self.page = page
        self.logger = logger
        self._notify = notify
        self.admit_selectors = list(admit_selectors)
        self.confirm_selectors = list(confirm_selectors)
        self.dialog_selectors = list(dialog_selectors)
        self.interval_seconds = interval_seconds
        self.start_delay_seconds = start_delay_seconds
        self.state = state or AdmissionPollState()

        self._task: Optional[asyncio.Task] = None
        self._wakeup = asyncio.Event()

    @property
    def is_running(self) -> bool:
        """True while the background task exists and has not finished."""
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start polling in the background (no-op if already running)."""
        if self.state.admitted:
            return
        if self.is_running:
            if not self.state.active:
                # stop() was called but the task has not exited yet
                self.state.active = True
                self._wakeup.clear()
                self.logger.info("Admission polling resumed")
            return

        self.state.active = True
        self.state.attempt_count = 0
        self._wakeup.clear()
        self._task = asyncio.create_task(self._run(), name="admission-poller")
        self.logger.info(
            f"Admission polling started (every {self.interval_seconds:g}s until a participant is admitted)"
        )

    def stop(self) -> None:
        """Stop polling. Safe to call any number of times."""
        if self.state.active:
            self.logger.info("Stopping admission polling")
        self.state.active = False
        self._wakeup.set()

    async def wait_stopped(self, timeout: Optional[float] = None) -> None:
        """Wait for the background task to exit after ``stop()``."""
        if self._task is None:
            return
        try:
            await asyncio.wait_for(asyncio.shield(self._task), timeout)
        except asyncio.TimeoutError:
            self.logger.warning("Admission polling did not exit in time")

    def _should_continue(self) -> bool:
        return self.state.active and not self.state.admitted

    async def _sleep(self, seconds: float) -> bool:
        """Sleep unless stopped; returns whether polling should go on."""
        if seconds > 0:
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=seconds)
            except asyncio.TimeoutError:
                pass
        return self._should_continue()

    async def _run(self) -> None:
        if not await self._sleep(self.start_delay_seconds):
            return

        while True:
            if not self._should_continue():
                if self.state.admitted:
                    self.logger.info("Polling stopped - user has been admitted")
                else:
                    self.logger.info("Polling stopped - cleanup was called")
                return

            if self.page.is_closed():
                self.logger.info("Polling stopped - page is closed")
                self.state.active = False
                return

            self.state.attempt_count += 1
            self.logger.info(f'Polling for "Admit" button (attempt {self.state.attempt_count})')

            try:
                await self.poll_once()
            except Exception as e:
                self.logger.warning(f'Error checking/clicking "Admit" button: {e}')

            if not self._should_continue():
                continue
            if not await self._sleep(self.interval_seconds):
                continue

    async def poll_once(self) -> bool:
        """
        Run a single admit attempt.

        Returns:
            True if a participant was admitted during this attempt.
        """
        selector = await any_visible(self.page, self.admit_selectors, timeout_ms=1000)
        if selector is None:
            self.logger.info(
                f'"Admit" button not found yet - will retry in {self.interval_seconds:g} seconds'
            )
            return False

        self.logger.info(f'Clicking "Admit" button (selector: {selector})')
        await self.page.locator(selector).first.click()
        await asyncio.sleep(self.click_settle_seconds)

        await self._confirm_dialog()

        if await any_visible(self.page, self.admit_selectors, timeout_ms=1000) is not None:
            self.logger.info('"Admit" button still visible - may need to admit more users')
            return False

        self.logger.info('✅ "Admit" button disappeared - user has been admitted successfully')
        self.state.admitted = True
        self.state.active = False
        await self._send("done_status", "I have admitted you into the meeting")
        await self._send("done_status", "You can say hello to me now!")
        return True

    async def _confirm_dialog(self) -> bool:
        for dialog_selector in self.dialog_selectors:
            try:
                await self.page.wait_for_selector(dialog_selector, timeout=3000)
                break
            except PlaywrightError:
                continue

        for selector in self.confirm_selectors:
            button = self.page.locator(selector).first
            if await is_visible_within(button, 1500):
                self.logger.info("Found confirmation modal button - clicking to confirm")
                await button.click()
                await asyncio.sleep(self.confirm_settle_seconds)
                return True

        self.logger.info("Confirmation modal button not found - modal may have auto-closed or not appeared")
        return False

    async def _send(self, status: str, message: str) -> None:
        if self._notify is not None:
            await self._notify(status, message, None)
