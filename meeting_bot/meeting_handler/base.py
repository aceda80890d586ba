"""
Base class for platform-specific meeting automation.

A controller drives one Playwright page through a fixed join protocol:

    before_navigate -> navigate (host supplied) -> before_join
        -> perform_join -> ensure_joined -> after_join

Concrete controllers override the required steps; optional hooks default to
no-ops. Required steps that are left out raise ``StepNotImplementedError``
so missing platform coverage shows up on the first run.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, ClassVar, Dict, List, Optional, Sequence, Set, Union
from urllib.parse import urlparse

from playwright.async_api import (
    Error as PlaywrightError,
    Frame,
    Locator,
    Page,
)

from meeting_bot.config import settings, BotSettings, MeetingPlatform
from meeting_bot.core.exceptions import (
    ElementNotFoundError,
    JoinTimeoutError,
    StepNotImplementedError,
)
from meeting_bot.core.logging import get_logger
from meeting_bot.domain.models import ControllerState, SessionConfig, ToggleState
from . import dom
from .diagnostics import capture_failure_screenshot
from .toggle import extract_toggle_state


LoggerLike = Union[logging.Logger, logging.LoggerAdapter]
Clock = Callable[[], float]

MEDIA_PERMISSIONS = ["microphone", "camera"]


def url_origin(url: str) -> str:
    """Return ``scheme://host[:port]`` for a URL, or "" if it has none."""
    parsed = urlparse(url or "")
    if not parsed.scheme or not parsed.netloc:
        return ""
    return f"{parsed.scheme}://{parsed.netloc}"


class PlatformController:
    """
    Join state machine shared by all platform controllers.

    Holds the page, the session configuration, a logger and the join
    deadline. Adapter-local mutable state lives in ``self.state``.
    """

    platform: ClassVar[Optional[MeetingPlatform]] = None

    def __init__(
        self,
        page: Page,
        config: SessionConfig,
        logger: Optional[LoggerLike] = None,
        *,
        clock: Clock = time.monotonic,
        bot_settings: Optional[BotSettings] = None,
    ) -> None:
        self.page = page
        self.config = config
        platform_name = self.platform.value if self.platform else "generic"
        self.logger = logger or get_logger(f"platform.{platform_name}")
        self.bot_settings = bot_settings or settings.bot

        self._clock = clock
        self.join_deadline = clock() + config.join_timeout_sec
        self.state = ControllerState()
        self._background_tasks: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Static launch-time lookups
    # ------------------------------------------------------------------

    @staticmethod
    def get_browser_args() -> List[str]:
        """Extra Chromium flags this platform needs."""
        return []

    @staticmethod
    def get_permissions_origin(meeting_url: str) -> str:
        """Origin to pre-grant microphone/camera permissions for."""
        return url_origin(meeting_url)

    def prepare_meeting_url(self) -> str:
        """URL the host should navigate to (adapters may rewrite it)."""
        return self.config.meeting_url

    # ------------------------------------------------------------------
    # Join protocol
    # ------------------------------------------------------------------

    async def join_meeting(self, navigate: Optional[Callable[[], Awaitable[Any]]] = None) -> None:
        """
        Execute the full join sequence.

        ``navigate`` is the host's navigation coroutine; when given,
        ``before_navigate`` runs first and navigation happens before
        ``before_join``. Failures of the required steps are logged once and
        re-raised; optional hook failures are logged and ignored.
        """
        if navigate is not None:
            await self._run_optional_hook("before_navigate", self.before_navigate)

        try:
            if navigate is not None:
                await navigate()
            await self.before_join()
            await self.perform_join()
            await self.ensure_joined()
        except Exception as e:
            self.logger.error(f"Failed to join meeting: {type(e).__name__}: {e}")
            raise

        await self._run_optional_hook("after_join", self.after_join)

    async def _run_optional_hook(self, name: str, hook: Callable[[], Awaitable[Any]]) -> None:
        try:
            await hook()
        except Exception as e:
            self.logger.warning(f"{name} failed, continuing anyway: {e}")

    async def before_navigate(self) -> None:
        """Optional hook executed before navigation."""

    async def before_join(self) -> None:
        """Bring the client to a state where joining is possible."""
        raise StepNotImplementedError("before_join", type(self).__name__)

    async def perform_join(self) -> None:
        """Submit the join action; must raise if no join control is found."""
        raise StepNotImplementedError("perform_join", type(self).__name__)

    async def ensure_joined(self) -> None:
        """Block until the in-meeting UI is confirmed."""
        raise StepNotImplementedError("ensure_joined", type(self).__name__)

    async def after_join(self) -> None:
        """Optional hook executed after the join succeeds."""

    async def has_bot_joined(self) -> bool:
        """Whether the in-meeting UI is currently visible."""
        raise StepNotImplementedError("has_bot_joined", type(self).__name__)

    async def leave_meeting(self) -> None:
        raise StepNotImplementedError("leave_meeting", type(self).__name__)

    async def set_microphone(self, enable: bool) -> None:
        raise StepNotImplementedError("set_microphone", type(self).__name__)

    async def set_camera(self, enable: bool) -> None:
        raise StepNotImplementedError("set_camera", type(self).__name__)

    async def cleanup(self) -> None:
        """Optional hook: stop background work owned by this controller."""

    # ------------------------------------------------------------------
    # Presence
    # ------------------------------------------------------------------

    def get_meeting_presence_selectors(self) -> List[str]:
        """Selectors whose visibility means we are still in the call."""
        return []

    async def is_meeting_active(self) -> bool:
        """Determine whether the meeting UI is still active."""
        if self.page.is_closed():
            return False

        selectors = self.get_meeting_presence_selectors()
        if not selectors:
            return True

        target = self.get_dom_target()
        timeout_ms = self.bot_settings.presence_probe_timeout_ms
        for selector in selectors:
            try:
                if await dom.is_visible_within(target.locator(selector).first, timeout_ms):
                    return True
            except Exception as e:
                self.logger.debug(f"Meeting presence selector not visible: {selector} ({e})")
        return False

    # ------------------------------------------------------------------
    # DOM helpers
    # ------------------------------------------------------------------

    def get_dom_target(self) -> Union[Page, Frame]:
        """Page or frame that selector operations run against."""
        return self.page

    async def click_first_visible(
        self,
        selectors: Sequence[str],
        timeout_ms: int = dom.DEFAULT_CLICK_TIMEOUT_MS,
        click_delay_ms: int = 0,
    ) -> Optional[Locator]:
        return await dom.click_first_visible(
            self.get_dom_target(), selectors, timeout_ms=timeout_ms, click_delay_ms=click_delay_ms
        )

    async def wait_for_any(
        self,
        selectors: Sequence[str],
        timeout_ms: int = dom.DEFAULT_WAIT_FOR_SELECTOR_TIMEOUT_MS,
        state: str = "visible",
    ) -> Locator:
        return await dom.wait_for_any(self.get_dom_target(), selectors, timeout_ms=timeout_ms, state=state)

    async def extract_toggle_state(self, locator: Locator) -> ToggleState:
        return await extract_toggle_state(locator)

    async def ensure_toggle_state(
        self,
        selectors: Sequence[str],
        desired_state: bool,
        allow_unknown: bool = False,
    ) -> Locator:
        """
        Make a toggle control match ``desired_state``, clicking at most once.

        An UNKNOWN state is clicked once only when ``allow_unknown`` is False.

        Raises:
            ElementNotFoundError: if no toggle control could be located.
        """
        try:
            locator = await self.wait_for_any(selectors, timeout_ms=self.bot_settings.toggle_wait_timeout_ms)
        except (PlaywrightError, ValueError):
            raise ElementNotFoundError(
                f"Unable to locate toggle control for selectors: {', '.join(selectors)}",
                selectors,
            )

        current_state = await self.extract_toggle_state(locator)
        if current_state is ToggleState.UNKNOWN:
            if not allow_unknown:
                self.logger.warning("Toggle state unknown, clicking once to attempt desired state")
                await locator.click()
            return locator

        if current_state.as_bool() != desired_state:
            await locator.click()
        return locator

    async def wait_while_visible(
        self,
        selectors: Sequence[str],
        until_selectors: Sequence[str] = (),
        interval_seconds: Optional[float] = None,
    ) -> None:
        """
        Poll while any of ``selectors`` is visible (lobby/waiting screens).

        Checks the join deadline at the start of every iteration and returns
        as soon as the indicator disappears or an ``until_selectors`` match
        shows up.
        """
        interval = interval_seconds if interval_seconds is not None else self.bot_settings.lobby_poll_interval_seconds
        while True:
            self.enforce_join_deadline()
            target = self.get_dom_target()
            if until_selectors and await dom.any_visible(target, until_selectors, timeout_ms=250):
                return
            if await dom.any_visible(target, selectors, timeout_ms=250) is None:
                return
            await self.pause(interval)

    async def pause(self, seconds: float) -> None:
        await asyncio.sleep(seconds)

    # ------------------------------------------------------------------
    # Deadline, permissions, status, diagnostics
    # ------------------------------------------------------------------

    def enforce_join_deadline(self) -> None:
        """Raise JoinTimeoutError once the overall join budget is spent."""
        if self._clock() >= self.join_deadline:
            raise JoinTimeoutError(deadline=self.join_deadline)

    async def grant_permissions(self) -> None:
        """Grant microphone/camera for the meeting origin."""
        try:
            origin = url_origin(self.config.meeting_url)
            await self.page.context.grant_permissions(MEDIA_PERMISSIONS, origin=origin)
            self.logger.debug(f"Granted media permissions for {origin}")
        except Exception as e:
            self.logger.warning(f"Unable to grant media permissions automatically: {e}")

    async def send_status(self, status: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Forward a status update to the configured callback (never raises)."""
        callback = self.config.send_status_update
        if callback is None:
            return

        payload = {"platform": self.config.platform_id}
        payload.update(metadata or {})
        try:
            result = callback(status, message, payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            self.logger.warning(f"Status update '{status}' failed: {e}")

    async def capture_screenshot(self, reason: str) -> None:
        await capture_failure_screenshot(
            self.page,
            reason,
            self.logger,
            meeting_id=self.config.meeting_id,
            session_id=self.config.session_id,
        )

    def fire_and_forget(self, coro: Awaitable[Any], description: str) -> asyncio.Task:
        """Run a best-effort side action without blocking the join flow."""
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)

        def _done(t: asyncio.Task) -> None:
            self._background_tasks.discard(t)
            if t.cancelled():
                return
            error = t.exception()
            if error is not None:
                self.logger.warning(f"{description} failed: {error}")

        task.add_done_callback(_done)
        return task
