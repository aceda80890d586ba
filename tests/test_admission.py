"""Tests for the organizer auto-admit loop."""

import asyncio
import logging
from unittest.mock import AsyncMock

import pytest

from meeting_bot.config import BotSettings
from meeting_bot.meeting_handler.admission import AdmissionPoller
from meeting_bot.meeting_handler.google_meet import GoogleMeetController

from fakes import make_config


ADMIT = 'button:has-text("Admit")'
CONFIRM = 'button[data-mdc-dialog-action="ok"]'
PEOPLE = 'button[aria-label^="People"]'

FAST_POLLING = BotSettings(admit_poll_interval_seconds=0.01, admit_poll_start_delay_seconds=0)

logger = logging.getLogger("tests.admission")


def make_poller(page, notify=None, **kwargs):
    return AdmissionPoller(
        page,
        logger,
        notify,
        admit_selectors=[ADMIT],
        confirm_selectors=[CONFIRM],
        interval_seconds=kwargs.pop("interval_seconds", 0.01),
        **kwargs,
    )


class TestPollOnce:
    @pytest.mark.asyncio
    async def test_no_admit_button(self, page):
        poller = make_poller(page)
        assert await poller.poll_once() is False
        assert poller.state.admitted is False

    @pytest.mark.asyncio
    async def test_admits_and_confirms(self, page):
        notify = AsyncMock()
        page.add(ADMIT, on_click=lambda: page.add(CONFIRM, on_click=lambda: page.remove(ADMIT)))
        poller = make_poller(page, notify)

        assert await poller.poll_once() is True

        assert page.elements[CONFIRM].clicks == 1
        assert poller.state.admitted is True
        assert poller.state.active is False
        assert [call.args[:2] for call in notify.await_args_list] == [
            ("done_status", "I have admitted you into the meeting"),
            ("done_status", "You can say hello to me now!"),
        ]

    @pytest.mark.asyncio
    async def test_button_still_visible_is_not_admitted(self, page):
        admit = page.add(ADMIT)
        poller = make_poller(page)

        assert await poller.poll_once() is False
        assert admit.clicks == 1
        assert poller.state.admitted is False


class TestPollingLifecycle:
    @pytest.mark.asyncio
    async def test_polls_until_admitted_then_stops(self, page):
        notify = AsyncMock()
        poller = make_poller(page, notify)
        poller.start()

        await asyncio.sleep(0.05)
        assert poller.is_running
        assert poller.state.attempt_count >= 2

        page.add(ADMIT, on_click=lambda: page.remove(ADMIT))
        await poller.wait_stopped(timeout=2)

        assert not poller.is_running
        assert poller.state.admitted is True
        assert notify.await_count == 2

        # Once admitted, start() is a no-op
        poller.start()
        assert not poller.is_running

    @pytest.mark.asyncio
    async def test_stops_when_page_closes(self, page):
        poller = make_poller(page)
        poller.start()
        page.closed = True

        await poller.wait_stopped(timeout=2)

        assert not poller.is_running
        assert poller.state.active is False
        assert poller.state.admitted is False

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self, page):
        poller = make_poller(page, interval_seconds=60)
        poller.stop()

        poller.start()
        await asyncio.sleep(0)
        poller.stop()
        poller.stop()
        await poller.wait_stopped(timeout=2)

        assert not poller.is_running
        assert poller.state.active is False

    @pytest.mark.asyncio
    async def test_start_twice_keeps_one_task(self, page):
        poller = make_poller(page, interval_seconds=60)
        poller.start()
        task = poller._task
        poller.start()

        assert poller._task is task
        poller.stop()
        await poller.wait_stopped(timeout=2)

    @pytest.mark.asyncio
    async def test_restart_before_previous_task_exits(self, page):
        poller = make_poller(page, interval_seconds=0.01)
        poller.start()
        await asyncio.sleep(0.03)
        task = poller._task

        poller.stop()
        poller.start()

        assert poller.state.active is True
        assert poller._task is task
        page.add(ADMIT, on_click=lambda: page.remove(ADMIT))
        await poller.wait_stopped(timeout=2)

        assert poller.state.admitted is True

    @pytest.mark.asyncio
    async def test_iteration_errors_do_not_stop_polling(self, page):
        poller = make_poller(page)
        poller.poll_once = AsyncMock(side_effect=[RuntimeError("frame detached"), False, False, False, False])
        poller.start()

        await asyncio.sleep(0.05)
        poller.stop()
        await poller.wait_stopped(timeout=2)

        assert poller.poll_once.await_count >= 2


class TestOrganizerScenario:
    @pytest.mark.asyncio
    async def test_organizer_auto_admits_guest(self, page, recorder):
        people = page.add(PEOPLE, attrs={"aria-expanded": "false"})

        def open_panel():
            people.attrs["aria-expanded"] = "true"

        people.on_click = open_panel
        page.add(ADMIT, on_click=lambda: page.add(CONFIRM, on_click=lambda: page.remove(ADMIT)))

        config = make_config(is_organizer=True, send_status_update=recorder)
        controller = GoogleMeetController(page, config, bot_settings=FAST_POLLING)

        await controller.after_join()
        poller = controller.admission_poller
        await poller.wait_stopped(timeout=2)
        await asyncio.sleep(0)

        assert people.clicks == 1
        assert poller.state.admitted is True
        assert recorder.statuses == ["done_status", "done_status"]
        assert [message for _, message, _ in recorder.updates] == [
            "I have admitted you into the meeting",
            "You can say hello to me now!",
        ]

    @pytest.mark.asyncio
    async def test_guest_does_not_poll(self, page, recorder):
        controller = GoogleMeetController(page, make_config(send_status_update=recorder), bot_settings=FAST_POLLING)
        await controller.after_join()
        assert controller.admission_poller is None

    @pytest.mark.asyncio
    async def test_organizer_without_callback_does_not_poll(self, page):
        controller = GoogleMeetController(page, make_config(is_organizer=True), bot_settings=FAST_POLLING)
        await controller.after_join()
        assert controller.admission_poller is None

    @pytest.mark.asyncio
    async def test_cleanup_stops_polling_and_is_idempotent(self, page, recorder):
        config = make_config(is_organizer=True, send_status_update=recorder)
        controller = GoogleMeetController(page, config, bot_settings=FAST_POLLING)
        await controller.after_join()
        poller = controller.admission_poller

        await controller.cleanup()
        await controller.cleanup()
        await poller.wait_stopped(timeout=2)

        assert not poller.is_running
        assert poller.state.active is False
        assert recorder.updates == []

    @pytest.mark.asyncio
    async def test_cleanup_without_polling(self, page):
        controller = GoogleMeetController(page, make_config())
        await controller.cleanup()
        await controller.cleanup()
