"""Tests for the Microsoft Teams web join flow."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from meeting_bot.core.exceptions import ElementNotFoundError, JoinTimeoutError, MeetingJoinError
from meeting_bot.meeting_handler.teams import TeamsController, force_web_join

from fakes import make_config


TEAMS_URL = "https://teams.microsoft.com/l/meetup-join/19%3ameeting_abc%40thread.v2/0?context=%7b%7d"

CONTINUE_BROWSER = 'button[data-tid="joinOnWeb"]'
NAME_INPUT = 'input[placeholder*="name" i]'
PREJOIN_CAMERA = '[role="switch"][title*="camera" i]'
JOIN_NOW = 'button:has-text("Join now")'
LOBBY = '[data-tid="lobby-waiting-text"]'
DENIED = '[data-tid="meeting-ended"]'
HANGUP = 'button[id="hangup-button"]'
LEAVE = 'button[data-tid="leave-call-button"]'


def teams_config(**overrides):
    values = {"platform": "teams", "meeting_url": TEAMS_URL, "bot_name": "Teams Bot"}
    values.update(overrides)
    return make_config(**values)


class TestMeetingUrl:
    def test_force_web_join(self):
        assert force_web_join("https://teams.live.com/meet/123") == "https://teams.live.com/meet/123?webjoin=true"
        assert force_web_join("https://teams.live.com/meet/123?p=x") == "https://teams.live.com/meet/123?p=x&webjoin=true"
        assert force_web_join("https://teams.live.com/meet/123?webjoin=true") == "https://teams.live.com/meet/123?webjoin=true"

    def test_prepare_meeting_url(self, page):
        controller = TeamsController(page, teams_config())
        assert controller.prepare_meeting_url() == TEAMS_URL + "&webjoin=true"


class TestBeforeJoin:
    @pytest.mark.asyncio
    async def test_prejoin_screen(self, page):
        page.add(CONTINUE_BROWSER)
        page.add(JOIN_NOW)
        name_input = page.add(NAME_INPUT)
        camera = page.add(PREJOIN_CAMERA, attrs={"aria-pressed": "true"})
        controller = TeamsController(page, teams_config())

        await controller.before_join()

        assert page.clicked[0] == CONTINUE_BROWSER
        assert name_input.value == "Teams Bot"
        assert camera.clicks == 1

    @pytest.mark.asyncio
    async def test_name_fallback_to_first_text_input(self, page):
        fallback = page.add('input[type="text"]')
        controller = TeamsController(page, teams_config())

        await controller.before_join()

        assert fallback.value == "Teams Bot"


class TestPerformJoin:
    @pytest.mark.asyncio
    async def test_clicks_join_now(self, page):
        join = page.add(JOIN_NOW)
        await TeamsController(page, teams_config()).perform_join()
        assert join.clicks == 1

    @pytest.mark.asyncio
    async def test_failure_aborts_before_ensure_joined(self, page):
        controller = TeamsController(page, teams_config())
        controller.before_join = AsyncMock()
        controller.ensure_joined = AsyncMock()

        with pytest.raises(ElementNotFoundError):
            await controller.join_meeting()

        controller.ensure_joined.assert_not_awaited()
        assert len(page.screenshots) == 1

    @pytest.mark.asyncio
    async def test_failure_is_logged_as_error_once(self, page):
        logger = MagicMock()
        controller = TeamsController(page, teams_config(), logger)
        controller.before_join = AsyncMock()

        with pytest.raises(ElementNotFoundError):
            await controller.join_meeting()

        assert logger.error.call_count == 1
        assert "Failed to join meeting" in logger.error.call_args.args[0]


class TestEnsureJoined:
    @pytest.mark.asyncio
    async def test_admitted_from_lobby(self, page, clock, recorder):
        page.add(LOBBY)
        controller = TeamsController(page, teams_config(send_status_update=recorder), clock=clock)

        async def admitted(seconds):
            clock.advance(2)
            page.remove(LOBBY)

        controller.pause = admitted

        await controller.ensure_joined()

        assert recorder.statuses == ["waiting_for_host", "in_meeting"]

    @pytest.mark.asyncio
    async def test_lobby_timeout(self, page, clock):
        page.add(LOBBY)
        controller = TeamsController(page, teams_config(join_timeout_sec=60), clock=clock)

        async def still_waiting(seconds):
            clock.advance(30.5)

        controller.pause = still_waiting

        with pytest.raises(JoinTimeoutError):
            await controller.ensure_joined()

    @pytest.mark.asyncio
    async def test_entry_denied(self, page):
        page.add(DENIED)
        controller = TeamsController(page, teams_config())

        with pytest.raises(MeetingJoinError) as exc_info:
            await controller.ensure_joined()
        assert not isinstance(exc_info.value, JoinTimeoutError)


class TestInMeeting:
    @pytest.mark.asyncio
    async def test_has_bot_joined_via_tile(self, page):
        controller = TeamsController(page, teams_config())
        assert await controller.has_bot_joined() is False

        page.add('div[data-tid="Teams Bot"]')
        assert await controller.has_bot_joined() is True

    @pytest.mark.asyncio
    async def test_has_bot_joined_via_controls(self, page):
        page.add(HANGUP)
        assert await TeamsController(page, teams_config()).has_bot_joined() is True

    @pytest.mark.asyncio
    async def test_is_meeting_active(self, page):
        controller = TeamsController(page, teams_config())
        assert await controller.is_meeting_active() is False

        page.add('div[role="toolbar"]')
        assert await controller.is_meeting_active() is True

    @pytest.mark.asyncio
    async def test_after_join_sets_media(self, page):
        camera = page.add('button[data-tid="toggle-camera"]', attrs={"aria-pressed": "true"})
        mic = page.add('button[data-tid="toggle-mute"]', attrs={"aria-label": "Unmute"})

        await TeamsController(page, teams_config()).after_join()

        assert camera.clicks == 1
        assert mic.clicks == 1

    @pytest.mark.asyncio
    async def test_leave_meeting(self, page):
        leave = page.add(LEAVE)
        await TeamsController(page, teams_config()).leave_meeting()
        assert leave.clicks == 1
