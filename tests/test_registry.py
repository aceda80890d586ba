"""Tests for platform id resolution."""

import pytest

from meeting_bot.config import MeetingPlatform, settings
from meeting_bot.core.exceptions import UnsupportedPlatformError
from meeting_bot.meeting_handler.google_meet import GoogleMeetController
from meeting_bot.meeting_handler.registry import (
    create_platform_controller,
    get_platform_browser_args,
    get_platform_permissions_origin,
    resolve_platform,
    supported_platforms,
)
from meeting_bot.meeting_handler.teams import TeamsController
from meeting_bot.meeting_handler.zoom import ZoomController

from fakes import make_config


class TestResolvePlatform:
    @pytest.mark.parametrize(
        "platform_id,expected",
        [
            ("zoom", ZoomController),
            ("ZOOM", ZoomController),
            (" Zoom ", ZoomController),
            ("teams", TeamsController),
            ("google_meet", GoogleMeetController),
            ("meet", GoogleMeetController),
            ("Google-Meet", GoogleMeetController),
        ],
    )
    def test_known_ids(self, platform_id, expected):
        assert resolve_platform(platform_id) is expected

    @pytest.mark.parametrize("platform_id", ["webex", "", None])
    def test_unknown_ids(self, platform_id):
        with pytest.raises(UnsupportedPlatformError) as exc_info:
            resolve_platform(platform_id)

        error = exc_info.value
        assert isinstance(error, ValueError)
        assert error.supported == ["google_meet", "teams", "zoom"]
        assert "google_meet, teams, zoom" in str(error)

    def test_supported_platforms_sorted(self):
        assert supported_platforms() == ["google_meet", "teams", "zoom"]

    def test_disabled_platform_is_rejected(self, monkeypatch):
        monkeypatch.setattr(settings, "enabled_platforms", [MeetingPlatform.TEAMS, MeetingPlatform.GOOGLE_MEET])

        with pytest.raises(UnsupportedPlatformError) as exc_info:
            resolve_platform("zoom")

        assert exc_info.value.supported == ["google_meet", "teams"]
        assert supported_platforms() == ["google_meet", "teams"]
        assert resolve_platform("meet") is GoogleMeetController
        assert get_platform_browser_args("zoom") == []


class TestCreatePlatformController:
    def test_case_insensitive_creation(self, page):
        config = make_config(platform="ZOOM", meeting_url="https://app.zoom.us/wc/join/123")

        controller = create_platform_controller("ZOOM", page, config)

        assert isinstance(controller, ZoomController)
        assert controller.page is page
        assert controller.config is config

    def test_forwards_keyword_arguments(self, page, clock):
        clock.now = 10.0
        controller = create_platform_controller("teams", page, make_config(join_timeout_sec=30), clock=clock)
        assert controller.join_deadline == 40.0

    def test_unknown_platform(self, page):
        with pytest.raises(UnsupportedPlatformError):
            create_platform_controller("skype", page, make_config())

    def test_controllers_do_not_share_state(self, page):
        first = create_platform_controller("google_meet", page, make_config())
        second = create_platform_controller("google_meet", page, make_config())

        first.state.clicked_ask_to_join = True

        assert second.state.clicked_ask_to_join is False


class TestLaunchLookups:
    def test_browser_args(self):
        assert "--use-fake-ui-for-media-stream" in get_platform_browser_args("zoom")
        assert "--autoplay-policy=no-user-gesture-required" in get_platform_browser_args("Zoom")
        assert get_platform_browser_args("google_meet") == []
        assert get_platform_browser_args("unknown") == []

    def test_permissions_origin(self):
        assert get_platform_permissions_origin("meet", "https://meet.google.com/abc") == "https://meet.google.com"
        assert get_platform_permissions_origin("zoom", "https://us02web.zoom.us/j/1") == "https://us02web.zoom.us"
        assert get_platform_permissions_origin("zoom", "") == "https://app.zoom.us"
        assert (
            get_platform_permissions_origin("teams", "https://teams.live.com/meet/123")
            == "https://teams.live.com"
        )
        assert get_platform_permissions_origin("unknown", "https://example.com") == ""
