"""Shared fixtures for the meeting bot test suite."""

import pytest

from meeting_bot.config import settings
from meeting_bot.meeting_handler.admission import AdmissionPoller
from meeting_bot.meeting_handler.base import PlatformController

from fakes import FakeClock, FakePage, StatusRecorder


async def _no_pause(self, seconds):
    return None


@pytest.fixture(autouse=True)
def fast_pauses(monkeypatch):
    """Join flows sleep between UI steps; tests don't."""
    monkeypatch.setattr(PlatformController, "pause", _no_pause)
    monkeypatch.setattr(AdmissionPoller, "click_settle_seconds", 0)
    monkeypatch.setattr(AdmissionPoller, "confirm_settle_seconds", 0)


@pytest.fixture(autouse=True)
def screenshots_dir(monkeypatch, tmp_path):
    directory = tmp_path / "screenshots"
    monkeypatch.setattr(settings.diagnostics, "screenshots_dir", str(directory))
    return directory


@pytest.fixture
def page():
    return FakePage()


@pytest.fixture
def clock():
    return FakeClock(0.0)


@pytest.fixture
def recorder():
    return StatusRecorder()
