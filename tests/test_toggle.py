"""Tests for mic/camera toggle state inference."""

import pytest

from meeting_bot.domain.models import ToggleState
from meeting_bot.meeting_handler.toggle import extract_toggle_state, infer_toggle_state

from fakes import FakePage


class TestInferToggleState:
    @pytest.mark.parametrize(
        "aria_pressed,aria_label,data_is_muted,expected",
        [
            ("true", None, None, ToggleState.ON),
            ("false", None, None, ToggleState.OFF),
            (None, "Turn off microphone (ctrl + d)", None, ToggleState.ON),
            (None, "Turn on camera", None, ToggleState.OFF),
            (None, "Mute my microphone", None, ToggleState.ON),
            (None, "Unmute", None, ToggleState.OFF),
            (None, "Stop Video", None, ToggleState.ON),
            (None, "Start Video", None, ToggleState.OFF),
            (None, None, "true", ToggleState.OFF),
            (None, None, "false", ToggleState.ON),
            (None, "Microphone", None, ToggleState.UNKNOWN),
            (None, None, None, ToggleState.UNKNOWN),
        ],
    )
    def test_rules(self, aria_pressed, aria_label, data_is_muted, expected):
        assert infer_toggle_state(aria_pressed, aria_label, data_is_muted) is expected

    def test_aria_pressed_wins_over_label(self):
        assert infer_toggle_state("false", "Turn off microphone", "false") is ToggleState.OFF

    def test_label_wins_over_data_attribute(self):
        assert infer_toggle_state(None, "Turn on microphone", "false") is ToggleState.OFF

    def test_unrecognised_aria_pressed_falls_through(self):
        assert infer_toggle_state("mixed", "Turn off camera", None) is ToggleState.ON


class TestExtractToggleState:
    @pytest.mark.asyncio
    async def test_reads_attributes_from_control(self):
        page = FakePage()
        page.add("#mic", attrs={"aria-label": "Unmute"})
        assert await extract_toggle_state(page.locator("#mic")) is ToggleState.OFF

    @pytest.mark.asyncio
    async def test_data_is_muted_fallback(self):
        page = FakePage()
        page.add("#mic", attrs={"data-is-muted": "false"})
        assert await extract_toggle_state(page.locator("#mic")) is ToggleState.ON

    @pytest.mark.asyncio
    async def test_unknown_without_signals(self):
        page = FakePage()
        page.add("#mic")
        assert await extract_toggle_state(page.locator("#mic")) is ToggleState.UNKNOWN


class TestToggleStateValues:
    def test_as_bool(self):
        assert ToggleState.ON.as_bool() is True
        assert ToggleState.OFF.as_bool() is False
        assert ToggleState.UNKNOWN.as_bool() is None
