"""
Toggle state inference for mic/camera style controls.

Rules are evaluated in order and the first one that fires wins:

1. ``aria-pressed`` is ``"true"`` / ``"false"``
2. ``aria-label`` says "turn off ..." (currently on) / "turn on ..." (currently off)
3. ``aria-label`` uses action verbs: "mute" / "stop video" (currently on),
   "unmute" / "start video" (currently off)
4. ``data-is-muted`` is ``"true"`` (off) / ``"false"`` (on)

With no conclusive signal the state is UNKNOWN and the caller decides
whether clicking is safe.
"""

from __future__ import annotations

import re
from typing import Optional

from playwright.async_api import Locator

from meeting_bot.domain.models import ToggleState


_TURN_OFF = re.compile(r"turn off", re.IGNORECASE)
_TURN_ON = re.compile(r"turn on", re.IGNORECASE)
_ACTION_ON = re.compile(r"^\s*(mute\b|stop video)", re.IGNORECASE)
_ACTION_OFF = re.compile(r"^\s*(unmute\b|start video)", re.IGNORECASE)


def infer_toggle_state(
    aria_pressed: Optional[str],
    aria_label: Optional[str],
    data_is_muted: Optional[str],
) -> ToggleState:
    """Infer a tri-state value from raw attribute values."""
    if aria_pressed == "true":
        return ToggleState.ON
    if aria_pressed == "false":
        return ToggleState.OFF

    label = aria_label or ""
    if _TURN_OFF.search(label):
        return ToggleState.ON
    if _TURN_ON.search(label):
        return ToggleState.OFF
    if _ACTION_OFF.search(label):
        return ToggleState.OFF
    if _ACTION_ON.search(label):
        return ToggleState.ON

    if data_is_muted == "true":
        return ToggleState.OFF
    if data_is_muted == "false":
        return ToggleState.ON

    return ToggleState.UNKNOWN


async def extract_toggle_state(locator: Locator) -> ToggleState:
    """Read the relevant attributes from a control and infer its state."""
    aria_pressed = await locator.get_attribute("aria-pressed")
    if aria_pressed in ("true", "false"):
        return infer_toggle_state(aria_pressed, None, None)

    aria_label = await locator.get_attribute("aria-label")
    state = infer_toggle_state(None, aria_label, None)
    if state is not ToggleState.UNKNOWN:
        return state

    data_is_muted = await locator.get_attribute("data-is-muted")
    return infer_toggle_state(None, None, data_is_muted)
