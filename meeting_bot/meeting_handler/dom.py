"""
Selector resolution utilities shared by every platform controller.

All helpers take a DOM target (a Playwright ``Page`` or ``Frame``) and an
ordered list of selectors. Earlier selectors win; absence of a match is
reported through the return value except in ``wait_for_any``.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from playwright.async_api import (
    Error as PlaywrightError,
    Frame,
    Locator,
    Page,
)

from meeting_bot.core.logging import get_logger


logger = get_logger("dom")

DomTarget = Union[Page, Frame]

DEFAULT_CLICK_TIMEOUT_MS = 2000
DEFAULT_WAIT_FOR_SELECTOR_TIMEOUT_MS = 15000


@dataclass
class SelectorMatch:
    """A resolved locator together with the selector that produced it."""
    locator: Locator
    selector: str


async def is_visible_within(locator: Locator, timeout_ms: int) -> bool:
    """
    Return True if the locator becomes visible within ``timeout_ms``.

    Playwright errors (timeouts, detached frames) count as "not visible".
    """
    try:
        await locator.wait_for(state="visible", timeout=timeout_ms)
        return True
    except PlaywrightError:
        return False


async def click_first_visible(
    target: DomTarget,
    selectors: Sequence[str],
    timeout_ms: int = DEFAULT_CLICK_TIMEOUT_MS,
    click_delay_ms: int = 0,
) -> Optional[Locator]:
    """
    Click the first element that becomes visible, trying selectors in order.

    Returns:
        The clicked locator, or None if no selector matched in time.
    """
    for selector in selectors:
        locator = target.locator(selector).first
        try:
            await locator.wait_for(state="visible", timeout=timeout_ms)
            await locator.click(delay=click_delay_ms)
            logger.debug(f"Clicked element using selector: {selector}")
            return locator
        except PlaywrightError as e:
            logger.debug(f"Selector not clickable: {selector} ({e})")
    return None


async def wait_for_any(
    target: DomTarget,
    selectors: Sequence[str],
    timeout_ms: int = DEFAULT_WAIT_FOR_SELECTOR_TIMEOUT_MS,
    state: str = "visible",
) -> Locator:
    """
    Wait for one of the selectors to reach ``state``, trying them in order.

    Raises:
        The last Playwright error if no selector matched.
        ValueError if ``selectors`` is empty.
    """
    if not selectors:
        raise ValueError("wait_for_any() needs at least one selector")

    last_error: Optional[BaseException] = None
    for selector in selectors:
        locator = target.locator(selector).first
        try:
            await locator.wait_for(state=state, timeout=timeout_ms)
            return locator
        except PlaywrightError as e:
            last_error = e
    raise last_error


async def wait_for_visible_selector(
    target: DomTarget,
    selectors: Sequence[str],
    timeout_ms: int = 12000,
    probe_ms: int = 500,
    interval_s: float = 0.25,
) -> Optional[SelectorMatch]:
    """
    Cycle through the selectors until one is visible or ``timeout_ms`` passes.

    Unlike ``wait_for_any`` this keeps re-checking the whole list, which suits
    forms that render their fields late.
    """
    deadline = time.monotonic() + timeout_ms / 1000
    while True:
        for selector in selectors:
            locator = target.locator(selector).first
            if await is_visible_within(locator, probe_ms):
                return SelectorMatch(locator=locator, selector=selector)
        if time.monotonic() >= deadline:
            return None
        await asyncio.sleep(interval_s)


async def wait_until_enabled(
    locator: Locator,
    timeout_ms: int = 8000,
    interval_s: float = 0.25,
) -> bool:
    """Poll until the control is no longer disabled."""
    deadline = time.monotonic() + timeout_ms / 1000
    while True:
        try:
            if not await locator.is_disabled():
                return True
        except PlaywrightError:
            pass
        if time.monotonic() >= deadline:
            return False
        await asyncio.sleep(interval_s)


async def any_visible(
    target: DomTarget,
    selectors: Sequence[str],
    timeout_ms: int = 1000,
) -> Optional[str]:
    """Return the first selector that is visible, probing each briefly."""
    for selector in selectors:
        if await is_visible_within(target.locator(selector).first, timeout_ms):
            return selector
    return None
