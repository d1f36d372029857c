"""Pilot wrappers with settling for Textual in-process tests.

Thin wrappers that add await pilot.pause() after each interaction,
waiting for CPU idle instead of fixed sleeps.
"""

import time
from typing import Callable

from textual.pilot import Pilot


async def press_and_settle(pilot: Pilot, *keys: str) -> None:
    """Press keys and wait for app to settle."""
    await pilot.press(*keys)
    await pilot.pause()


async def press_sequence(pilot: Pilot, keys: list[str]) -> None:
    """Press keys one at a time, settling after each."""
    for key in keys:
        await pilot.press(key)
        await pilot.pause()


async def type_and_settle(pilot: Pilot, text: str) -> None:
    """Type printable text one character at a time, then settle."""
    await pilot.press(*["space" if ch == " " else ch for ch in text])
    await pilot.pause()


async def resize_and_settle(pilot: Pilot, width: int, height: int) -> None:
    """Resize terminal and wait for app to settle."""
    await pilot.resize_terminal(width, height)
    await pilot.pause()


async def settle_until(pilot: Pilot, predicate: Callable[[], bool], timeout: float = 3.0) -> bool:
    """Pause repeatedly until predicate() holds (worker-thread results land) or timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        await pilot.pause(0.05)
    return predicate()
