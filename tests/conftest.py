"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Ensure the application package is importable when running tests without an
# editable install. ``app`` sits at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


class FakeTimerHandle:
    """Stand-in for ``asyncio.TimerHandle`` that fires on demand."""

    def __init__(self, delay: float, callback) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Records ``call_later`` requests so timers can be advanced manually."""

    def __init__(self) -> None:
        self.handles: list[FakeTimerHandle] = []

    def call_later(self, delay: float, callback) -> FakeTimerHandle:
        handle = FakeTimerHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def fire_pending(self) -> int:
        fired = 0
        for handle in list(self.handles):
            if not handle.cancelled:
                handle.callback()
                handle.cancelled = True
                fired += 1
        return fired


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()
