"""Shared fixtures for capture_core tests."""

from typing import Callable

import pytest

from capture_core.ports import TimerHandle, TimerScheduler


class ManualTimerHandle(TimerHandle):
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(TimerScheduler):
    """Virtual-clock scheduler: timers fire only when advance() passes them."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[ManualTimerHandle] = []

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = ManualTimerHandle(self.now + delay, callback)
        self.timers.append(handle)
        return handle

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = [t for t in self.timers if t.due <= self.now]
        self.timers = [t for t in self.timers if t.due > self.now]
        for timer in sorted(due, key=lambda t: t.due):
            if not timer.cancelled:
                timer.callback()

    @property
    def pending(self) -> int:
        return sum(1 for t in self.timers if not t.cancelled)


@pytest.fixture
def scheduler():
    return ManualScheduler()
