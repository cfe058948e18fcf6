"""Interfaces for host-provided scheduling.

Timer implementations live in ``capture_core.adapters.timers``. Core
components depend only on these abstractions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable


class TimerHandle(ABC):
    """A pending one-shot callback."""

    @abstractmethod
    def cancel(self) -> None:
        """Prevent the callback from running. Safe to call more than once."""


class TimerScheduler(ABC):
    """Runs a callback once after a delay, on the host's scheduler."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Schedule ``callback`` to run after ``delay`` seconds."""
