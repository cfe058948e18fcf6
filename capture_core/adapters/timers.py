"""TimerScheduler implementations backed by threads or an asyncio loop."""

from __future__ import annotations

import asyncio
import threading
from typing import Callable, Optional

from ..ports import TimerHandle, TimerScheduler


class _ThreadTimerHandle(TimerHandle):
    def __init__(self, timer: threading.Timer) -> None:
        self._timer = timer

    def cancel(self) -> None:
        self._timer.cancel()


class ThreadingTimerScheduler(TimerScheduler):
    """Fires callbacks from daemon ``threading.Timer`` threads.

    The default for engines created outside an event loop. Daemon timers
    never keep the interpreter alive at shutdown.
    """

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return _ThreadTimerHandle(timer)


class _LoopTimerHandle(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle) -> None:
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()


class AsyncioTimerScheduler(TimerScheduler):
    """Fires callbacks via ``loop.call_later`` on a single event loop.

    ``schedule`` must be called from the loop's own thread, which holds
    whenever captures originate from coroutines or loop callbacks.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def schedule(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return _LoopTimerHandle(self.loop.call_later(delay, callback))
