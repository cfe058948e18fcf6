"""Capture engine: the single ingestion entry point for failure events.

Adapters detect a failure, build a CapturedEvent and hand it to
``CaptureEngine.capture()``. The engine drops repeats of the same
fingerprint inside the dedup window, then delivers the event to every
subscribed observer, or to the default sink when nobody is subscribed.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .adapters.timers import ThreadingTimerScheduler
from .config import CaptureConfig
from .dedup import DedupWindow, fingerprint
from .models import CapturedEvent
from .observers import Observer, ObserverRegistry
from .ports import TimerScheduler

logger = logging.getLogger(__name__)

Sink = Callable[[CapturedEvent], None]


class CaptureEngine:
    """Owns one dedup window and one observer registry.

    With no observers subscribed, admitted events go to the default sink:
    a record on the ``capture_core.telemetry`` logger at
    ``config.sink_level`` (INFO). Python's unconfigured logging drops
    INFO records, so either configure logging, subscribe an observer, or
    call ``capture_core.adapters.install()``, which makes the sink logger
    emit.
    """

    def __init__(
        self,
        config: Optional[CaptureConfig] = None,
        *,
        scheduler: Optional[TimerScheduler] = None,
        sink: Optional[Sink] = None,
    ) -> None:
        self.config = config or CaptureConfig()
        self.config.validate()
        self._window = DedupWindow(
            self.config.dedup_ttl_seconds,
            scheduler or ThreadingTimerScheduler(),
        )
        self._observers = ObserverRegistry()
        self._sink = sink or self._log_sink

    def capture(self, event: CapturedEvent) -> None:
        """Deliver ``event`` unless an identical one was admitted recently.

        Never raises.
        """
        try:
            key = fingerprint(event.kind, event.payload)
            if not self._window.should_admit(key):
                logger.debug("Suppressed duplicate %s event", event.kind.value)
                return

            if self._observers:
                self._observers.broadcast(event)
            else:
                self._sink(event)
        except Exception:
            # Never let capture crash the code that reported the failure
            logger.debug("Capture dispatch failed", exc_info=True)

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer for admitted events. Returns an unsubscribe handle."""
        return self._observers.subscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers.unsubscribe(observer)

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    @property
    def suppressed_count(self) -> int:
        """Number of fingerprints currently inside the dedup window."""
        return len(self._window)

    def close(self) -> None:
        """Cancel pending dedup expiries and drop all observers."""
        self._window.close()
        self._observers.clear()

    def _log_sink(self, event: CapturedEvent) -> None:
        logger.log(self.config.sink_levelno, "[Captured] %s", event)


_default_engine: Optional[CaptureEngine] = None
_default_lock = threading.Lock()


def get_default_engine() -> CaptureEngine:
    """Return the shared engine, creating it from the environment on first use."""
    global _default_engine
    with _default_lock:
        if _default_engine is None:
            _default_engine = CaptureEngine(CaptureConfig.from_env())
        return _default_engine


def reset_default_engine() -> None:
    """Close and forget the shared engine. The next access builds a new one."""
    global _default_engine
    with _default_lock:
        engine, _default_engine = _default_engine, None
    if engine is not None:
        engine.close()
