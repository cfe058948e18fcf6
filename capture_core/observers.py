"""Observer registry: the set of callbacks that receive admitted events."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Hashable

from .models import CapturedEvent

logger = logging.getLogger(__name__)

Observer = Callable[[CapturedEvent], None]


def _identity(observer: Observer) -> Hashable:
    # Bound methods are rebuilt on every attribute access; key them on the
    # instance and function so obj.method subscribes and unsubscribes alike.
    owner = getattr(observer, "__self__", None)
    if owner is None:
        return id(observer)
    func = getattr(observer, "__func__", None)
    if func is not None:
        return (id(owner), id(func))
    return (id(owner), getattr(observer, "__name__", None))


class ObserverRegistry:
    """Insertion-ordered set of observers, unique by identity.

    Equality and hashing of the callables play no part, so unhashable
    callables are accepted and equal-but-distinct ones stay separate.

    Best-effort delivery: an observer that raises is logged and skipped,
    never propagated.
    """

    def __init__(self) -> None:
        self._observers: dict[Hashable, Observer] = {}
        self._lock = threading.Lock()

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer. Returns a handle that unsubscribes it."""
        with self._lock:
            self._observers.setdefault(_identity(observer), observer)

        def unsubscribe() -> None:
            self.unsubscribe(observer)

        return unsubscribe

    def unsubscribe(self, observer: Observer) -> None:
        """Remove an observer. Removing an absent observer is a no-op."""
        with self._lock:
            self._observers.pop(_identity(observer), None)

    def broadcast(self, event: CapturedEvent) -> int:
        """Deliver ``event`` to the observers registered right now.

        Observers added or removed while the broadcast runs do not affect
        it. Returns how many observers returned without raising.
        """
        with self._lock:
            snapshot = list(self._observers.values())

        delivered = 0
        for observer in snapshot:
            try:
                observer(event)
            except Exception:
                logger.debug("Capture observer %r failed", observer, exc_info=True)
            else:
                delivered += 1
        return delivered

    def clear(self) -> None:
        with self._lock:
            self._observers.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._observers)

    def __bool__(self) -> bool:
        return len(self) > 0
