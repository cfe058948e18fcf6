"""Fingerprinting and the time-bounded duplicate suppression window.

A fingerprint enters the window when its event is admitted and leaves it
exactly once, ``ttl`` seconds later. Duplicates seen in between are
suppressed and do not extend or reset the expiry.
"""

from __future__ import annotations

import json
import logging
import threading
from functools import partial
from typing import Any, Optional, Sequence

from .formatting import to_jsonable
from .models import CaptureKind
from .ports import TimerHandle, TimerScheduler

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3.0


def _encode_default(value: Any) -> Any:
    try:
        return to_jsonable(value)
    except TypeError:
        return repr(value)


def fingerprint(kind: CaptureKind, payload: Sequence[Any]) -> str:
    """Return a deterministic dedup key for an event's kind and payload.

    Objects are reduced to their own fields, so separately built but
    structurally equal payloads share a key. Falls back to ``repr`` when
    the payload cannot be serialized (circular references, unorderable
    keys). Never raises.
    """
    prefix = kind.value if isinstance(kind, CaptureKind) else str(kind)
    try:
        body = json.dumps(list(payload), sort_keys=True, default=_encode_default)
    except Exception:
        try:
            body = repr(payload)
        except Exception:
            body = f"<unserializable payload of {len(payload)} items>"
    return f"{prefix}:{body}"


class _Entry:
    __slots__ = ("handle",)

    def __init__(self) -> None:
        self.handle: Optional[TimerHandle] = None


class DedupWindow:
    """Tracks recently admitted fingerprints for a fixed TTL."""

    def __init__(self, ttl: float, scheduler: TimerScheduler) -> None:
        self._ttl = ttl
        self._scheduler = scheduler
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def should_admit(self, key: str) -> bool:
        """Admit the first occurrence of ``key``; suppress repeats until expiry."""
        with self._lock:
            if key in self._entries:
                return False
            entry = _Entry()
            try:
                entry.handle = self._scheduler.schedule(
                    self._ttl, partial(self._expire, key, entry)
                )
            except Exception:
                # Without an expiry the key would stay suppressed forever.
                logger.warning("Could not schedule dedup expiry", exc_info=True)
                return True
            self._entries[key] = entry
            return True

    def _expire(self, key: str, entry: _Entry) -> None:
        with self._lock:
            if self._entries.get(key) is entry:
                del self._entries[key]

    def close(self) -> None:
        """Cancel every pending expiry and forget all fingerprints."""
        with self._lock:
            entries = list(self._entries.values())
            self._entries.clear()
        for entry in entries:
            if entry.handle is not None:
                entry.handle.cancel()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries
