"""Exceptions raised while building events or loading configuration.

``capture()`` itself never raises; these surface at the edges, when an
adapter builds a malformed CapturedEvent or a config source is bad. Each
one is reported on construction, to the hook set with ``set_error_hook``
or to this module's logger.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

ErrorHook = Callable[["CaptureCoreError", dict[str, Any]], None]

_error_hook: Optional[ErrorHook] = None


def set_error_hook(hook: Optional[ErrorHook]) -> None:
    """Route rejected-event and config reports to ``hook(error, report)``.

    Pass None to go back to logging them.
    """
    global _error_hook
    _error_hook = hook


def _report(error: CaptureCoreError) -> None:
    report = {"error_type": type(error).__name__, "reason": str(error), **error.context}
    if _error_hook is None:
        logger.log(error.level, "%s", error.describe())
        return
    try:
        _error_hook(error, report)
    except Exception:
        logger.warning("Error hook failed while reporting: %s", error.describe(), exc_info=True)


class CaptureCoreError(Exception):
    """Base exception for capture_core."""

    level = logging.ERROR

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context
        _report(self)

    def describe(self) -> str:
        return str(self)


class ValidationError(CaptureCoreError):
    """An adapter built a CapturedEvent that cannot be captured.

    Context carries ``kind`` and ``payload_size`` when they are known.
    """

    level = logging.WARNING

    def describe(self) -> str:
        kind = self.context.get("kind", "unknown kind")
        size = self.context.get("payload_size")
        items = f", {size} payload items" if size is not None else ""
        return f"Rejected captured event ({kind}{items}): {self}"


class ConfigError(CaptureCoreError):
    """Capture configuration is invalid. Context carries ``key`` and ``source``."""

    def describe(self) -> str:
        source = self.context.get("source", "config")
        key = self.context.get("key")
        where = f"{source}:{key}" if key else source
        return f"Invalid capture configuration ({where}): {self}"
