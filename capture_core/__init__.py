"""Runtime failure capture for capture_core.

Adapters (logging, excepthooks, HTTP clients, frameworks) should call
``CaptureEngine.capture()`` instead of reporting failures directly.
"""

from .aliases import KIND_ALIASES, resolve_kind
from .config import CaptureConfig
from .dedup import DEFAULT_TTL_SECONDS, DedupWindow, fingerprint
from .errors import CaptureCoreError, ConfigError, ValidationError, set_error_hook
from .formatting import format_single, formatted_messages
from .models import CapturedEvent, CaptureKind
from .observers import Observer, ObserverRegistry
from .ports import TimerHandle, TimerScheduler
from .telemetry import CaptureEngine, get_default_engine, reset_default_engine

__all__ = [
    "CaptureConfig",
    "CaptureCoreError",
    "CaptureEngine",
    "CaptureKind",
    "CapturedEvent",
    "ConfigError",
    "DEFAULT_TTL_SECONDS",
    "DedupWindow",
    "KIND_ALIASES",
    "Observer",
    "ObserverRegistry",
    "TimerHandle",
    "TimerScheduler",
    "ValidationError",
    "fingerprint",
    "format_single",
    "formatted_messages",
    "get_default_engine",
    "reset_default_engine",
    "resolve_kind",
    "set_error_hook",
]
