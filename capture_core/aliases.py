"""Capture kind alias resolution.

Maps user-facing / legacy source labels to canonical CaptureKind values.
"""

from __future__ import annotations

from .models import CaptureKind

KIND_ALIASES: dict[str, CaptureKind] = {
    "Console Warning": CaptureKind.LOGGED_WARNING,
    "warning": CaptureKind.LOGGED_WARNING,
    "warn": CaptureKind.LOGGED_WARNING,
    "Console Error": CaptureKind.LOGGED_ERROR,
    "error": CaptureKind.LOGGED_ERROR,
    "Vue Error": CaptureKind.FRAMEWORK_ERROR,
    "framework": CaptureKind.FRAMEWORK_ERROR,
    "Runtime Error": CaptureKind.UNCAUGHT_EXCEPTION,
    "uncaught": CaptureKind.UNCAUGHT_EXCEPTION,
    "Promise Rejection": CaptureKind.UNHANDLED_REJECTION,
    "rejection": CaptureKind.UNHANDLED_REJECTION,
    "Resource Error": CaptureKind.RESOURCE_LOAD_ERROR,
    "resource": CaptureKind.RESOURCE_LOAD_ERROR,
    "Fetch Error": CaptureKind.NETWORK_FETCH_ERROR,
    "fetch": CaptureKind.NETWORK_FETCH_ERROR,
    "XHR Error": CaptureKind.NETWORK_TRANSPORT_ERROR,
    "transport": CaptureKind.NETWORK_TRANSPORT_ERROR,
}


def resolve_kind(raw: str) -> CaptureKind:
    """Resolve a raw kind label to a canonical CaptureKind.

    Accepts canonical values (e.g. "logged-error"), enum names
    (e.g. "LOGGED_ERROR"), and legacy labels (e.g. "Console Error").
    Raises ValueError for unknown kinds.
    """
    try:
        return CaptureKind(raw)
    except ValueError:
        pass
    if raw in KIND_ALIASES:
        return KIND_ALIASES[raw]
    name = raw.strip().upper().replace("-", "_").replace(" ", "_")
    if name in CaptureKind.__members__:
        return CaptureKind[name]
    raise ValueError(f"Unknown capture kind: {raw!r}")
