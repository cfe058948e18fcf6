"""Domain models for capture_core."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

from .errors import ValidationError


def _size_of(payload: Any) -> Optional[int]:
    try:
        return len(payload)
    except TypeError:
        return None


class CaptureKind(str, Enum):
    LOGGED_WARNING = "logged-warning"
    LOGGED_ERROR = "logged-error"
    FRAMEWORK_ERROR = "framework-error"
    UNCAUGHT_EXCEPTION = "uncaught-exception"
    UNHANDLED_REJECTION = "unhandled-rejection"
    RESOURCE_LOAD_ERROR = "resource-load-error"
    NETWORK_FETCH_ERROR = "network-fetch-error"
    NETWORK_TRANSPORT_ERROR = "network-transport-error"


@dataclass(frozen=True)
class CapturedEvent:
    """One detected failure, normalized for deduplication and dispatch.

    ``payload`` is kept in the order the adapter supplied it. Text
    rendering goes through the formatter and only happens when a consumer
    asks for it (``str(event)`` or ``to_dict()``).
    """

    kind: CaptureKind
    payload: tuple[Any, ...]
    timestamp: float = field(default_factory=time.time)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, CaptureKind):
            # Imported here: aliases depends on this module.
            from .aliases import resolve_kind

            try:
                kind = resolve_kind(str(self.kind))
            except ValueError as exc:
                raise ValidationError(
                    str(exc), kind=self.kind, payload_size=_size_of(self.payload)
                ) from exc
            object.__setattr__(self, "kind", kind)
        if isinstance(self.payload, (str, bytes)) or not isinstance(
            self.payload, (list, tuple)
        ):
            raise ValidationError(
                "CapturedEvent payload must be a sequence of values",
                kind=self.kind.value,
            )
        if not self.payload:
            raise ValidationError(
                "CapturedEvent payload cannot be empty", kind=self.kind.value, payload_size=0
            )
        object.__setattr__(self, "payload", tuple(self.payload))

    @classmethod
    def of(cls, kind: Union[CaptureKind, str], *payload: Any) -> CapturedEvent:
        """Build an event stamped with the current time."""
        return cls(kind=kind, payload=payload)

    @property
    def message(self) -> str:
        from .formatting import formatted_messages

        return formatted_messages(self.payload)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"
