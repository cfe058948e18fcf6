"""Render arbitrary failure payloads as readable text.

Pure functions, no shared state. Used by sinks and observers that need a
textual rendering of a captured event; the dispatcher never calls these.
"""

from __future__ import annotations

import dataclasses
import json
import traceback
from collections.abc import Mapping
from typing import Any

NO_MESSAGE = "(no message)"
NO_STACK = "(no stack trace)"


def formatted_messages(value: Any) -> str:
    """Format a payload element, or a list/tuple of them, one per line."""
    if isinstance(value, (list, tuple)):
        return "\n".join(format_single(item) for item in value)
    return format_single(value)


def format_single(value: Any) -> str:
    """Format one payload element. Never raises."""
    try:
        if _is_error_like(value):
            message, stack = _error_parts(value)
            return f"Message:{message or NO_MESSAGE}\nStack:{stack or NO_STACK}"

        if _is_structured(value):
            try:
                return json.dumps(value, indent=2, default=to_jsonable)
            except (TypeError, ValueError, RecursionError):
                return str(value)

        return str(value)
    except Exception as exc:
        return f"Error while formatting message: {exc}"


def _is_error_like(value: Any) -> bool:
    if isinstance(value, BaseException):
        return True
    return hasattr(value, "message") and hasattr(value, "stack")


def _error_parts(value: Any) -> tuple[str, str]:
    if isinstance(value, BaseException):
        message = str(value)
        if value.__traceback__ is None:
            return message, ""
        stack = "".join(
            traceback.format_exception(type(value), value, value.__traceback__)
        )
        return message, stack.rstrip("\n")
    return value.message, value.stack


def _is_structured(value: Any) -> bool:
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return True
    if isinstance(value, type) or callable(value):
        return False
    return dataclasses.is_dataclass(value) or hasattr(value, "__dict__")


def to_jsonable(value: Any) -> Any:
    """``json.dumps`` default hook: reduce an object to its own fields.

    Dataclasses become dicts of their fields, plain objects their
    ``vars()``, sets a sorted list, exceptions their type and message.
    Raises TypeError for anything else, as ``json`` expects.
    """
    if isinstance(value, BaseException):
        return {"__error__": type(value).__name__, "message": str(value)}
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, (set, frozenset)):
        try:
            return sorted(value)
        except TypeError:
            return sorted(value, key=repr)
    if not isinstance(value, type) and not callable(value) and hasattr(value, "__dict__"):
        return vars(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
