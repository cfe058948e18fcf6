"""Failure-source adapters.

Each adapter detects one kind of failure, builds a CapturedEvent and hands
it to ``engine.capture()``. Adapters take the engine explicitly and
register on the host's own extension points (logging handlers,
``sys.excepthook``, loop exception handlers, HTTP client event hooks).
Every ``install_*`` function returns a callable that undoes it.
"""

from __future__ import annotations

import functools
import inspect
import logging
import sys
import threading
import traceback
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Optional

from ..config import CaptureConfig
from ..models import CapturedEvent, CaptureKind

if TYPE_CHECKING:
    import asyncio

    from ..telemetry import CaptureEngine

logger = logging.getLogger(__name__)

_OWN_LOGGER_PREFIX = "capture_core"
SINK_LOGGER_NAME = "capture_core.telemetry"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

class CaptureLogHandler(logging.Handler):
    """Logging handler that forwards warnings and errors to the engine.

    Records from capture_core's own loggers are ignored so the engine's
    diagnostics never feed back into it.
    """

    def __init__(self, engine: CaptureEngine, level: int = logging.WARNING) -> None:
        super().__init__(level)
        self.engine = engine

    def emit(self, record: logging.LogRecord) -> None:
        if record.name == _OWN_LOGGER_PREFIX or record.name.startswith(
            _OWN_LOGGER_PREFIX + "."
        ):
            return
        try:
            payload: list[Any] = [record.getMessage()]
        except Exception:
            self.handleError(record)
            return
        if record.exc_info and record.exc_info[1] is not None:
            payload.append(record.exc_info[1])

        kind = (
            CaptureKind.LOGGED_ERROR
            if record.levelno >= logging.ERROR
            else CaptureKind.LOGGED_WARNING
        )
        self.engine.capture(
            CapturedEvent(kind=kind, payload=tuple(payload), timestamp=record.created)
        )


# ---------------------------------------------------------------------------
# Uncaught exceptions
# ---------------------------------------------------------------------------

def _origin(tb: Any) -> tuple[Optional[str], Optional[int]]:
    """Return (filename, lineno) of the innermost frame of a traceback."""
    if tb is None:
        return None, None
    frames = traceback.extract_tb(tb)
    if not frames:
        return None, None
    return frames[-1].filename, frames[-1].lineno


def install_excepthook(engine: CaptureEngine) -> Callable[[], None]:
    """Capture exceptions that reach ``sys.excepthook``, then chain to the previous hook."""
    previous = sys.excepthook

    def hook(exc_type, exc, tb) -> None:
        if not issubclass(exc_type, KeyboardInterrupt):
            filename, lineno = _origin(tb)
            engine.capture(
                CapturedEvent.of(
                    CaptureKind.UNCAUGHT_EXCEPTION, str(exc), filename, lineno, exc
                )
            )
        previous(exc_type, exc, tb)

    sys.excepthook = hook

    def uninstall() -> None:
        if sys.excepthook is hook:
            sys.excepthook = previous

    return uninstall


def install_thread_excepthook(engine: CaptureEngine) -> Callable[[], None]:
    """Capture exceptions that escape ``threading.Thread.run``."""
    previous = threading.excepthook

    def hook(args: threading.ExceptHookArgs) -> None:
        if args.exc_type is not SystemExit:
            filename, lineno = _origin(args.exc_traceback)
            thread_name = args.thread.name if args.thread is not None else None
            engine.capture(
                CapturedEvent.of(
                    CaptureKind.UNCAUGHT_EXCEPTION,
                    str(args.exc_value),
                    filename,
                    lineno,
                    args.exc_value,
                    thread_name,
                )
            )
        previous(args)

    threading.excepthook = hook

    def uninstall() -> None:
        if threading.excepthook is hook:
            threading.excepthook = previous

    return uninstall


def install_asyncio_handler(
    engine: CaptureEngine, loop: asyncio.AbstractEventLoop
) -> Callable[[], None]:
    """Capture failures the event loop reports as unhandled.

    Covers exceptions never retrieved from tasks and futures, and errors in
    loop callbacks. The previous handler (or the loop default) still runs.
    """
    previous = loop.get_exception_handler()

    def handler(loop: asyncio.AbstractEventLoop, context: dict[str, Any]) -> None:
        reason = context.get("exception") or context.get("message", "")
        engine.capture(CapturedEvent.of(CaptureKind.UNHANDLED_REJECTION, reason))
        if previous is not None:
            previous(loop, context)
        else:
            loop.default_exception_handler(context)

    loop.set_exception_handler(handler)

    def uninstall() -> None:
        if loop.get_exception_handler() is handler:
            loop.set_exception_handler(previous)

    return uninstall


# ---------------------------------------------------------------------------
# Framework and resource errors
# ---------------------------------------------------------------------------

def framework_error_handler(engine: CaptureEngine) -> Callable[..., None]:
    """Return a ``handler(err, info)`` for a framework's error-handler slot."""

    def handler(err: Any, info: Any = None) -> None:
        engine.capture(CapturedEvent.of(CaptureKind.FRAMEWORK_ERROR, err, info))

    return handler


def report_resource_error(
    engine: CaptureEngine,
    resource_type: str,
    url: Optional[str],
    descriptor: Any = None,
) -> None:
    """Report a resource (script, stylesheet, image, file) that failed to load.

    Ignored when ``url`` is empty: there is nothing to identify the resource.
    """
    if not url:
        return
    engine.capture(
        CapturedEvent.of(
            CaptureKind.RESOURCE_LOAD_ERROR,
            f"Resource load error: {resource_type}",
            descriptor if descriptor is not None else url,
        )
    )


# ---------------------------------------------------------------------------
# Network
# ---------------------------------------------------------------------------

def _safe_attr(obj: Any, name: str) -> Any:
    try:
        return getattr(obj, name, None)
    except Exception:
        # httpx raises RuntimeError for a response detached from its request
        return None


def _status_of(response: Any) -> Optional[int]:
    status = _safe_attr(response, "status_code")
    if status is None:
        status = _safe_attr(response, "status")
    return status if isinstance(status, int) else None


def _is_ok(response: Any) -> bool:
    ok = _safe_attr(response, "ok")
    if isinstance(ok, bool):
        return ok
    status = _status_of(response)
    return status is None or status < 400


def _url_of(response: Any) -> Optional[str]:
    url = _safe_attr(response, "url")
    return str(url) if url is not None else None


def _check_fetch_response(engine: CaptureEngine, response: Any) -> None:
    if not _is_ok(response):
        engine.capture(
            CapturedEvent.of(
                CaptureKind.NETWORK_FETCH_ERROR,
                f"Fetch Error: {_status_of(response)}",
                _url_of(response),
            )
        )


def _report_fetch_failure(engine: CaptureEngine, args: tuple, exc: Exception) -> None:
    engine.capture(
        CapturedEvent.of(CaptureKind.NETWORK_FETCH_ERROR, "Fetch Network Error", args, exc)
    )


def capture_fetch(engine: CaptureEngine, fetch: Callable[..., Any]) -> Callable[..., Any]:
    """Wrap a fetch callable (sync or async) so failed requests are captured.

    Non-OK responses are reported and returned unchanged; raised errors are
    reported and re-raised.
    """
    if inspect.iscoroutinefunction(fetch):

        @functools.wraps(fetch)
        async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                response = await fetch(*args, **kwargs)
            except Exception as exc:
                _report_fetch_failure(engine, args, exc)
                raise
            _check_fetch_response(engine, response)
            return response

        return async_wrapper

    @functools.wraps(fetch)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            response = fetch(*args, **kwargs)
        except Exception as exc:
            _report_fetch_failure(engine, args, exc)
            raise
        _check_fetch_response(engine, response)
        return response

    return wrapper


class TransportHooks:
    """Request/response lifecycle hooks for HTTP client transports.

    ``response`` matches both the ``requests`` response hook signature and
    a sync ``httpx`` event hook; ``aresponse`` is the async httpx variant.
    """

    def __init__(self, engine: CaptureEngine) -> None:
        self.engine = engine

    def response(self, response: Any, *args: Any, **kwargs: Any) -> None:
        status = _status_of(response)
        if status is None or status < 400:
            return
        self.engine.capture(
            CapturedEvent.of(
                CaptureKind.NETWORK_TRANSPORT_ERROR,
                f"HTTP Error: {status}",
                self.request_info(response),
            )
        )

    async def aresponse(self, response: Any) -> None:
        self.response(response)

    def error(self, request_info: Any, exc: BaseException) -> None:
        """Report a request that failed before any response arrived."""
        self.engine.capture(
            CapturedEvent.of(
                CaptureKind.NETWORK_TRANSPORT_ERROR,
                "Transport Network Error",
                request_info,
                exc,
            )
        )

    @staticmethod
    def request_info(response: Any) -> tuple[Optional[str], Optional[str]]:
        """Return (method, url) of the request that produced ``response``."""
        request = _safe_attr(response, "request")
        method = _safe_attr(request, "method")
        url = _safe_attr(request, "url") or _safe_attr(response, "url")
        return method, str(url) if url is not None else None

    def requests_hooks(self) -> dict[str, Callable[..., None]]:
        return {"response": self.response}

    def httpx_event_hooks(self, *, asynchronous: bool = False) -> dict[str, list]:
        return {"response": [self.aresponse if asynchronous else self.response]}


# ---------------------------------------------------------------------------
# One-call installation
# ---------------------------------------------------------------------------

def expose_sink(config: CaptureConfig) -> Callable[[], None]:
    """Make the default sink's records reach an output.

    Lowers the sink logger's level to ``config.sink_level`` when it is
    filtered out, and attaches a stderr handler when no handler would
    receive its records at all. Returns a callable that undoes both.
    """
    sink_logger = logging.getLogger(SINK_LOGGER_NAME)
    previous_level = sink_logger.level
    if sink_logger.getEffectiveLevel() > config.sink_levelno:
        sink_logger.setLevel(config.sink_levelno)

    added: Optional[logging.Handler] = None
    if not sink_logger.hasHandlers():
        added = logging.StreamHandler()
        added.setLevel(config.sink_levelno)
        sink_logger.addHandler(added)

    def undo() -> None:
        sink_logger.setLevel(previous_level)
        if added is not None:
            sink_logger.removeHandler(added)

    return undo


@dataclass
class Installation:
    """Process-level hooks wired by ``install()``."""

    log_handler: CaptureLogHandler
    _undo: list[Callable[[], None]] = field(default_factory=list)

    def uninstall(self) -> None:
        for undo in reversed(self._undo):
            undo()
        self._undo.clear()


def install(
    engine: CaptureEngine,
    config: Optional[CaptureConfig] = None,
    *,
    target_logger: Optional[logging.Logger] = None,
) -> Installation:
    """Wire the log handler and both excepthooks into ``engine``.

    Also makes the default sink visible (see ``expose_sink``) so captures
    are not lost while no observer is subscribed.

    The log handler goes on the root logger unless ``target_logger`` is
    given. Framework, resource and network adapters are wired by the
    application where those objects live.
    """
    config = config or engine.config
    target = target_logger if target_logger is not None else logging.getLogger()

    handler = CaptureLogHandler(engine, level=config.log_levelno)
    target.addHandler(handler)
    installation = Installation(log_handler=handler)
    installation._undo.append(lambda: target.removeHandler(handler))
    installation._undo.append(install_excepthook(engine))
    installation._undo.append(install_thread_excepthook(engine))
    installation._undo.append(expose_sink(config))

    if not config.silent:
        logger.info("Error capture started")
    return installation
