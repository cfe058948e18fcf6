"""Host adapters: timer schedulers and failure-source hooks."""

from .sources import (
    CaptureLogHandler,
    Installation,
    TransportHooks,
    capture_fetch,
    expose_sink,
    framework_error_handler,
    install,
    install_asyncio_handler,
    install_excepthook,
    install_thread_excepthook,
    report_resource_error,
)
from .timers import AsyncioTimerScheduler, ThreadingTimerScheduler

__all__ = [
    "AsyncioTimerScheduler",
    "CaptureLogHandler",
    "Installation",
    "ThreadingTimerScheduler",
    "TransportHooks",
    "capture_fetch",
    "expose_sink",
    "framework_error_handler",
    "install",
    "install_asyncio_handler",
    "install_excepthook",
    "install_thread_excepthook",
    "report_resource_error",
]
