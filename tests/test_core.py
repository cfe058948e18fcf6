"""Unit tests for capture_core models, aliases, config and errors."""

import asyncio
import logging

import pytest

from capture_core import (
    CaptureConfig,
    CapturedEvent,
    CaptureKind,
    ConfigError,
    ValidationError,
    resolve_kind,
    set_error_hook,
)
from capture_core.adapters.timers import AsyncioTimerScheduler


class TestResolveKind:
    def test_canonical(self):
        assert resolve_kind("logged-error") == CaptureKind.LOGGED_ERROR

    def test_legacy_label(self):
        assert resolve_kind("Promise Rejection") == CaptureKind.UNHANDLED_REJECTION
        assert resolve_kind("XHR Error") == CaptureKind.NETWORK_TRANSPORT_ERROR

    def test_enum_name(self):
        assert resolve_kind("RESOURCE_LOAD_ERROR") == CaptureKind.RESOURCE_LOAD_ERROR

    def test_all_kinds(self):
        for kind in CaptureKind:
            assert resolve_kind(kind.value) == kind

    def test_unknown(self):
        with pytest.raises(ValueError):
            resolve_kind("Nonexistent")


class TestCapturedEvent:
    def test_of_builds_tuple_payload(self):
        event = CapturedEvent.of(CaptureKind.LOGGED_WARNING, "a", 1)
        assert event.payload == ("a", 1)
        assert event.timestamp > 0

    def test_list_payload_becomes_tuple(self):
        event = CapturedEvent(kind=CaptureKind.LOGGED_ERROR, payload=["a"])
        assert event.payload == ("a",)

    def test_string_kind_is_resolved(self):
        event = CapturedEvent.of("Console Error", "boom")
        assert event.kind is CaptureKind.LOGGED_ERROR

    def test_unknown_kind(self):
        with pytest.raises(ValidationError):
            CapturedEvent.of("Disk Error", "boom")

    def test_empty_payload(self):
        with pytest.raises(ValidationError):
            CapturedEvent(kind=CaptureKind.LOGGED_ERROR, payload=())

    def test_string_payload_rejected(self):
        with pytest.raises(ValidationError):
            CapturedEvent(kind=CaptureKind.LOGGED_ERROR, payload="boom")

    def test_str_renders_lazily(self):
        event = CapturedEvent.of(CaptureKind.FRAMEWORK_ERROR, "render failed", "setup hook")
        assert str(event) == "framework-error: render failed\nsetup hook"

    def test_to_dict(self):
        event = CapturedEvent(
            kind=CaptureKind.NETWORK_FETCH_ERROR,
            payload=("Fetch Error: 404", "https://example.test/a"),
            timestamp=12.5,
        )
        assert event.to_dict() == {
            "kind": "network-fetch-error",
            "message": "Fetch Error: 404\nhttps://example.test/a",
            "timestamp": 12.5,
        }


class TestConfig:
    def test_defaults(self):
        cfg = CaptureConfig()
        assert cfg.dedup_ttl_seconds == 3.0
        assert cfg.sink_level == "INFO"
        assert cfg.silent is False
        cfg.validate()

    def test_validate_bad_ttl(self):
        with pytest.raises(ConfigError):
            CaptureConfig(dedup_ttl_seconds=0).validate()

    def test_validate_bad_level(self):
        with pytest.raises(ConfigError):
            CaptureConfig(sink_level="LOUD").validate()

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CAPTURE_DEDUP_TTL", "1.5")
        monkeypatch.setenv("CAPTURE_SINK_LEVEL", "warning")
        monkeypatch.setenv("CAPTURE_SILENT", "yes")
        cfg = CaptureConfig.from_env()
        assert cfg.dedup_ttl_seconds == 1.5
        assert cfg.sink_levelno == 30
        assert cfg.silent is True

    def test_from_env_bad_ttl(self, monkeypatch):
        monkeypatch.setenv("CAPTURE_DEDUP_TTL", "soon")
        with pytest.raises(ConfigError):
            CaptureConfig.from_env()

    def test_from_file(self, tmp_path):
        path = tmp_path / "capture.yaml"
        path.write_text("dedup_ttl_seconds: 5\nlog_level: ERROR\n")
        cfg = CaptureConfig.from_file(path)
        assert cfg.dedup_ttl_seconds == 5
        assert cfg.log_levelno == 40
        assert cfg.sink_level == "INFO"

    def test_from_file_unknown_key(self, tmp_path):
        path = tmp_path / "capture.yaml"
        path.write_text("ttl: 5\n")
        with pytest.raises(ConfigError):
            CaptureConfig.from_file(path)

    def test_from_file_numeric_level(self, tmp_path):
        path = tmp_path / "capture.yaml"
        path.write_text("sink_level: 20\n")
        with pytest.raises(ConfigError):
            CaptureConfig.from_file(path)

    def test_validate_non_string_level(self):
        with pytest.raises(ConfigError):
            CaptureConfig(log_level=None).validate()

    def test_validate_bool_ttl(self):
        with pytest.raises(ConfigError):
            CaptureConfig(dedup_ttl_seconds=True).validate()

    def test_from_file_empty(self, tmp_path):
        path = tmp_path / "capture.yaml"
        path.write_text("")
        assert CaptureConfig.from_file(path) == CaptureConfig()


class TestErrorHook:
    def teardown_method(self):
        set_error_hook(None)

    def test_hook_receives_context(self):
        seen = []
        set_error_hook(lambda exc, ctx: seen.append(ctx))

        with pytest.raises(ConfigError):
            CaptureConfig(dedup_ttl_seconds=-1).validate()

        assert seen[0]["error_type"] == "ConfigError"

    def test_rejected_event_report_carries_kind_and_size(self):
        seen = []
        set_error_hook(lambda exc, report: seen.append(report))

        with pytest.raises(ValidationError):
            CapturedEvent(kind=CaptureKind.LOGGED_ERROR, payload=())

        assert seen[0]["kind"] == "logged-error"
        assert seen[0]["payload_size"] == 0
        assert seen[0]["reason"] == "CapturedEvent payload cannot be empty"

    def test_config_report_carries_key_and_source(self):
        seen = []
        set_error_hook(lambda exc, report: seen.append(report))

        with pytest.raises(ConfigError):
            CaptureConfig(sink_level="LOUD").validate("capture.yaml")

        assert seen[0]["key"] == "sink_level"
        assert seen[0]["source"] == "capture.yaml"

    def test_failing_hook_does_not_mask_error(self):
        def hook(exc, ctx):
            raise RuntimeError("hook crashed")

        set_error_hook(hook)
        with pytest.raises(ValidationError):
            CapturedEvent(kind=CaptureKind.LOGGED_ERROR, payload=())


def test_asyncio_scheduler_fires_on_loop():
    fired = []

    async def _run():
        scheduler = AsyncioTimerScheduler()
        scheduler.schedule(0.01, lambda: fired.append("a"))
        cancelled = scheduler.schedule(0.01, lambda: fired.append("b"))
        cancelled.cancel()
        await asyncio.sleep(0.05)

    asyncio.run(_run())
    assert fired == ["a"]


class TestErrorLogging:
    def test_rejected_event_logged_as_warning(self, caplog):
        caplog.set_level(logging.WARNING, logger="capture_core.errors")

        with pytest.raises(ValidationError):
            CapturedEvent.of("Disk Error", "boom", 2)

        record = caplog.records[-1]
        assert record.levelno == logging.WARNING
        assert record.getMessage() == (
            "Rejected captured event (Disk Error, 2 payload items): "
            "Unknown capture kind: 'Disk Error'"
        )

    def test_config_error_logged_with_location(self, caplog, tmp_path):
        caplog.set_level(logging.ERROR, logger="capture_core.errors")
        path = tmp_path / "capture.yaml"
        path.write_text("dedup_ttl_seconds: -2\n")

        with pytest.raises(ConfigError):
            CaptureConfig.from_file(path)

        record = caplog.records[-1]
        assert record.levelno == logging.ERROR
        assert f"({path}:dedup_ttl_seconds)" in record.getMessage()
