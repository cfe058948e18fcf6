"""Centralized configuration with validation and defaults.

All environment variables and config files are resolved here.
Engines and adapters should use CaptureConfig instead of reading
os.environ directly.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import yaml

from .dedup import DEFAULT_TTL_SECONDS
from .errors import ConfigError

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


def _validate_level(value: object, key: str, source: str) -> None:
    """Raise ConfigError if *value* is not a known logging level name."""
    if not isinstance(value, str) or not isinstance(
        logging.getLevelName(value.upper()), int
    ):
        raise ConfigError(
            f"{key} is not a valid logging level name: {value!r}", key=key, source=source
        )


@dataclass(frozen=True)
class CaptureConfig:
    """Validated configuration for the capture engine."""

    # Deduplication
    dedup_ttl_seconds: float = DEFAULT_TTL_SECONDS

    # Default sink (used when no observer is subscribed)
    sink_level: str = "INFO"

    # Adapters
    log_level: str = "WARNING"
    silent: bool = False

    @property
    def sink_levelno(self) -> int:
        return logging.getLevelName(self.sink_level.upper())

    @property
    def log_levelno(self) -> int:
        return logging.getLevelName(self.log_level.upper())

    @classmethod
    def from_env(cls) -> CaptureConfig:
        """Load config from environment variables with validation.

        Environment variables override the dataclass defaults.
        """
        defaults = cls()
        try:
            ttl = float(
                os.environ.get("CAPTURE_DEDUP_TTL", str(defaults.dedup_ttl_seconds))
            )
        except ValueError as exc:
            raise ConfigError(
                f"CAPTURE_DEDUP_TTL must be a number: {exc}",
                key="CAPTURE_DEDUP_TTL",
                source="environment",
            ) from exc

        config = cls(
            dedup_ttl_seconds=ttl,
            sink_level=os.environ.get("CAPTURE_SINK_LEVEL", defaults.sink_level),
            log_level=os.environ.get("CAPTURE_LOG_LEVEL", defaults.log_level),
            silent=_parse_bool(os.environ.get("CAPTURE_SILENT", "")),
        )
        config.validate("environment")
        return config

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> CaptureConfig:
        """Load config from a YAML mapping. Missing keys keep their defaults."""
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{path} must contain a mapping", source=str(path))

        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(str(key) for key in set(raw) - known)
        if unknown:
            raise ConfigError(
                f"Unknown config keys: {', '.join(unknown)}",
                key=unknown[0],
                source=str(path),
            )

        config = cls(**raw)
        config.validate(str(path))
        return config

    def validate(self, source: str = "config") -> None:
        """Raise ConfigError if values are missing or malformed.

        ``source`` names where the values came from, for the error report.
        """
        ttl = self.dedup_ttl_seconds
        if isinstance(ttl, bool) or not isinstance(ttl, (int, float)) or ttl <= 0:
            raise ConfigError(
                f"dedup_ttl_seconds must be a positive number, got {ttl!r}",
                key="dedup_ttl_seconds",
                source=source,
            )
        _validate_level(self.sink_level, "sink_level", source)
        _validate_level(self.log_level, "log_level", source)
