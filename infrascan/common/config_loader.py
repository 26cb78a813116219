"""Settings loading with built-in defaults and optional overlay."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from infrascan.common.constants import (
    DEFAULT_OVERPASS_ENDPOINT,
    DEFAULT_QUERY_TIMEOUT_SECONDS,
    DEFAULT_RADIUS_M,
)
from infrascan.common.errors import ConfigError
from infrascan.common.fs import read_yaml
from infrascan.common.http import RetryConfig, TimeoutConfig
from infrascan.common.schema import validate_settings

DEFAULT_SETTINGS: dict[str, Any] = {
    "overpass": {
        "endpoint": DEFAULT_OVERPASS_ENDPOINT,
        "query_timeout_seconds": DEFAULT_QUERY_TIMEOUT_SECONDS,
        "http_timeout": {"connect": 20.0, "read": 60.0},
        "retry": {"max_attempts": 1},
        "max_workers": None,
    },
    "request": {"default_radius_m": DEFAULT_RADIUS_M},
    "logging": {"level": "INFO"},
}


@dataclass(frozen=True)
class Settings:
    endpoint: str
    query_timeout_seconds: int
    http_timeout: TimeoutConfig
    retry: RetryConfig
    max_workers: int | None
    default_radius_m: float
    log_level: str

    @classmethod
    def from_dict(cls, cfg: dict) -> "Settings":
        overpass = cfg["overpass"]
        return cls(
            endpoint=overpass["endpoint"],
            query_timeout_seconds=int(overpass["query_timeout_seconds"]),
            http_timeout=TimeoutConfig(
                connect=float(overpass["http_timeout"]["connect"]),
                read=float(overpass["http_timeout"]["read"]),
            ),
            retry=RetryConfig(max_attempts=int(overpass["retry"]["max_attempts"])),
            max_workers=overpass["max_workers"],
            default_radius_m=float(cfg["request"]["default_radius_m"]),
            log_level=str(cfg["logging"]["level"]).upper(),
        )


def _deep_merge(base: Any, overlay: Any) -> Any:
    if isinstance(base, dict) and isinstance(overlay, dict):
        merged = dict(base)
        for key, value in overlay.items():
            if key in merged:
                merged[key] = _deep_merge(merged[key], value)
            else:
                merged[key] = value
        return merged
    return overlay


def _read_overlay(path: Path) -> dict:
    doc = read_yaml(path)
    if doc is None:
        return {}
    if not isinstance(doc, dict):
        raise ConfigError(f"Settings file must contain a mapping: {path}")
    return doc


def load_settings(
    config_path: Path | None = None,
    *,
    overlay_path: Path | None = None,
    allow_unknown: bool = False,
) -> Settings:
    cfg = copy.deepcopy(DEFAULT_SETTINGS)
    if config_path is not None:
        if not config_path.exists():
            raise ConfigError(f"Settings file not found: {config_path}")
        cfg = _deep_merge(cfg, _read_overlay(config_path))
    if overlay_path is not None and overlay_path.exists():
        cfg = _deep_merge(cfg, _read_overlay(overlay_path))
    return Settings.from_dict(validate_settings(cfg, allow_unknown=allow_unknown))
