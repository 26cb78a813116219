"""Minimal strict schemas for YAML settings validation."""

from __future__ import annotations

from infrascan.common.constants import LOG_LEVELS
from infrascan.common.errors import ConfigError


def _assert_mapping(obj: object, ctx: str) -> dict:
    if not isinstance(obj, dict):
        raise ConfigError(f"{ctx} must be a mapping")
    return obj


def _assert_required_keys(obj: dict, required: set[str], ctx: str) -> None:
    missing = required - set(obj)
    if missing:
        missing_str = ", ".join(sorted(missing))
        raise ConfigError(f"Missing keys in {ctx}: {missing_str}")


def _assert_no_unknown_keys(obj: dict, known: set[str], ctx: str, allow_unknown: bool) -> None:
    if allow_unknown:
        return
    unknown = set(obj) - known
    if unknown:
        unknown_str = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown keys in {ctx}: {unknown_str}")


def _assert_positive(value: object, ctx: str, *, integral: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{ctx} must be a number")
    if integral and not isinstance(value, int):
        raise ConfigError(f"{ctx} must be an integer")
    if value <= 0:
        raise ConfigError(f"{ctx} must be positive")


def _check_section(cfg: dict, name: str, keys: set[str], allow_unknown: bool) -> dict:
    section = _assert_mapping(cfg[name], name)
    _assert_required_keys(section, keys, name)
    _assert_no_unknown_keys(section, keys, name, allow_unknown)
    return section


def validate_settings(cfg: object, *, allow_unknown: bool = False) -> dict:
    cfg = _assert_mapping(cfg, "settings")
    top = {"overpass", "request", "logging"}
    _assert_required_keys(cfg, top, "settings")
    _assert_no_unknown_keys(cfg, top, "settings", allow_unknown)

    overpass = _check_section(
        cfg,
        "overpass",
        {"endpoint", "query_timeout_seconds", "http_timeout", "retry", "max_workers"},
        allow_unknown,
    )
    if not isinstance(overpass["endpoint"], str) or not overpass["endpoint"].startswith(("http://", "https://")):
        raise ConfigError("overpass.endpoint must be an http(s) URL")
    _assert_positive(overpass["query_timeout_seconds"], "overpass.query_timeout_seconds", integral=True)

    http_timeout = _assert_mapping(overpass["http_timeout"], "overpass.http_timeout")
    _assert_required_keys(http_timeout, {"connect", "read"}, "overpass.http_timeout")
    _assert_no_unknown_keys(http_timeout, {"connect", "read"}, "overpass.http_timeout", allow_unknown)
    _assert_positive(http_timeout["connect"], "overpass.http_timeout.connect")
    _assert_positive(http_timeout["read"], "overpass.http_timeout.read")

    retry = _assert_mapping(overpass["retry"], "overpass.retry")
    _assert_required_keys(retry, {"max_attempts"}, "overpass.retry")
    _assert_no_unknown_keys(retry, {"max_attempts"}, "overpass.retry", allow_unknown)
    _assert_positive(retry["max_attempts"], "overpass.retry.max_attempts", integral=True)

    if overpass["max_workers"] is not None:
        _assert_positive(overpass["max_workers"], "overpass.max_workers", integral=True)

    request = _check_section(cfg, "request", {"default_radius_m"}, allow_unknown)
    _assert_positive(request["default_radius_m"], "request.default_radius_m")

    logging_cfg = _check_section(cfg, "logging", {"level"}, allow_unknown)
    if str(logging_cfg["level"]).upper() not in LOG_LEVELS:
        raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")

    return cfg
