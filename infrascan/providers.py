"""Provider-level aggregation of raw data with fail-soft semantics."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import Any, Callable, Mapping

from infrascan.common.config_loader import Settings, load_settings
from infrascan.common.http import HttpClient
from infrascan.common.logging import log_event
from infrascan.common.models import Location, validate_radius
from infrascan.overpass.orchestrator import collect_infrastructure

LOGGER = logging.getLogger(__name__)

Provider = Callable[[Location, float], dict]


def _infrastructure(
    location: Location,
    radius: float,
    *,
    settings: Settings,
    http_client: HttpClient | None,
    logger: logging.Logger,
    request_id: str | None,
) -> dict:
    snapshot = collect_infrastructure(
        location,
        radius,
        settings=settings,
        http_client=http_client,
        logger=logger,
        request_id=request_id,
    )
    return snapshot.to_dict()


def default_providers(
    *,
    settings: Settings,
    http_client: HttpClient | None = None,
    logger: logging.Logger | None = None,
    request_id: str | None = None,
) -> dict[str, Provider]:
    return {
        "infrastructure": partial(
            _infrastructure,
            settings=settings,
            http_client=http_client,
            logger=logger or LOGGER,
            request_id=request_id,
        ),
    }


def collect_raw_data(
    location: Location,
    radius: float | None = None,
    *,
    providers: Mapping[str, Provider] | None = None,
    settings: Settings | None = None,
    http_client: HttpClient | None = None,
    logger: logging.Logger | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    """Run every provider concurrently; a failing provider becomes ``{"error": ...}``."""
    settings = settings or load_settings()
    logger = logger or LOGGER
    radius = validate_radius(settings.default_radius_m if radius is None else radius)
    if providers is None:
        providers = default_providers(settings=settings, http_client=http_client, logger=logger, request_id=request_id)

    with ThreadPoolExecutor(max_workers=max(len(providers), 1), thread_name_prefix="provider") as executor:
        futures = {name: executor.submit(provider, location, radius) for name, provider in providers.items()}

    results: dict[str, Any] = {}
    for name, future in futures.items():
        try:
            results[name] = future.result()
        except Exception as exc:
            log_event(
                logger,
                f"provider {name} failed: {exc}",
                level=logging.WARNING,
                request_id=request_id,
                stage="providers",
                event="PROVIDER_FAIL",
                status="error",
                error_code=getattr(exc, "error_code", "UNEXPECTED_ERROR"),
            )
            results[name] = {"error": f"Server error: {exc}"}
    return results
