"""Concurrent per-category fan-out with fail-soft semantics."""

from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Mapping

from infrascan.common.config_loader import Settings, load_settings
from infrascan.common.http import HttpClient
from infrascan.common.logging import log_event
from infrascan.common.models import CategoryOutcome, Failure, InfrastructureSnapshot, Location, Success, validate_radius
from infrascan.overpass.assemble import assemble
from infrascan.overpass.catalog import QUERY_CATALOG, CategoryQuery, render_catalog, validate_catalog
from infrascan.overpass.fetcher import fetch_category

LOGGER = logging.getLogger(__name__)


def run_all(
    catalog: Mapping[str, CategoryQuery],
    location: Location,
    radius: float,
    *,
    settings: Settings | None = None,
    http_client: HttpClient | None = None,
    logger: logging.Logger | None = None,
    request_id: str | None = None,
) -> dict[str, CategoryOutcome]:
    """Fetch every catalog category concurrently and wait for all to settle.

    The returned map has exactly one outcome per catalog category. A failing
    category becomes a ``Failure`` and never affects its siblings.
    """
    validate_catalog(catalog)
    radius = validate_radius(radius)
    settings = settings or load_settings()
    logger = logger or LOGGER

    queries = render_catalog(
        catalog,
        location.latitude,
        location.longitude,
        radius,
        timeout_seconds=settings.query_timeout_seconds,
    )

    log_event(
        logger,
        f"dispatching {len(queries)} categories",
        request_id=request_id,
        stage="fanout",
        event="FANOUT_START",
        status="ok",
    )
    started = time.monotonic()

    max_workers = settings.max_workers or len(queries)
    owns_client = http_client is None
    client = http_client or HttpClient(timeout=settings.http_timeout, retry=settings.retry, pool_maxsize=max_workers)
    try:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="overpass") as executor:
            futures: dict[str, Future] = {
                category: executor.submit(
                    fetch_category,
                    category,
                    query,
                    client=client,
                    endpoint=settings.endpoint,
                    timeout=settings.http_timeout,
                    logger=logger,
                    request_id=request_id,
                )
                for category, query in queries.items()
            }
            wait(futures.values())
    finally:
        if owns_client:
            client.close()

    outcomes: dict[str, CategoryOutcome] = {}
    for category, future in futures.items():
        try:
            outcomes[category] = future.result()
        except Exception as exc:
            logger.exception("unexpected failure for category %s", category, extra={"category": category})
            outcomes[category] = Failure(f"Error fetching data: {exc}")

    failed = sum(1 for outcome in outcomes.values() if not isinstance(outcome, Success))
    log_event(
        logger,
        f"fan-out settled: {len(outcomes) - failed} ok, {failed} failed",
        request_id=request_id,
        stage="fanout",
        event="FANOUT_END",
        status="ok" if failed == 0 else "partial",
        duration_ms=int((time.monotonic() - started) * 1000),
    )
    return outcomes


def collect_infrastructure(
    location: Location,
    radius: float | None = None,
    *,
    catalog: Mapping[str, CategoryQuery] = QUERY_CATALOG,
    settings: Settings | None = None,
    http_client: HttpClient | None = None,
    logger: logging.Logger | None = None,
    request_id: str | None = None,
) -> InfrastructureSnapshot:
    """Run the full fan-out and return an assembled snapshot."""
    settings = settings or load_settings()
    if radius is None:
        radius = settings.default_radius_m
    outcomes = run_all(
        catalog,
        location,
        radius,
        settings=settings,
        http_client=http_client,
        logger=logger,
        request_id=request_id,
    )
    return assemble(location, radius, outcomes)
