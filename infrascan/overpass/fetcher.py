"""Single-category Overpass fetch returning a typed outcome."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from infrascan.common.constants import ELEMENT_TYPES
from infrascan.common.http import HttpClient, HttpRequestError, InvalidPayloadError, TimeoutConfig
from infrascan.common.logging import log_event
from infrascan.common.models import CategoryOutcome, Element, Failure, LatLon, Success

LOGGER = logging.getLogger(__name__)


def _coerce_float(value: Any, ctx: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidPayloadError(f"{ctx} is not a number: {value!r}")
    return float(value)


def _parse_geometry(raw: Any, ctx: str) -> tuple[LatLon, ...] | None:
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise InvalidPayloadError(f"{ctx}.geometry is not a list")
    vertices = []
    for idx, point in enumerate(raw):
        if not isinstance(point, dict):
            raise InvalidPayloadError(f"{ctx}.geometry[{idx}] is not an object")
        vertices.append(
            LatLon(
                _coerce_float(point.get("lat"), f"{ctx}.geometry[{idx}].lat"),
                _coerce_float(point.get("lon"), f"{ctx}.geometry[{idx}].lon"),
            )
        )
    return tuple(vertices)


def _parse_element(raw: Any, idx: int) -> Element:
    ctx = f"elements[{idx}]"
    if not isinstance(raw, dict):
        raise InvalidPayloadError(f"{ctx} is not an object")
    element_type = raw.get("type")
    if element_type not in ELEMENT_TYPES:
        raise InvalidPayloadError(f"{ctx} has unsupported type: {element_type!r}")

    tags = raw.get("tags") or {}
    if not isinstance(tags, dict):
        raise InvalidPayloadError(f"{ctx}.tags is not an object")

    lat = raw.get("lat")
    lon = raw.get("lon")
    nodes = raw.get("nodes") or []
    if not isinstance(nodes, list):
        raise InvalidPayloadError(f"{ctx}.nodes is not a list")
    if not all(isinstance(ref, int) and not isinstance(ref, bool) for ref in nodes):
        raise InvalidPayloadError(f"{ctx}.nodes holds a non-integer reference")
    element_id = raw.get("id")
    if element_id is not None and (isinstance(element_id, bool) or not isinstance(element_id, int)):
        raise InvalidPayloadError(f"{ctx}.id is not an integer: {element_id!r}")

    return Element(
        type=element_type,
        id=element_id,
        tags={str(key): str(value) for key, value in tags.items()},
        lat=_coerce_float(lat, f"{ctx}.lat") if lat is not None else None,
        lon=_coerce_float(lon, f"{ctx}.lon") if lon is not None else None,
        nodes=tuple(nodes),
        geometry=_parse_geometry(raw.get("geometry"), ctx),
    )


def _resolve_way_geometry(elements: list[Element]) -> list[Element]:
    positions = {
        element.id: LatLon(element.lat, element.lon)
        for element in elements
        if element.type == "node" and element.id is not None and element.lat is not None and element.lon is not None
    }
    resolved = []
    for element in elements:
        if element.type == "way" and element.geometry is None and element.nodes:
            if all(ref in positions for ref in element.nodes):
                element = Element(
                    type=element.type,
                    id=element.id,
                    tags=element.tags,
                    nodes=element.nodes,
                    geometry=tuple(positions[ref] for ref in element.nodes),
                )
        resolved.append(element)
    return resolved


def parse_elements(payload: Any) -> tuple[Element, ...]:
    """Parse an Overpass JSON body into elements.

    Ways without inline geometry get it from the skeleton nodes that the
    recursion step of the query returns alongside them.
    """
    if not isinstance(payload, dict):
        raise InvalidPayloadError("Payload is not a JSON object")
    raw_elements = payload.get("elements")
    if not isinstance(raw_elements, list):
        raise InvalidPayloadError("Payload has no elements list")
    elements = [_parse_element(raw, idx) for idx, raw in enumerate(raw_elements)]
    return tuple(_resolve_way_geometry(elements))


def fetch_category(
    category: str,
    query: str,
    *,
    client: HttpClient,
    endpoint: str,
    timeout: TimeoutConfig | None = None,
    logger: logging.Logger | None = None,
    request_id: str | None = None,
) -> CategoryOutcome:
    logger = logger or LOGGER
    started = time.monotonic()
    try:
        payload = client.post_form_json(endpoint, data={"data": query}, timeout=timeout)
        outcome: CategoryOutcome = Success(parse_elements(payload))
        error_code = None
    except InvalidPayloadError as exc:
        # A parse failure has no failing transport status to report.
        outcome = Failure(f"Error parsing data: {exc}")
        error_code = exc.error_code
    except HttpRequestError as exc:
        status = exc.status_code if exc.status_code is not None else exc
        outcome = Failure(f"Error fetching data: {status}", exc.status_code)
        error_code = exc.error_code
    except requests.RequestException as exc:
        outcome = Failure(f"Error fetching data: {exc}")
        error_code = "TRANSPORT_ERROR"

    duration_ms = int((time.monotonic() - started) * 1000)
    if isinstance(outcome, Success):
        log_event(
            logger,
            f"fetched {category}",
            level=logging.DEBUG,
            request_id=request_id,
            stage="fetch",
            category=category,
            event="CATEGORY_OK",
            status="ok",
            duration_ms=duration_ms,
            elements=len(outcome.elements),
        )
    else:
        log_event(
            logger,
            f"Error fetching data for {category}: {outcome.reason}",
            level=logging.WARNING,
            request_id=request_id,
            stage="fetch",
            category=category,
            event="CATEGORY_FAIL",
            status="error",
            status_code=outcome.status_code,
            duration_ms=duration_ms,
            error_code=error_code,
        )
    return outcome
