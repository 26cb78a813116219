from __future__ import annotations

import pytest
import requests

from infrascan.common.http import HttpRequestError, InvalidPayloadError, RetryableHttpError
from infrascan.common.models import Failure, LatLon, Success
from infrascan.overpass.fetcher import fetch_category, parse_elements


class FakeHttpClient:
    def __init__(self, payload=None, exc: Exception | None = None):
        self.payload = payload
        self.exc = exc
        self.calls: list[dict] = []

    def post_form_json(self, url, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.exc is not None:
            raise self.exc
        return self.payload


def _fetch(client: FakeHttpClient):
    return fetch_category("roads", "QUERY", client=client, endpoint="https://overpass.test/api/interpreter")


def test_parse_elements_reads_nodes_ways_and_geometry():
    payload = {
        "elements": [
            {"type": "node", "id": 1, "lat": 50.1, "lon": 4.2, "tags": {"amenity": "school"}},
            {
                "type": "way",
                "id": 2,
                "tags": {"amenity": "school"},
                "geometry": [{"lat": 1, "lon": 2}, {"lat": 3, "lon": 4}, {"lat": 5, "lon": 6}],
            },
            {"type": "relation", "id": 3},
        ]
    }
    elements = parse_elements(payload)
    assert [element.type for element in elements] == ["node", "way", "relation"]
    assert elements[0].lat == 50.1
    assert elements[1].geometry == (LatLon(1.0, 2.0), LatLon(3.0, 4.0), LatLon(5.0, 6.0))
    assert elements[2].tags == {}


def test_parse_elements_resolves_way_geometry_from_skeleton_nodes():
    payload = {
        "elements": [
            {"type": "way", "id": 10, "nodes": [1, 2, 3, 1], "tags": {"landuse": "grass"}},
            {"type": "way", "id": 11, "nodes": [1, 99]},
            {"type": "node", "id": 1, "lat": 0.0, "lon": 0.0},
            {"type": "node", "id": 2, "lat": 0.0, "lon": 1.0},
            {"type": "node", "id": 3, "lat": 1.0, "lon": 1.0},
        ]
    }
    elements = parse_elements(payload)
    assert len(elements) == 5
    assert elements[0].geometry == (LatLon(0.0, 0.0), LatLon(0.0, 1.0), LatLon(1.0, 1.0), LatLon(0.0, 0.0))
    assert elements[0].tags == {"landuse": "grass"}
    assert elements[1].geometry is None


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"remark": "runtime error"},
        {"elements": {}},
        {"elements": ["x"]},
        {"elements": [{"type": "area", "id": 1}]},
        {"elements": [{"type": "way", "geometry": [{"lat": "a", "lon": 1}]}]},
        {"elements": [{"type": "node", "tags": ["x"]}]},
        {"elements": [{"type": "way", "id": 1, "nodes": [[1, 2]]}]},
        {"elements": [{"type": "node", "id": {"a": 1}, "lat": 1.0, "lon": 2.0}]},
        {"elements": [{"type": "way", "id": "7", "nodes": [1]}]},
    ],
)
def test_parse_elements_rejects_malformed_payloads(payload):
    with pytest.raises(InvalidPayloadError):
        parse_elements(payload)


def test_fetch_category_success_posts_query_as_form_field():
    client = FakeHttpClient({"elements": [{"type": "way", "id": 1, "tags": {"highway": "primary"}}]})
    outcome = _fetch(client)

    assert isinstance(outcome, Success)
    assert len(outcome.elements) == 1
    assert client.calls[0]["url"] == "https://overpass.test/api/interpreter"
    assert client.calls[0]["data"] == {"data": "QUERY"}


def test_fetch_category_empty_elements_is_success():
    assert _fetch(FakeHttpClient({"elements": []})) == Success(())


@pytest.mark.parametrize(
    "exc, status",
    [
        (HttpRequestError("HTTP status: 400", status_code=400), 400),
        (RetryableHttpError("Retryable HTTP status: 504", status_code=504), 504),
    ],
)
def test_fetch_category_status_failure(exc, status):
    outcome = _fetch(FakeHttpClient(exc=exc))
    assert outcome == Failure(f"Error fetching data: {status}", status)


def test_fetch_category_transport_exception_becomes_failure():
    outcome = _fetch(FakeHttpClient(exc=requests.ConnectionError("connection refused")))
    assert isinstance(outcome, Failure)
    assert outcome.status_code is None
    assert outcome.reason == "Error fetching data: connection refused"


def test_fetch_category_malformed_body_becomes_parse_failure():
    outcome = _fetch(FakeHttpClient({"elements": "nope"}))
    assert isinstance(outcome, Failure)
    assert outcome.reason.startswith("Error parsing data:")


def test_fetch_category_invalid_json_becomes_parse_failure():
    outcome = _fetch(FakeHttpClient(exc=InvalidPayloadError("Invalid JSON payload", status_code=200)))
    assert outcome == Failure("Error parsing data: Invalid JSON payload")
    assert outcome.to_dict()["status"] is None


@pytest.mark.parametrize(
    "element",
    [
        {"type": "way", "id": 1, "nodes": [[1, 2]]},
        {"type": "node", "id": {"a": 1}, "lat": 1.0, "lon": 2.0},
    ],
)
def test_fetch_category_unhashable_references_become_parse_failure(element):
    outcome = _fetch(FakeHttpClient({"elements": [element]}))
    assert isinstance(outcome, Failure)
    assert outcome.reason.startswith("Error parsing data:")
    assert outcome.status_code is None
