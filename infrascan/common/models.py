"""Data models shared by the fetch, summarise and assemble stages."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, NamedTuple, Union

from infrascan.common.constants import ELEMENT_TYPES, OVERPASS_SOURCE_NAME
from infrascan.common.errors import InputError


class LatLon(NamedTuple):
    lat: float
    lon: float


@dataclass(frozen=True)
class Location:
    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.latitude) or not -90 <= self.latitude <= 90:
            raise InputError(f"Latitude out of range: {self.latitude}")
        if not math.isfinite(self.longitude) or not -180 <= self.longitude <= 180:
            raise InputError(f"Longitude out of range: {self.longitude}")


def validate_radius(radius: float) -> float:
    value = float(radius)
    if not math.isfinite(value) or value <= 0:
        raise InputError(f"Search radius must be a positive number of metres, got {radius!r}")
    return value


@dataclass(frozen=True)
class Element:
    """One OSM feature as returned by the provider."""

    type: str
    id: int | None = None
    tags: Mapping[str, str] = field(default_factory=dict)
    lat: float | None = None
    lon: float | None = None
    nodes: tuple[int, ...] = ()
    geometry: tuple[LatLon, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type, "id": self.id}
        if self.tags:
            out["tags"] = dict(self.tags)
        if self.lat is not None and self.lon is not None:
            out["lat"] = self.lat
            out["lon"] = self.lon
        if self.nodes:
            out["nodes"] = list(self.nodes)
        if self.geometry is not None:
            out["geometry"] = [{"lat": pt.lat, "lon": pt.lon} for pt in self.geometry]
        return out


@dataclass(frozen=True)
class Success:
    elements: tuple[Element, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"elements": [element.to_dict() for element in self.elements]}


@dataclass(frozen=True)
class Failure:
    reason: str
    status_code: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.reason, "status": self.status_code}


CategoryOutcome = Union[Success, Failure]


@dataclass(frozen=True)
class InfrastructureSnapshot:
    """Per-request aggregate of raw outcomes and their one-line summaries."""

    latitude: float
    longitude: float
    radius: float
    raw: Mapping[str, CategoryOutcome]
    summary: Mapping[str, str]
    source: str = OVERPASS_SOURCE_NAME

    def __post_init__(self) -> None:
        # Frozen dataclass: assign read-only views through object.__setattr__.
        object.__setattr__(self, "raw", MappingProxyType(dict(self.raw)))
        object.__setattr__(self, "summary", MappingProxyType(dict(self.summary)))

    @property
    def failed_categories(self) -> list[str]:
        return [category for category, outcome in self.raw.items() if isinstance(outcome, Failure)]

    @property
    def all_failed(self) -> bool:
        return bool(self.raw) and len(self.failed_categories) == len(self.raw)

    def narrative_payload(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "radius": self.radius,
            "summary": dict(self.summary),
        }

    def to_dict(self) -> dict[str, Any]:
        payload = self.narrative_payload()
        payload["raw"] = {category: outcome.to_dict() for category, outcome in self.raw.items()}
        return payload
