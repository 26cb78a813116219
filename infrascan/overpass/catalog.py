"""Overpass QL query catalog keyed by infrastructure category."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from infrascan.common.constants import DEFAULT_QUERY_TIMEOUT_SECONDS, ELEMENT_TYPES
from infrascan.common.errors import ConfigError

NWR = ("node", "way", "relation")
WAY = ("way",)


@dataclass(frozen=True)
class TagFilter:
    key: str
    value: str | None = None

    def render(self) -> str:
        if self.value is None:
            return f'["{self.key}"]'
        return f'["{self.key}"="{self.value}"]'


@dataclass(frozen=True)
class CategoryQuery:
    element_types: tuple[str, ...]
    filters: tuple[TagFilter, ...]


def _query(element_types: tuple[str, ...], *filters: tuple[str, str | None]) -> CategoryQuery:
    return CategoryQuery(element_types, tuple(TagFilter(key, value) for key, value in filters))


QUERY_CATALOG: Mapping[str, CategoryQuery] = MappingProxyType(
    {
        "powerPlants": _query(NWR, ("power", "plant")),
        "schools": _query(NWR, ("amenity", "school")),
        "roads": _query(WAY, ("highway", None)),
        "buildings": _query(WAY, ("building", None)),
        "hospitals": _query(NWR, ("amenity", "hospital")),
        "bridges": _query(WAY, ("bridge", None)),
        "railways": _query(WAY, ("railway", None)),
        "airports": _query(NWR, ("aeroway", "aerodrome")),
        "waterways": _query(WAY, ("waterway", None)),
        "industrial": _query(NWR, ("landuse", "industrial")),
        "natural": _query(WAY, ("natural", None)),
        "emergency": _query(NWR, ("amenity", "fire_station"), ("amenity", "police")),
        "flood": _query(WAY, ("hazard", "flood")),
        "seismic": _query(WAY, ("hazard", "earthquake")),
        "landUse": _query(WAY, ("landuse", None)),
    }
)


def format_number(value: float) -> str:
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def render_query(
    query: CategoryQuery,
    latitude: float,
    longitude: float,
    radius: float,
    *,
    timeout_seconds: int = DEFAULT_QUERY_TIMEOUT_SECONDS,
) -> str:
    around = f"(around:{format_number(radius)},{format_number(latitude)},{format_number(longitude)})"
    statements = [
        f"{element_type}{tag_filter.render()}{around};"
        for tag_filter in query.filters
        for element_type in query.element_types
    ]
    lines = [f"[out:json][timeout:{timeout_seconds}];"]
    if len(statements) == 1:
        lines.extend(statements)
    else:
        lines.append("(")
        lines.extend(f"  {statement}" for statement in statements)
        lines.append(");")
    lines.extend(["out body;", ">;", "out skel qt;"])
    return "\n".join(lines)


def render_catalog(
    catalog: Mapping[str, CategoryQuery],
    latitude: float,
    longitude: float,
    radius: float,
    *,
    timeout_seconds: int = DEFAULT_QUERY_TIMEOUT_SECONDS,
) -> dict[str, str]:
    return {
        category: render_query(query, latitude, longitude, radius, timeout_seconds=timeout_seconds)
        for category, query in catalog.items()
    }


def validate_catalog(catalog: Mapping[str, CategoryQuery]) -> None:
    if not catalog:
        raise ConfigError("Query catalog is empty")
    for category, query in catalog.items():
        if not isinstance(category, str) or not category.strip():
            raise ConfigError(f"Invalid category name: {category!r}")
        if not query.element_types:
            raise ConfigError(f"Category {category} selects no element types")
        unknown_types = set(query.element_types) - set(ELEMENT_TYPES)
        if unknown_types:
            raise ConfigError(f"Category {category} has unknown element types: {', '.join(sorted(unknown_types))}")
        if not query.filters:
            raise ConfigError(f"Category {category} has no tag filters")
        for tag_filter in query.filters:
            if not tag_filter.key or '"' in tag_filter.key or (tag_filter.value and '"' in tag_filter.value):
                raise ConfigError(f"Category {category} has an invalid tag filter: {tag_filter}")

