"""Per-category one-line summaries of Overpass outcomes."""

from __future__ import annotations

import math
from dataclasses import dataclass
from functools import partial
from types import MappingProxyType
from typing import Callable, Mapping, Sequence

from infrascan.common.geometry import polygon_area
from infrascan.common.models import CategoryOutcome, Element, Failure, Location


@dataclass(frozen=True)
class SearchArea:
    location: Location
    radius: float

    @property
    def area_m2(self) -> float:
        return math.pi * self.radius * self.radius


SummaryRule = Callable[[str, Sequence[Element], SearchArea], str]


def count_elements(category: str, elements: Sequence[Element], area: SearchArea) -> str:
    del area
    return f"{len(elements)} {category}"


def polygon_coverage(category: str, elements: Sequence[Element], area: SearchArea) -> str:
    total_area = 0.0
    polygon_count = 0
    for element in elements:
        if element.geometry is not None and len(element.geometry) > 2:
            total_area += polygon_area(element.geometry, area.location.latitude)
            polygon_count += 1
    if polygon_count == 0:
        return f"No polygon data for {category}"
    # Unclamped: polygons reaching past the circle can exceed 100%.
    percentage = total_area / area.area_m2 * 100
    return f"{category} cover {percentage:.2f}% of the search area"


def tag_histogram(category: str, elements: Sequence[Element], area: SearchArea, *, tag: str) -> str:
    del category, area
    breakdown: dict[str, int] = {}
    for element in elements:
        value = element.tags.get(tag) or "unknown"
        breakdown[value] = breakdown.get(value, 0) + 1
    return ", ".join(f"{value}: {count}" for value, count in breakdown.items())


SUMMARY_RULES: Mapping[str, SummaryRule] = MappingProxyType(
    {
        "schools": polygon_coverage,
        "landUse": partial(tag_histogram, tag="landuse"),
    }
)


def summarize(
    category: str,
    outcome: CategoryOutcome,
    area: SearchArea,
    *,
    rules: Mapping[str, SummaryRule] = SUMMARY_RULES,
) -> str:
    if isinstance(outcome, Failure):
        return outcome.reason
    if not outcome.elements:
        return f"no {category}"
    rule = rules.get(category, count_elements)
    return rule(category, outcome.elements, area)
